from flask import request, jsonify

from fitcoach.schemas import UserSchema
from fitcoach.services import directory
from fitcoach.utils.decorators import role_required
from . import admin_bp

users_schema = UserSchema(many=True)


@admin_bp.route("/users", methods=["GET"])
@role_required("admin")
def users_list(current_user):
    """All accounts, newest first; ?role= narrows to one role."""
    users = directory.list_users(request.args.get("role"))
    return jsonify({"count": len(users), "users": users_schema.dump(users)}), 200


@admin_bp.route("/users/<int:user_id>", methods=["DELETE"])
@role_required("admin")
def delete_user(user_id, current_user):
    client_ids = directory.delete_user(user_id, current_user.id)
    return jsonify({"msg": "User deleted successfully", "detached_clients": client_ids}), 200
