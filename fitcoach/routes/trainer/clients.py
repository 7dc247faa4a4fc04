from flask import jsonify

from fitcoach.schemas import UserSummarySchema
from fitcoach.services import directory, resolver
from fitcoach.utils.decorators import role_required
from . import trainer_bp

clients_schema = UserSummarySchema(many=True)


@trainer_bp.route("/clients", methods=["GET"])
@role_required("trainer")
def my_clients(current_user):
    clients = directory.list_clients_of(current_user.id)
    return jsonify({
        "count": len(clients),
        "max_clients": current_user.max_clients,
        "clients": clients_schema.dump(clients),
    }), 200


@trainer_bp.route("/clients/<int:client_id>", methods=["DELETE"])
@role_required("trainer")
def unlink_client(client_id, current_user):
    resolver.unlink_client(client_id, current_user.id)
    return jsonify({"msg": "Client removed from your list"}), 200
