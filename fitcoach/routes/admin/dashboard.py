from flask import jsonify

from fitcoach.schemas import UserSummarySchema
from fitcoach.services import directory, resolver, stats
from fitcoach.utils.decorators import role_required
from . import admin_bp

user_schema = UserSummarySchema()


@admin_bp.route("/stats", methods=["GET"])
@role_required("admin")
def admin_stats(current_user):
    return jsonify(stats.admin_stats()), 200


@admin_bp.route("/associations", methods=["GET"])
@role_required("admin")
def associations(current_user):
    """Active client -> trainer associations with each trainer's client count."""
    clients = directory.list_associations()
    counts = {}
    for client in clients:
        counts[client.trainer_id] = counts.get(client.trainer_id, 0) + 1

    items = []
    for client in clients:
        trainer = user_schema.dump(client.trainer)
        trainer["client_count"] = counts[client.trainer_id]
        trainer["max_clients"] = client.trainer.max_clients
        items.append({
            "client": user_schema.dump(client),
            "trainer": trainer,
        })
    return jsonify({"count": len(items), "associations": items}), 200


@admin_bp.route("/associations/<int:client_id>", methods=["DELETE"])
@role_required("admin")
def remove_association(client_id, current_user):
    resolver.unlink_client(client_id, current_user.id)
    return jsonify({"msg": "Association removed successfully"}), 200
