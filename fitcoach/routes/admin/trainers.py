from flask import request, jsonify

from fitcoach.schemas import TrainerSummarySchema, TrainerLimitSchema
from fitcoach.services import directory
from fitcoach.utils.decorators import role_required
from . import admin_bp

trainer_schema = TrainerSummarySchema()
trainers_schema = TrainerSummarySchema(many=True)
limit_schema = TrainerLimitSchema()


@admin_bp.route("/trainers", methods=["GET"])
@role_required("admin")
def trainers_list(current_user):
    """Validated trainers with their roster usage."""
    trainers = []
    for trainer, client_count in directory.trainers_with_counts(validated=True):
        data = trainer_schema.dump(trainer)
        data["current_clients"] = client_count
        data["has_capacity"] = client_count < trainer.max_clients
        trainers.append(data)
    return jsonify({"count": len(trainers), "trainers": trainers}), 200


@admin_bp.route("/trainers/pending", methods=["GET"])
@role_required("admin")
def pending_trainers(current_user):
    trainers = directory.list_pending_trainers()
    return jsonify({"count": len(trainers), "trainers": trainers_schema.dump(trainers)}), 200


@admin_bp.route("/trainers/<int:trainer_id>/validate", methods=["PATCH"])
@role_required("admin")
def validate_trainer(trainer_id, current_user):
    trainer = directory.validate_trainer(trainer_id, current_user.id)
    return jsonify({
        "msg": f"Personal trainer {trainer.name} validated successfully.",
        "trainer": trainer_schema.dump(trainer),
    }), 200


@admin_bp.route("/trainers/<int:trainer_id>/limit", methods=["PATCH"])
@role_required("admin")
def update_trainer_limit(trainer_id, current_user):
    data = limit_schema.load(request.get_json(silent=True) or {})
    trainer = directory.set_trainer_limit(trainer_id, data["max_clients"], current_user.id)
    return jsonify({"msg": "Limit updated", "trainer": trainer_schema.dump(trainer)}), 200


@admin_bp.route("/trainers/<int:trainer_id>", methods=["DELETE"])
@role_required("admin")
def delete_trainer(trainer_id, current_user):
    client_ids = directory.delete_trainer(trainer_id, current_user.id)
    return jsonify({"msg": "Trainer removed", "detached_clients": client_ids}), 200
