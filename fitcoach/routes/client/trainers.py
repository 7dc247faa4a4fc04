from flask import jsonify

from fitcoach.schemas import UserSummarySchema
from fitcoach.services import directory
from fitcoach.utils.decorators import role_required
from . import client_bp

trainer_schema = UserSummarySchema()


@client_bp.route("/trainers", methods=["GET"])
@role_required("client")
def validated_trainers(current_user):
    trainers = []
    for trainer, client_count in directory.trainers_with_counts(validated=True):
        data = trainer_schema.dump(trainer)
        data.update({
            "current_clients": client_count,
            "max_clients": trainer.max_clients,
            "has_capacity": client_count < trainer.max_clients,
            "is_my_trainer": trainer.id == current_user.trainer_id,
        })
        trainers.append(data)
    return jsonify({"count": len(trainers), "trainers": trainers}), 200


@client_bp.route("/trainer", methods=["GET"])
@role_required("client")
def my_trainer(current_user):
    if current_user.trainer is None:
        return jsonify({"trainer": None}), 200
    return jsonify({"trainer": trainer_schema.dump(current_user.trainer)}), 200
