from flask import request, jsonify

from fitcoach.schemas import AssociationRequestSchema, SubmitRequestSchema
from fitcoach.services import ledger
from fitcoach.utils.decorators import role_required
from . import client_bp

request_schema = AssociationRequestSchema()
requests_schema = AssociationRequestSchema(many=True)
submit_schema = SubmitRequestSchema()


@client_bp.route("/requests", methods=["POST"])
@role_required("client")
def submit_request(current_user):
    data = submit_schema.load(request.get_json(silent=True) or {})
    association_request = ledger.submit(current_user.id, data["trainer_id"], data["reason"])

    if association_request.current_trainer_id:
        msg = "Trainer change request sent for administrator approval."
    else:
        msg = "Request sent to the trainer."
    return jsonify({"msg": msg, "request": request_schema.dump(association_request)}), 201


@client_bp.route("/requests", methods=["GET"])
@role_required("client")
def my_requests(current_user):
    items = ledger.list_for_client(current_user.id)
    return jsonify({"count": len(items), "requests": requests_schema.dump(items)}), 200


@client_bp.route("/requests/<int:request_id>", methods=["DELETE"])
@role_required("client")
def withdraw_request(request_id, current_user):
    ledger.withdraw(request_id, current_user.id)
    return jsonify({"msg": "Request withdrawn"}), 200
