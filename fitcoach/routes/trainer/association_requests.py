from flask import jsonify

from fitcoach.schemas import AssociationRequestSchema
from fitcoach.services import ledger
from fitcoach.utils.decorators import role_required
from . import trainer_bp

request_schema = AssociationRequestSchema()
requests_schema = AssociationRequestSchema(many=True)


@trainer_bp.route("/requests", methods=["GET"])
@role_required("trainer")
def pending_requests(current_user):
    items = ledger.list_pending_for_trainer(current_user.id)
    return jsonify({"count": len(items), "requests": requests_schema.dump(items)}), 200


@trainer_bp.route("/requests/<int:request_id>/accept", methods=["PATCH"])
@role_required("trainer")
def accept_request(request_id, current_user):
    association_request = ledger.resolve(request_id, "approve", current_user.id)
    return jsonify({
        "msg": "Request accepted. Client added to your list.",
        "request": request_schema.dump(association_request),
    }), 200


@trainer_bp.route("/requests/<int:request_id>/reject", methods=["PATCH"])
@role_required("trainer")
def reject_request(request_id, current_user):
    association_request = ledger.resolve(request_id, "reject", current_user.id)
    return jsonify({
        "msg": "Request rejected",
        "request": request_schema.dump(association_request),
    }), 200
