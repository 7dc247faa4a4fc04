from flask import request, jsonify

from fitcoach.errors import ValidationError
from fitcoach.models import RequestKind
from fitcoach.schemas import AssociationRequestSchema, DecisionSchema
from fitcoach.services import ledger
from fitcoach.utils.decorators import role_required
from . import admin_bp

request_schema = AssociationRequestSchema()
requests_schema = AssociationRequestSchema(many=True)
decision_schema = DecisionSchema()


@admin_bp.route("/requests/pending", methods=["GET"])
@role_required("admin")
def pending_requests(current_user):
    """Pending requests; trainer change requests unless ?kind= says otherwise."""
    kind = request.args.get("kind", RequestKind.CHANGE.value)
    if kind == "all":
        kind = None
    else:
        try:
            kind = RequestKind(kind)
        except ValueError:
            raise ValidationError("kind must be 'new', 'change' or 'all'")

    items = ledger.list_pending_for_admin(kind)
    return jsonify({"count": len(items), "requests": requests_schema.dump(items)}), 200


@admin_bp.route("/requests/<int:request_id>", methods=["PATCH"])
@role_required("admin")
def decide_request(request_id, current_user):
    data = decision_schema.load(request.get_json(silent=True) or {})
    association_request = ledger.resolve(request_id, data["action"], current_user.id)

    verb = "approved" if data["action"] == "approve" else "rejected"
    return jsonify({
        "msg": f"Request {verb} successfully.",
        "request": request_schema.dump(association_request),
    }), 200


@admin_bp.route("/requests/<int:request_id>", methods=["DELETE"])
@role_required("admin")
def delete_request(request_id, current_user):
    ledger.delete(request_id, current_user.id)
    return jsonify({"msg": "Request removed"}), 200


@admin_bp.route("/requests/history", methods=["GET"])
@role_required("admin")
def request_history(current_user):
    items = ledger.list_history(
        status=request.args.get("status"),
        client_id=request.args.get("client_id", type=int),
        trainer_id=request.args.get("trainer_id", type=int),
        limit=request.args.get("limit", type=int),
    )
    return jsonify({"count": len(items), "requests": requests_schema.dump(items)}), 200
