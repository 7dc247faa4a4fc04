from marshmallow import EXCLUDE, fields, validate
from fitcoach.extensions import ma
from fitcoach.models import AssociationRequest
from .user import UserSummarySchema


class AssociationRequestSchema(ma.SQLAlchemySchema):
    class Meta:
        model = AssociationRequest

    id = ma.auto_field()
    client = ma.Nested(UserSummarySchema)
    target_trainer = ma.Nested(UserSummarySchema)
    current_trainer = ma.Nested(UserSummarySchema, allow_none=True)
    kind = fields.Function(lambda obj: obj.kind.value)
    reason = ma.auto_field()
    status = ma.auto_field()
    created_at = ma.auto_field()
    resolved_at = ma.auto_field()
    resolved_by_id = ma.auto_field()


class SubmitRequestSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    trainer_id = fields.Integer(required=True)
    # Emptiness is checked by the ledger so the error kind stays consistent
    reason = fields.String(load_default="")


class DecisionSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    action = fields.String(required=True, validate=validate.OneOf(["approve", "reject"]))
