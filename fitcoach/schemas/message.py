from marshmallow import EXCLUDE, fields, validate
from fitcoach.extensions import ma
from fitcoach.models import Message


class MessageSchema(ma.SQLAlchemySchema):
    class Meta:
        model = Message

    id = ma.auto_field()
    sender_id = ma.auto_field()
    receiver_id = ma.auto_field()
    content = ma.auto_field()
    sent_at = ma.auto_field()
    is_read = ma.auto_field()


class SendMessageSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    receiver_id = fields.Integer(required=True)
    content = fields.String(required=True, validate=validate.Length(max=2000))
