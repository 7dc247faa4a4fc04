from fitcoach.extensions import ma
from fitcoach.models import Notification


class NotificationSchema(ma.SQLAlchemySchema):
    class Meta:
        model = Notification

    id = ma.auto_field()
    sender_id = ma.auto_field()
    type = ma.auto_field()
    title = ma.auto_field()
    message = ma.auto_field()
    link = ma.auto_field()
    extra_data = ma.auto_field()
    is_read = ma.auto_field()
    read_at = ma.auto_field()
    created_at = ma.auto_field()
