"""Best-effort notification emitter.

Every notification is stored as a ``Notification`` row and pushed over
Socket.IO to the recipient's room (the room name is the user id). Callers
invoke it only after their own transaction has committed; a failure here is
logged and never propagates.
"""
import logging
from collections import namedtuple
from datetime import datetime

from fitcoach.extensions import db, socketio
from fitcoach.errors import ForbiddenError, NotFoundError
from fitcoach.models import Notification

PendingNotification = namedtuple(
    "PendingNotification",
    ["event_type", "recipient_id", "title", "message", "payload", "sender_id", "link"],
)

ASSOCIATION_REQUEST = "association_request"
ASSOCIATION_APPROVED = "association_approved"
ASSOCIATION_CONFIRMED = "association_confirmed"
ASSOCIATION_REJECTED = "association_rejected"
CLIENT_LEFT = "client_left"
CLIENT_UNLINKED = "client_unlinked"
ACCOUNT_VALIDATED = "account_validated"


def pending(event_type, recipient_id, title, message, payload=None, sender_id=None, link=None):
    return PendingNotification(event_type, recipient_id, title, message, payload or {}, sender_id, link)


def notify(event_type, recipient_id, title, message, payload=None, sender_id=None, link=None):
    try:
        notification = Notification(
            recipient_id=recipient_id,
            sender_id=sender_id,
            type=event_type,
            title=title,
            message=message,
            link=link,
            extra_data=payload or {},
            created_at=datetime.utcnow(),
        )
        db.session.add(notification)
        db.session.commit()

        socketio.emit(event_type, {
            "type": event_type,
            "notification_id": notification.id,
            "title": title,
            "message": message,
            "data": payload or {},
            "timestamp": notification.created_at.isoformat(),
        }, to=str(recipient_id))
        logging.info(f"Notification {event_type} sent to user {recipient_id}")
        return notification
    except Exception:
        db.session.rollback()
        logging.exception(f"Failed to deliver {event_type} notification to user {recipient_id}")
        return None


def dispatch(notifications):
    """Deliver a batch collected during a state transition."""
    for item in notifications:
        notify(
            item.event_type,
            item.recipient_id,
            item.title,
            item.message,
            payload=item.payload,
            sender_id=item.sender_id,
            link=item.link,
        )


def mark_read(notification_id, user_id):
    notification = Notification.query.filter_by(id=notification_id, recipient_id=user_id).first()
    if notification is None:
        return None
    if not notification.is_read:
        notification.mark_as_read()
        db.session.commit()
    return notification


def mark_all_read(user_id) -> int:
    updated = Notification.query.filter_by(recipient_id=user_id, is_read=False).update(
        {"is_read": True, "read_at": datetime.utcnow()}, synchronize_session=False
    )
    db.session.commit()
    return updated


def delete_notification(notification_id, user_id):
    notification = db.session.get(Notification, notification_id)
    if notification is None:
        raise NotFoundError("Notification not found")
    if notification.recipient_id != user_id:
        raise ForbiddenError("You can only delete your own notifications")
    db.session.delete(notification)
    db.session.commit()
