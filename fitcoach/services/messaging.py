"""Direct messages between a trainer and their clients.

A trainer may only talk to clients currently assigned to them, and a client
only to their own trainer. Admins can message and be messaged by anyone.
"""
import logging
from datetime import datetime

from sqlalchemy import and_, or_

from fitcoach.extensions import db, socketio
from fitcoach.errors import ForbiddenError, NotFoundError, ValidationError
from fitcoach.models import Message, User

NEW_MESSAGE = "new_message"


def can_message(sender: User, receiver: User) -> bool:
    if sender.id == receiver.id:
        return False
    if sender.is_admin or receiver.is_admin:
        return True
    if sender.is_trainer and receiver.is_client:
        return receiver.trainer_id == sender.id
    if sender.is_client and receiver.is_trainer:
        return sender.trainer_id == receiver.id
    return False


def _load_pair(user_id, other_id):
    user = db.session.get(User, user_id)
    other = db.session.get(User, other_id)
    if user is None or other is None:
        raise NotFoundError("User not found")
    if not can_message(user, other):
        raise ForbiddenError("You can only message your own trainer or clients")
    return user, other


def send_message(sender_id, receiver_id, content) -> Message:
    content = (content or "").strip()
    if not content:
        raise ValidationError("Message content is required")

    sender, receiver = _load_pair(sender_id, receiver_id)
    message = Message(
        sender_id=sender.id,
        receiver_id=receiver.id,
        content=content,
        sent_at=datetime.utcnow(),
        is_read=False,
    )
    db.session.add(message)
    db.session.commit()
    logging.info(f"Message {message.id} sent from user {sender.id} to user {receiver.id}")

    try:
        socketio.emit(NEW_MESSAGE, {
            "id": message.id,
            "sender_id": message.sender_id,
            "sender_name": sender.name,
            "content": message.content,
            "sent_at": message.sent_at.isoformat(),
            "is_read": message.is_read,
        }, to=str(receiver.id))
    except Exception:
        logging.exception(f"Failed to push message {message.id} to user {receiver.id}")
    return message


def conversation(user_id, other_id):
    """Both directions of a conversation, oldest first. Incoming messages are marked read."""
    user, other = _load_pair(user_id, other_id)

    Message.query.filter_by(sender_id=other.id, receiver_id=user.id, is_read=False).update(
        {"is_read": True}, synchronize_session=False
    )
    db.session.commit()

    return Message.query.filter(or_(
        and_(Message.sender_id == user.id, Message.receiver_id == other.id),
        and_(Message.sender_id == other.id, Message.receiver_id == user.id),
    )).order_by(Message.sent_at, Message.id).all()


def unread_for(user_id):
    return Message.query.filter_by(receiver_id=user_id, is_read=False).order_by(
        Message.sent_at.desc(), Message.id.desc()
    ).all()
