"""User directory: registration, trainer listings and admin trainer management."""
import logging

from flask import current_app
from sqlalchemy import func, or_

from fitcoach.extensions import db
from fitcoach.errors import ConflictError, NotFoundError, ValidationError
from fitcoach.models import User, Role, AssociationRequest, Notification
from fitcoach.services import notifications, resolver
from fitcoach.services.audit import record_activity


def register_user(username, email, name, password, role=Role.CLIENT.value) -> User:
    role = Role(role)
    if role is Role.ADMIN:
        raise ValidationError("Administrators cannot self-register")

    existing = User.query.filter(or_(User.email == email, User.username == username)).first()
    if existing:
        raise ConflictError("Username or email already in use")

    user = User(
        username=username,
        email=email,
        name=name,
        role=role.value,
        # Trainers wait for admin validation, clients can use the app right away
        is_validated=role is not Role.TRAINER,
        max_clients=current_app.config.get("DEFAULT_MAX_CLIENTS", 15),
    )
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    logging.info(f"Registered {role.value} {user.username} ({user.id})")
    return user


def authenticate(login, password):
    login = (login or "").strip()
    user = User.query.filter(or_(User.email == login.lower(), User.username == login)).first()
    if user is None or not user.check_password(password):
        return None
    return user


def get_user(user_id, role=None) -> User:
    query = User.query.filter_by(id=user_id)
    if role is not None:
        query = query.filter_by(role=Role(role).value)
    user = query.first()
    if user is None:
        raise NotFoundError(f"{(role or 'user').capitalize()} not found")
    return user


def trainers_with_counts(validated=True):
    """Trainers paired with their current client count, in one query."""
    counts = (
        db.session.query(User.trainer_id, func.count(User.id).label("client_count"))
        .filter(User.role == Role.CLIENT.value, User.trainer_id.isnot(None))
        .group_by(User.trainer_id)
        .subquery()
    )
    rows = (
        db.session.query(User, func.coalesce(counts.c.client_count, 0))
        .outerjoin(counts, counts.c.trainer_id == User.id)
        .filter(User.role == Role.TRAINER.value, User.is_validated == validated)
        .order_by(User.name)
        .all()
    )
    return rows


def list_clients_of(trainer_id):
    return User.query.filter_by(trainer_id=trainer_id, role=Role.CLIENT.value).order_by(User.name).all()


def list_associations():
    return (
        User.query.filter(User.role == Role.CLIENT.value, User.trainer_id.isnot(None))
        .order_by(User.trainer_id, User.name)
        .all()
    )


def list_pending_trainers():
    return User.query.filter_by(role=Role.TRAINER.value, is_validated=False).order_by(User.created_at).all()


def validate_trainer(trainer_id, admin_id) -> User:
    updated = User.query.filter_by(
        id=trainer_id, role=Role.TRAINER.value, is_validated=False
    ).update({"is_validated": True}, synchronize_session=False)
    if updated != 1:
        db.session.rollback()
        raise NotFoundError("Trainer not found or already validated")

    record_activity(admin_id, "Validated trainer", trainer_id=trainer_id, admin_action=True)
    db.session.commit()

    trainer = db.session.get(User, trainer_id)
    logging.info(f"Trainer {trainer_id} validated by admin {admin_id}")
    notifications.notify(
        notifications.ACCOUNT_VALIDATED,
        trainer.id,
        "Account validated",
        f"Congratulations {trainer.name}! Your personal trainer account has been validated.",
        sender_id=admin_id,
    )
    return trainer


def set_trainer_limit(trainer_id, max_clients, admin_id) -> User:
    # Lowering the limit below the current load is allowed; nobody is evicted
    if max_clients < 1:
        raise ValidationError("Limit must be at least 1")
    trainer = get_user(trainer_id, Role.TRAINER.value)
    previous = trainer.max_clients
    trainer.max_clients = max_clients
    record_activity(
        admin_id,
        "Changed trainer client limit",
        trainer_id=trainer.id,
        previous=previous,
        max_clients=max_clients,
        admin_action=True,
    )
    db.session.commit()
    if trainer.current_clients > max_clients:
        logging.warning(
            f"Trainer {trainer.id} now has {trainer.current_clients} clients over a limit of {max_clients}"
        )
    return trainer


def delete_trainer(trainer_id, admin_id):
    trainer = get_user(trainer_id, Role.TRAINER.value)
    client_ids = resolver.detach_trainer(trainer.id)
    record_activity(
        admin_id,
        "Deleted trainer",
        trainer_id=trainer.id,
        trainer_name=trainer.name,
        detached_clients=client_ids,
        admin_action=True,
    )
    db.session.delete(trainer)
    db.session.commit()
    logging.info(f"Trainer {trainer_id} deleted by admin {admin_id}, {len(client_ids)} clients detached")

    for client_id in client_ids:
        notifications.notify(
            notifications.CLIENT_UNLINKED,
            client_id,
            "Trainer association removed",
            "Your personal trainer is no longer available. You can request a new one.",
            payload={"trainer_id": trainer_id},
            sender_id=admin_id,
        )
    return client_ids


def list_users(role=None):
    query = User.query
    if role:
        try:
            role = Role(role)
        except ValueError:
            raise ValidationError("role must be 'client', 'trainer' or 'admin'")
        query = query.filter_by(role=role.value)
    return query.order_by(User.created_at.desc(), User.id.desc()).all()


def delete_user(user_id, admin_id):
    """Delete any account, cleaning up what references it.

    Trainers go through the trainer sweep. A client's requests are removed
    with the account. Returns the ids of clients left without a trainer.
    """
    if user_id == admin_id:
        raise ValidationError("You cannot delete your own account")

    user = get_user(user_id)
    if user.is_trainer:
        return delete_trainer(user.id, admin_id)
    role = user.role

    AssociationRequest.query.filter_by(client_id=user.id).delete(synchronize_session=False)
    AssociationRequest.query.filter_by(resolved_by_id=user.id).update(
        {"resolved_by_id": None}, synchronize_session=False
    )
    Notification.query.filter_by(sender_id=user.id).update({"sender_id": None}, synchronize_session=False)
    record_activity(
        admin_id,
        "Deleted user",
        user_id=user.id,
        username=user.username,
        role=role,
        admin_action=True,
    )
    db.session.delete(user)
    db.session.commit()
    logging.info(f"User {user_id} ({role}) deleted by admin {admin_id}")
    return []
