"""Association request ledger: submission, queues and history."""
import logging

from flask import current_app
from sqlalchemy import desc, or_
from sqlalchemy.exc import IntegrityError

from fitcoach.extensions import db
from fitcoach.errors import ValidationError, ConflictError, NotFoundError, ForbiddenError, InvalidStateError
from fitcoach.models import User, Role, AssociationRequest, RequestStatus, RequestKind
from fitcoach.services import notifications, resolver
from fitcoach.services.audit import record_activity

TERMINAL_STATUSES = (RequestStatus.APPROVED.value, RequestStatus.REJECTED.value)


def pending_for_client(client_id):
    return AssociationRequest.query.filter_by(
        client_id=client_id,
        status=RequestStatus.PENDING.value,
    ).first()


def get_request(request_id) -> AssociationRequest:
    request = db.session.get(AssociationRequest, request_id)
    if request is None:
        raise NotFoundError("Request not found")
    return request


def submit(client_id, trainer_id, reason) -> AssociationRequest:
    """Store a pending request from a client to a validated trainer.

    The client's current trainer, if any, is snapshotted into
    ``current_trainer_id`` which makes the record a change request.
    """
    reason = (reason or "").strip()
    if not reason:
        raise ValidationError("Reason is required")
    max_length = current_app.config.get("REASON_MAX_LENGTH", 500)
    if len(reason) > max_length:
        raise ValidationError(f"Reason cannot exceed {max_length} characters")

    client = db.session.get(User, client_id)
    if client is None:
        raise NotFoundError("Client not found")
    if not client.is_client:
        raise ValidationError("Only clients can request a trainer")

    trainer = User.query.filter_by(id=trainer_id, role=Role.TRAINER.value, is_validated=True).first()
    if trainer is None:
        raise NotFoundError("Trainer not found or not validated")
    if client.trainer_id == trainer.id:
        raise ValidationError("You are already coached by this trainer")

    if pending_for_client(client.id) is not None:
        raise ConflictError("A pending request already exists")

    request = AssociationRequest(
        client_id=client.id,
        target_trainer_id=trainer.id,
        current_trainer_id=client.trainer_id,
        reason=reason,
        status=RequestStatus.PENDING.value,
    )
    db.session.add(request)
    try:
        db.session.commit()
    except IntegrityError:
        # A concurrent submit won the partial unique index
        db.session.rollback()
        raise ConflictError("A pending request already exists")

    logging.info(f"Client {client.id} submitted {request.kind.value} request {request.id} to trainer {trainer.id}")

    if request.kind is RequestKind.NEW:
        message = f"{client.name} would like you to be their personal trainer."
    else:
        message = f"{client.name} asked to switch to you. An administrator will review the request."
    notifications.notify(
        notifications.ASSOCIATION_REQUEST,
        trainer.id,
        "New coaching request",
        message,
        payload={"request_id": request.id, "kind": request.kind.value},
        sender_id=client.id,
    )
    return request


def list_pending_for_trainer(trainer_id):
    # Oldest first so trainers work through their queue in arrival order
    return AssociationRequest.query.filter_by(
        target_trainer_id=trainer_id,
        status=RequestStatus.PENDING.value,
    ).order_by(AssociationRequest.created_at, AssociationRequest.id).all()


def list_pending_for_admin(kind=None):
    query = AssociationRequest.query.filter_by(status=RequestStatus.PENDING.value)
    if kind == RequestKind.CHANGE:
        query = query.filter(AssociationRequest.current_trainer_id.isnot(None))
    elif kind == RequestKind.NEW:
        query = query.filter(AssociationRequest.current_trainer_id.is_(None))
    return query.order_by(AssociationRequest.created_at, AssociationRequest.id).all()


def list_history(status=None, client_id=None, trainer_id=None, limit=None):
    query = AssociationRequest.query.filter(AssociationRequest.status.in_(TERMINAL_STATUSES))
    if status:
        if status not in TERMINAL_STATUSES:
            raise ValidationError("Status filter must be 'approved' or 'rejected'")
        query = query.filter(AssociationRequest.status == status)
    if client_id:
        query = query.filter(AssociationRequest.client_id == client_id)
    if trainer_id:
        query = query.filter(or_(
            AssociationRequest.target_trainer_id == trainer_id,
            AssociationRequest.current_trainer_id == trainer_id,
        ))
    if limit is None:
        limit = current_app.config.get("HISTORY_LIMIT", 100)
    return query.order_by(
        desc(AssociationRequest.resolved_at),
        desc(AssociationRequest.created_at),
        desc(AssociationRequest.id),
    ).limit(limit).all()


def list_for_client(client_id):
    return AssociationRequest.query.filter_by(client_id=client_id).order_by(
        desc(AssociationRequest.created_at), desc(AssociationRequest.id)
    ).all()


def resolve(request_id, outcome, acting_user_id) -> AssociationRequest:
    return resolver.resolve(request_id, outcome, acting_user_id)


def withdraw(request_id, client_id):
    """Let a client delete their own request while it is still pending."""
    request = get_request(request_id)
    if request.client_id != client_id:
        raise ForbiddenError("You can only withdraw your own requests")

    deleted = AssociationRequest.query.filter_by(
        id=request.id,
        status=RequestStatus.PENDING.value,
    ).delete(synchronize_session=False)
    if deleted != 1:
        db.session.rollback()
        raise InvalidStateError()

    db.session.commit()
    logging.info(f"Client {client_id} withdrew request {request_id}")


def delete(request_id, admin_id):
    """Hard-delete a request record. Only invoked explicitly by an admin."""
    request = get_request(request_id)
    details = {
        "request_id": request.id,
        "client_id": request.client_id,
        "target_trainer_id": request.target_trainer_id,
        "status": request.status,
    }
    db.session.delete(request)
    record_activity(admin_id, "Deleted association request", admin_action=True, **details)
    db.session.commit()
    logging.info(f"Admin {admin_id} deleted request {request_id}")
