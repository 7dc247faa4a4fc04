"""Association resolver.

The only code allowed to write ``User.trainer_id``. Each decision runs as one
transaction: authorization, capacity claim, directory write and a
compare-and-swap of the request status. Notifications go out after commit.
"""
import enum
import logging
from datetime import datetime

from flask import current_app
from sqlalchemy import or_

from fitcoach.extensions import db
from fitcoach.errors import (
    ForbiddenError, NotFoundError, InvalidStateError, ConflictError,
    ValidationError, StaleRosterError,
)
from fitcoach.models import User, Role, AssociationRequest, RequestStatus, RequestKind, Notification
from fitcoach.services import capacity, notifications
from fitcoach.services.audit import record_activity


class Outcome(str, enum.Enum):
    APPROVE = "approve"
    REJECT = "reject"


def _load_request(request_id):
    return db.session.get(AssociationRequest, request_id)


def _load_actor(acting_user_id) -> User:
    actor = db.session.get(User, acting_user_id)
    if actor is None:
        raise ForbiddenError("Unknown user")
    return actor


def authorize(actor: User, request) -> None:
    """New requests belong to the target trainer, change requests to admins."""
    if request.kind is RequestKind.NEW:
        if actor.role_enum is Role.TRAINER and actor.id == request.target_trainer_id:
            return
        raise ForbiddenError("Only the requested trainer can resolve this request")

    if actor.role_enum is Role.ADMIN:
        return
    raise ForbiddenError("Trainer change requests can only be resolved by an administrator")


def _transition(request_id, status, actor_id) -> None:
    updated = AssociationRequest.query.filter_by(
        id=request_id,
        status=RequestStatus.PENDING.value,
    ).update({
        "status": status,
        "resolved_at": datetime.utcnow(),
        "resolved_by_id": actor_id,
    }, synchronize_session=False)
    if updated != 1:
        raise InvalidStateError()


def _approve(request, actor):
    snapshot = capacity.roster_snapshot(request.target_trainer_id)
    capacity.claim_slot(snapshot)

    client = db.session.get(User, request.client_id)
    if client is None:
        raise NotFoundError("Client not found")
    previous_trainer_id = client.trainer_id
    client.trainer_id = request.target_trainer_id

    _transition(request.id, RequestStatus.APPROVED.value, actor.id)
    record_activity(
        actor.id,
        "Approved association request",
        request_id=request.id,
        client_id=request.client_id,
        trainer_id=request.target_trainer_id,
        previous_trainer_id=previous_trainer_id,
        admin_action=actor.is_admin,
    )

    trainer = db.session.get(User, request.target_trainer_id)
    outgoing = [
        notifications.pending(
            notifications.ASSOCIATION_APPROVED,
            request.client_id,
            "Request approved",
            f"{trainer.name} is now your personal trainer.",
            payload={"request_id": request.id, "trainer_id": trainer.id},
            sender_id=actor.id,
        ),
        notifications.pending(
            notifications.ASSOCIATION_CONFIRMED,
            trainer.id,
            "New client",
            f"{client.name} has been added to your client list.",
            payload={"request_id": request.id, "client_id": client.id},
            sender_id=actor.id,
        ),
    ]
    if previous_trainer_id and previous_trainer_id != trainer.id:
        outgoing.append(notifications.pending(
            notifications.CLIENT_LEFT,
            previous_trainer_id,
            "Client changed trainer",
            f"{client.name} is now coached by {trainer.name}.",
            payload={"request_id": request.id, "client_id": client.id},
            sender_id=actor.id,
        ))
    return outgoing


def _reject(request, actor):
    _transition(request.id, RequestStatus.REJECTED.value, actor.id)
    record_activity(
        actor.id,
        "Rejected association request",
        request_id=request.id,
        client_id=request.client_id,
        trainer_id=request.target_trainer_id,
        admin_action=actor.is_admin,
    )

    if actor.is_admin:
        message = "Your trainer change request was rejected by an administrator."
    else:
        message = f"{actor.name} is not able to take you on as a client right now."
    return [notifications.pending(
        notifications.ASSOCIATION_REJECTED,
        request.client_id,
        "Request rejected",
        message,
        payload={"request_id": request.id, "kind": request.kind.value},
        sender_id=actor.id,
    )]


def _resolve_once(request_id, outcome, actor_id):
    actor = _load_actor(actor_id)
    request = _load_request(request_id)
    if request is None:
        raise NotFoundError("Request not found")

    authorize(actor, request)
    if not request.is_pending:
        raise InvalidStateError()

    if outcome is Outcome.APPROVE:
        return _approve(request, actor)
    return _reject(request, actor)


def resolve(request_id, outcome, acting_user_id) -> AssociationRequest:
    """Approve or reject a pending request on behalf of ``acting_user_id``.

    A lost roster swap means another approval for the same trainer committed
    first; the whole decision is retried on fresh data.
    """
    try:
        outcome = Outcome(outcome)
    except ValueError:
        raise ValidationError("Invalid action. Use 'approve' or 'reject'.")

    max_retries = current_app.config.get("RESOLVE_MAX_RETRIES", 3)
    for attempt in range(max_retries + 1):
        try:
            outgoing = _resolve_once(request_id, outcome, acting_user_id)
            db.session.commit()
            break
        except StaleRosterError:
            db.session.rollback()
            logging.info(f"Roster changed while resolving request {request_id}, retry {attempt + 1}")
        except Exception:
            db.session.rollback()
            raise
    else:
        raise ConflictError("Trainer roster is changing, please try again")

    logging.info(f"Request {request_id} resolved with {outcome.value} by user {acting_user_id}")
    notifications.dispatch(outgoing)
    return db.session.get(AssociationRequest, request_id)


def unlink_client(client_id, acting_user_id) -> User:
    """Remove a client's association. Does not touch the request ledger."""
    actor = _load_actor(acting_user_id)
    client = User.query.filter_by(id=client_id, role=Role.CLIENT.value).first()
    if client is None or client.trainer_id is None:
        raise NotFoundError("Client has no associated trainer")

    trainer_id = client.trainer_id
    if not (actor.is_admin or (actor.is_trainer and actor.id == trainer_id)):
        raise ForbiddenError("Client not found or not associated with this trainer")

    updated = User.query.filter_by(id=client.id, trainer_id=trainer_id).update(
        {"trainer_id": None}, synchronize_session=False
    )
    if updated != 1:
        db.session.rollback()
        raise NotFoundError("Client has no associated trainer")

    record_activity(
        actor.id,
        "Unlinked client from trainer",
        client_id=client.id,
        trainer_id=trainer_id,
        admin_action=actor.is_admin,
    )
    db.session.commit()
    logging.info(f"Client {client_id} unlinked from trainer {trainer_id} by user {actor.id}")

    outgoing = [notifications.pending(
        notifications.CLIENT_UNLINKED,
        client_id,
        "Trainer association removed",
        "You are no longer associated with your personal trainer.",
        payload={"trainer_id": trainer_id},
        sender_id=actor.id,
    )]
    if actor.is_admin:
        outgoing.append(notifications.pending(
            notifications.CLIENT_UNLINKED,
            trainer_id,
            "Client removed",
            "An administrator removed one of your clients.",
            payload={"client_id": client_id},
            sender_id=actor.id,
        ))
    notifications.dispatch(outgoing)
    return db.session.get(User, client_id)


def detach_trainer(trainer_id):
    """Clear every reference to a trainer ahead of its deletion.

    Runs inside the caller's transaction and returns the ids of the clients
    that lost their trainer.
    """
    client_ids = [
        row.id for row in db.session.query(User.id).filter(User.trainer_id == trainer_id).all()
    ]
    User.query.filter_by(trainer_id=trainer_id).update({"trainer_id": None}, synchronize_session=False)

    AssociationRequest.query.filter(or_(
        AssociationRequest.target_trainer_id == trainer_id,
        AssociationRequest.current_trainer_id == trainer_id,
    )).delete(synchronize_session=False)
    AssociationRequest.query.filter_by(resolved_by_id=trainer_id).update(
        {"resolved_by_id": None}, synchronize_session=False
    )
    Notification.query.filter_by(sender_id=trainer_id).update({"sender_id": None}, synchronize_session=False)
    return client_ids
