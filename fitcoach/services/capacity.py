"""Trainer capacity guard.

``current_clients`` is always computed from the directory. The only stored
roster field is ``User.roster_version``, which exists so an approval can claim
a slot with a compare-and-swap inside the resolver's transaction.
"""
from collections import namedtuple

from fitcoach.extensions import db
from fitcoach.errors import NotFoundError, CapacityExceededError, StaleRosterError
from fitcoach.models import User, Role

RosterSnapshot = namedtuple("RosterSnapshot", ["trainer_id", "count", "max_clients", "version"])


def current_clients(trainer_id) -> int:
    return User.query.filter_by(trainer_id=trainer_id, role=Role.CLIENT.value).count()


def has_capacity(trainer_id) -> bool:
    trainer = User.query.filter_by(id=trainer_id, role=Role.TRAINER.value).first()
    if trainer is None:
        raise NotFoundError("Trainer not found")
    return current_clients(trainer_id) < trainer.max_clients


def roster_snapshot(trainer_id) -> RosterSnapshot:
    # FOR UPDATE is a no-op on SQLite; the version swap in claim_slot still holds
    row = (
        db.session.query(User.max_clients, User.roster_version)
        .filter(User.id == trainer_id, User.role == Role.TRAINER.value)
        .with_for_update()
        .first()
    )
    if row is None:
        raise NotFoundError("Trainer not found")
    return RosterSnapshot(trainer_id, current_clients(trainer_id), row.max_clients, row.roster_version)


def claim_slot(snapshot: RosterSnapshot):
    if snapshot.count >= snapshot.max_clients:
        raise CapacityExceededError(
            f"Trainer has reached the maximum of {snapshot.max_clients} clients"
        )

    updated = User.query.filter_by(
        id=snapshot.trainer_id,
        roster_version=snapshot.version,
    ).update({"roster_version": snapshot.version + 1}, synchronize_session=False)

    if updated != 1:
        raise StaleRosterError()
