import threading

import pytest

from fitcoach import create_app
from fitcoach.config import TestingConfig
from fitcoach.errors import FitcoachError
from fitcoach.extensions import db
from fitcoach.models import AssociationRequest, RequestStatus, User
from fitcoach.services import capacity, ledger


@pytest.fixture
def file_app(tmp_path, monkeypatch):
    # Threads need a shared database, which an in-memory SQLite is not
    monkeypatch.setattr(TestingConfig, "SQLALCHEMY_DATABASE_URI", f"sqlite:///{tmp_path / 'races.db'}")
    app = create_app("testing")
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()
        db.engine.dispose()


def _user(role, username, trainer=None, max_clients=15):
    user = User(
        username=username,
        email=f"{username}@example.com",
        name=username.title(),
        role=role,
        is_validated=True,
        trainer_id=trainer.id if trainer else None,
        max_clients=max_clients,
    )
    user.set_password("secret123")
    db.session.add(user)
    db.session.commit()
    return user


def _race(app, attempts):
    """Run each (request_id, actor_id) approval in its own thread, released together."""
    barrier = threading.Barrier(len(attempts))
    outcomes = []
    lock = threading.Lock()

    def attempt(request_id, actor_id):
        with app.app_context():
            barrier.wait()
            try:
                ledger.resolve(request_id, "approve", actor_id)
                outcome = "ok"
            except FitcoachError as e:
                outcome = type(e).__name__
            finally:
                db.session.remove()
            with lock:
                outcomes.append(outcome)

    threads = [threading.Thread(target=attempt, args=args) for args in attempts]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)
    return sorted(outcomes)


@pytest.mark.parametrize("round_", range(3))
def test_same_request_approved_from_two_threads(file_app, round_):
    trainer = _user("trainer", "coach")
    member = _user("client", "member")
    request = ledger.submit(member.id, trainer.id, "please")

    outcomes = _race(file_app, [(request.id, trainer.id), (request.id, trainer.id)])

    assert outcomes == ["InvalidStateError", "ok"]
    db.session.expire_all()
    assert db.session.get(AssociationRequest, request.id).status == RequestStatus.APPROVED.value
    assert db.session.get(User, member.id).trainer_id == trainer.id
    assert db.session.get(User, trainer.id).roster_version == 1


@pytest.mark.parametrize("round_", range(3))
def test_last_slot_approved_from_two_threads(file_app, round_):
    trainer = _user("trainer", "coach", max_clients=1)
    first = _user("client", "first")
    second = _user("client", "second")
    r1 = ledger.submit(first.id, trainer.id, "one")
    r2 = ledger.submit(second.id, trainer.id, "two")

    outcomes = _race(file_app, [(r1.id, trainer.id), (r2.id, trainer.id)])

    assert outcomes == ["CapacityExceededError", "ok"]
    db.session.expire_all()
    assert capacity.current_clients(trainer.id) == 1
    statuses = sorted(db.session.get(AssociationRequest, r.id).status for r in (r1, r2))
    assert statuses == [RequestStatus.APPROVED.value, RequestStatus.PENDING.value]
