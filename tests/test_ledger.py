import pytest

from fitcoach.errors import ValidationError, ConflictError, NotFoundError, ForbiddenError, InvalidStateError
from fitcoach.models import AssociationRequest, ActivityLog, Notification, RequestKind, RequestStatus
from fitcoach.services import ledger
from tests.helpers import reload


class TestSubmit:

    def test_new_request_is_pending_without_current_trainer(self, make_user):
        trainer = make_user("trainer")
        client = make_user("client")

        request = ledger.submit(client.id, trainer.id, "  I want to get stronger  ")

        assert request.status == RequestStatus.PENDING.value
        assert request.kind is RequestKind.NEW
        assert request.current_trainer_id is None
        assert request.target_trainer_id == trainer.id
        assert request.reason == "I want to get stronger"
        assert request.resolved_at is None

    def test_change_request_snapshots_current_trainer(self, make_user):
        t1 = make_user("trainer")
        t2 = make_user("trainer")
        client = make_user("client", trainer=t1)

        request = ledger.submit(client.id, t2.id, "schedule conflict")

        assert request.kind is RequestKind.CHANGE
        assert request.current_trainer_id == t1.id
        assert request.target_trainer_id == t2.id

    @pytest.mark.parametrize("reason", ["", "   ", None])
    def test_empty_reason_fails_and_creates_nothing(self, make_user, reason):
        trainer = make_user("trainer")
        client = make_user("client")

        with pytest.raises(ValidationError):
            ledger.submit(client.id, trainer.id, reason)

        assert AssociationRequest.query.count() == 0

    def test_overlong_reason_is_rejected(self, make_user):
        trainer = make_user("trainer")
        client = make_user("client")

        with pytest.raises(ValidationError):
            ledger.submit(client.id, trainer.id, "x" * 501)

    def test_only_clients_can_submit(self, make_user):
        trainer = make_user("trainer")
        other_trainer = make_user("trainer")

        with pytest.raises(ValidationError):
            ledger.submit(other_trainer.id, trainer.id, "please")

    def test_unvalidated_trainer_is_not_found(self, make_user):
        trainer = make_user("trainer", validated=False)
        client = make_user("client")

        with pytest.raises(NotFoundError):
            ledger.submit(client.id, trainer.id, "please")

    def test_target_must_be_a_trainer(self, make_user):
        client = make_user("client")
        other_client = make_user("client")

        with pytest.raises(NotFoundError):
            ledger.submit(client.id, other_client.id, "please")

    def test_cannot_request_own_trainer(self, make_user):
        trainer = make_user("trainer")
        client = make_user("client", trainer=trainer)

        with pytest.raises(ValidationError):
            ledger.submit(client.id, trainer.id, "again")

    def test_second_pending_request_conflicts(self, make_user):
        t1 = make_user("trainer")
        t2 = make_user("trainer")
        client = make_user("client")
        ledger.submit(client.id, t1.id, "first")

        with pytest.raises(ConflictError):
            ledger.submit(client.id, t2.id, "second")

        assert AssociationRequest.query.filter_by(client_id=client.id).count() == 1

    def test_new_submission_allowed_after_resolution(self, make_user):
        t1 = make_user("trainer")
        t2 = make_user("trainer")
        client = make_user("client")
        first = ledger.submit(client.id, t1.id, "first")
        ledger.resolve(first.id, "reject", t1.id)

        second = ledger.submit(client.id, t2.id, "second")

        assert second.is_pending

    def test_database_rejects_second_pending_row(self, make_user):
        trainer = make_user("trainer")
        client = make_user("client")
        ledger.submit(client.id, trainer.id, "first")

        from sqlalchemy.exc import IntegrityError
        from fitcoach.extensions import db

        db.session.add(AssociationRequest(
            client_id=client.id,
            target_trainer_id=trainer.id,
            reason="sneaky duplicate",
            status=RequestStatus.PENDING.value,
        ))
        with pytest.raises(IntegrityError):
            db.session.commit()
        db.session.rollback()

    def test_trainer_is_notified(self, make_user):
        trainer = make_user("trainer")
        client = make_user("client")

        request = ledger.submit(client.id, trainer.id, "please")

        notification = Notification.query.filter_by(recipient_id=trainer.id).one()
        assert notification.type == "association_request"
        assert notification.extra_data["request_id"] == request.id


class TestQueues:

    def test_trainer_queue_is_oldest_first_and_pending_only(self, make_user):
        trainer = make_user("trainer")
        other = make_user("trainer")
        clients = [make_user("client") for _ in range(3)]
        r1 = ledger.submit(clients[0].id, trainer.id, "one")
        r2 = ledger.submit(clients[1].id, trainer.id, "two")
        ledger.submit(clients[2].id, other.id, "elsewhere")
        ledger.resolve(r1.id, "reject", trainer.id)
        r3 = ledger.submit(clients[0].id, trainer.id, "one again")

        queue = ledger.list_pending_for_trainer(trainer.id)

        assert [r.id for r in queue] == [r2.id, r3.id]

    def test_admin_queue_filters_by_kind(self, make_user):
        t1 = make_user("trainer")
        t2 = make_user("trainer")
        newcomer = make_user("client")
        switcher = make_user("client", trainer=t1)
        new_request = ledger.submit(newcomer.id, t1.id, "start")
        change_request = ledger.submit(switcher.id, t2.id, "switch")

        assert [r.id for r in ledger.list_pending_for_admin(RequestKind.CHANGE)] == [change_request.id]
        assert [r.id for r in ledger.list_pending_for_admin(RequestKind.NEW)] == [new_request.id]
        assert {r.id for r in ledger.list_pending_for_admin()} == {new_request.id, change_request.id}

    def test_history_is_terminal_only_newest_first(self, make_user):
        trainer = make_user("trainer")
        clients = [make_user("client") for _ in range(3)]
        r1 = ledger.submit(clients[0].id, trainer.id, "one")
        r2 = ledger.submit(clients[1].id, trainer.id, "two")
        ledger.submit(clients[2].id, trainer.id, "still waiting")
        ledger.resolve(r1.id, "approve", trainer.id)
        ledger.resolve(r2.id, "reject", trainer.id)

        history = ledger.list_history()

        assert [r.id for r in history] == [r2.id, r1.id]
        assert [r.id for r in ledger.list_history(status="approved")] == [r1.id]
        assert [r.id for r in ledger.list_history(client_id=clients[1].id)] == [r2.id]
        assert len(ledger.list_history(trainer_id=trainer.id)) == 2

    def test_history_rejects_unknown_status_filter(self, make_user):
        with pytest.raises(ValidationError):
            ledger.list_history(status="pending")

    def test_client_sees_own_requests_newest_first(self, make_user):
        t1 = make_user("trainer")
        t2 = make_user("trainer")
        client = make_user("client")
        first = ledger.submit(client.id, t1.id, "one")
        ledger.resolve(first.id, "reject", t1.id)
        second = ledger.submit(client.id, t2.id, "two")

        assert [r.id for r in ledger.list_for_client(client.id)] == [second.id, first.id]


class TestWithdrawAndDelete:

    def test_client_withdraws_pending_request(self, make_user):
        trainer = make_user("trainer")
        client = make_user("client")
        request = ledger.submit(client.id, trainer.id, "please")

        ledger.withdraw(request.id, client.id)

        assert reload(AssociationRequest, request.id) is None

    def test_withdraw_someone_elses_request_is_forbidden(self, make_user):
        trainer = make_user("trainer")
        client = make_user("client")
        stranger = make_user("client")
        request = ledger.submit(client.id, trainer.id, "please")

        with pytest.raises(ForbiddenError):
            ledger.withdraw(request.id, stranger.id)

    def test_withdraw_resolved_request_fails(self, make_user):
        trainer = make_user("trainer")
        client = make_user("client")
        request = ledger.submit(client.id, trainer.id, "please")
        ledger.resolve(request.id, "approve", trainer.id)

        with pytest.raises(InvalidStateError):
            ledger.withdraw(request.id, client.id)

        assert reload(AssociationRequest, request.id).status == RequestStatus.APPROVED.value

    def test_admin_delete_removes_record_and_logs(self, make_user):
        admin = make_user("admin")
        trainer = make_user("trainer")
        client = make_user("client")
        request = ledger.submit(client.id, trainer.id, "please")
        ledger.resolve(request.id, "reject", trainer.id)

        ledger.delete(request.id, admin.id)

        assert reload(AssociationRequest, request.id) is None
        assert ActivityLog.query.filter_by(user_id=admin.id, action="Deleted association request").count() == 1

    def test_delete_missing_request(self, make_user):
        admin = make_user("admin")

        with pytest.raises(NotFoundError):
            ledger.delete(999, admin.id)
