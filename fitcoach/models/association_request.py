import enum
from datetime import datetime
from fitcoach.extensions import db


class RequestStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class RequestKind(str, enum.Enum):
    NEW = "new"
    CHANGE = "change"


class AssociationRequest(db.Model):
    __tablename__ = "association_requests"

    id = db.Column(db.Integer, primary_key=True)
    client_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    target_trainer_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    # Snapshot of the client's trainer at submit time; set means a change request
    current_trainer_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    reason = db.Column(db.String(500), nullable=False)
    status = db.Column(
        db.String(20),
        db.CheckConstraint("status IN ('pending','approved','rejected')"),
        nullable=False,
        default=RequestStatus.PENDING.value,
        index=True,
    )
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)
    resolved_at = db.Column(db.DateTime, nullable=True)
    resolved_by_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)

    client = db.relationship("User", foreign_keys=[client_id], back_populates="sent_requests")
    target_trainer = db.relationship("User", foreign_keys=[target_trainer_id])
    current_trainer = db.relationship("User", foreign_keys=[current_trainer_id])
    resolved_by = db.relationship("User", foreign_keys=[resolved_by_id])

    __table_args__ = (
        db.Index("idx_association_requests_trainer_status", "target_trainer_id", "status"),
        # One pending request per client, enforced by the database as well
        db.Index(
            "uq_association_requests_pending_client",
            "client_id",
            unique=True,
            sqlite_where=db.text("status = 'pending'"),
            postgresql_where=db.text("status = 'pending'"),
        ),
    )

    @property
    def kind(self) -> RequestKind:
        if self.current_trainer_id is None:
            return RequestKind.NEW
        return RequestKind.CHANGE

    @property
    def is_pending(self):
        return self.status == RequestStatus.PENDING.value

    def __repr__(self):
        return f"<AssociationRequest {self.id} {self.kind.value} {self.status}>"
