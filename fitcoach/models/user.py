import enum
from datetime import datetime
from werkzeug.security import generate_password_hash, check_password_hash
from fitcoach.extensions import db

USERS_TABLE = "users"
DEFAULT_MAX_CLIENTS = 15


class Role(str, enum.Enum):
    CLIENT = "client"
    TRAINER = "trainer"
    ADMIN = "admin"


class User(db.Model):
    __tablename__ = USERS_TABLE

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False)
    name = db.Column(db.String(150), nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(
        db.String(20),
        db.CheckConstraint("role IN ('admin','trainer','client')"),
        nullable=False,
        default=Role.CLIENT.value,
        index=True,
    )
    # Trainers stay unvalidated until an admin approves the account
    is_validated = db.Column(db.Boolean, default=False, nullable=False, index=True)

    # Association: set only by the resolver
    trainer_id = db.Column(
        db.Integer,
        db.ForeignKey(f"{USERS_TABLE}.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    max_clients = db.Column(db.Integer, nullable=False, default=DEFAULT_MAX_CLIENTS)
    roster_version = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    trainer = db.relationship("User", remote_side=[id], back_populates="clients")
    clients = db.relationship("User", back_populates="trainer", lazy="dynamic")

    sent_requests = db.relationship(
        "AssociationRequest",
        foreign_keys="[AssociationRequest.client_id]",
        back_populates="client",
        lazy="dynamic",
        cascade="all, delete-orphan",
    )
    notifications = db.relationship(
        "Notification",
        foreign_keys="[Notification.recipient_id]",
        back_populates="recipient",
        lazy="dynamic",
        cascade="all, delete-orphan",
    )
    activity_logs = db.relationship("ActivityLog", back_populates="user", lazy="dynamic", cascade="all, delete-orphan")
    sent_messages = db.relationship(
        "Message",
        foreign_keys="[Message.sender_id]",
        back_populates="sender",
        lazy="dynamic",
        cascade="all, delete-orphan",
    )
    received_messages = db.relationship(
        "Message",
        foreign_keys="[Message.receiver_id]",
        back_populates="receiver",
        lazy="dynamic",
        cascade="all, delete-orphan",
    )

    # Helpers
    def set_password(self, password: str):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        return check_password_hash(self.password_hash, password)

    # ------- helper properties -------
    @property
    def role_enum(self) -> Role:
        return Role(self.role)

    @property
    def is_admin(self):
        return self.role == Role.ADMIN.value

    @property
    def is_trainer(self):
        return self.role == Role.TRAINER.value

    @property
    def is_client(self):
        return self.role == Role.CLIENT.value

    @property
    def current_clients(self) -> int:
        """Number of clients currently pointing at this trainer."""
        if not self.is_trainer:
            return 0
        return User.query.filter_by(trainer_id=self.id, role=Role.CLIENT.value).count()

    def __repr__(self):
        return f"<User {self.id} {self.username} ({self.role})>"
