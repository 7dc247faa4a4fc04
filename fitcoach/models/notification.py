# ================================
# Notification Model
# ================================

from datetime import datetime
from fitcoach.extensions import db


class Notification(db.Model):
    __tablename__ = "notifications"

    id = db.Column(db.Integer, primary_key=True)
    recipient_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    sender_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    type = db.Column(db.String(50), nullable=False, default="general")
    title = db.Column(db.String(200), nullable=False)
    message = db.Column(db.Text, nullable=False)
    link = db.Column(db.String(255), nullable=True)
    extra_data = db.Column(db.JSON, default=dict)

    is_read = db.Column(db.Boolean, default=False, index=True)
    read_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    recipient = db.relationship("User", foreign_keys=[recipient_id], back_populates="notifications")
    sender = db.relationship("User", foreign_keys=[sender_id])

    def mark_as_read(self):
        """Mark notification as read"""
        self.is_read = True
        self.read_at = datetime.utcnow()

    __table_args__ = (
        db.Index("idx_notifications_recipient_read", "recipient_id", "is_read"),
    )
