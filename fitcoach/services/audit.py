from datetime import datetime
from fitcoach.extensions import db
from fitcoach.models import ActivityLog


def record_activity(user_id, action, **details):
    """Add an activity row to the current transaction; the caller commits."""
    activity = ActivityLog(
        user_id=user_id,
        action=action,
        details=details,
        created_at=datetime.utcnow(),
    )
    db.session.add(activity)
    return activity
