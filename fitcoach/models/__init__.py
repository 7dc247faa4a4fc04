from .user import User, Role, DEFAULT_MAX_CLIENTS
from .association_request import AssociationRequest, RequestStatus, RequestKind
from .notification import Notification
from .activity_log import ActivityLog
from .message import Message

__all__ = [
    "User", "Role", "DEFAULT_MAX_CLIENTS",
    "AssociationRequest", "RequestStatus", "RequestKind",
    "Notification", "ActivityLog", "Message",
]
