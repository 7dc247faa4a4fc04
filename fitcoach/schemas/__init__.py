from .user import (
    UserSchema, UserSummarySchema, TrainerSummarySchema,
    RegisterSchema, LoginSchema, TrainerLimitSchema,
)
from .association_request import AssociationRequestSchema, SubmitRequestSchema, DecisionSchema
from .notification import NotificationSchema
from .message import MessageSchema, SendMessageSchema

__all__ = [
    "UserSchema", "UserSummarySchema", "TrainerSummarySchema",
    "RegisterSchema", "LoginSchema", "TrainerLimitSchema",
    "AssociationRequestSchema", "SubmitRequestSchema", "DecisionSchema",
    "NotificationSchema", "MessageSchema", "SendMessageSchema",
]
