"""Domain models for the billing service."""

from .email import EmailRecipient
from .events import (
    EventCategory,
    InvoicePayload,
    PaymentIntentPayload,
    WebhookEvent,
)
from .subscription import SubscriptionRecord, SubscriptionStatus
from .user import User

__all__ = [
    "EmailRecipient",
    "EventCategory",
    "InvoicePayload",
    "PaymentIntentPayload",
    "SubscriptionRecord",
    "SubscriptionStatus",
    "User",
    "WebhookEvent",
]
