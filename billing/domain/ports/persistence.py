from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol

from ..models import EmailRecipient, SubscriptionRecord, User


class SubscriptionStore(Protocol):
    """Storage of subscription records keyed by Stripe subscription id."""

    def create(self, record: SubscriptionRecord) -> SubscriptionRecord:
        ...

    def list_by_user_id(self, user_id: int) -> List[SubscriptionRecord]:
        ...

    def get_by_subscription_id(self, subscription_id: str) -> Optional[SubscriptionRecord]:
        ...

    def get_by_payment_intent_id(self, payment_intent_id: str) -> Optional[SubscriptionRecord]:
        ...

    def update(self, subscription_id: str, **fields: Any) -> Optional[SubscriptionRecord]:
        ...

    def update_from_payment_intent(
        self, payment_intent: Dict[str, Any]
    ) -> Optional[SubscriptionRecord]:
        ...

    def cancel(self, subscription_id: str) -> Optional[SubscriptionRecord]:
        ...


class UserStore(Protocol):
    """Lookups against the host application's users."""

    def get_by_id(self, user_id: int) -> Optional[User]:
        ...

    def get_by_email(self, email: str) -> Optional[User]:
        ...

    def update_payment_id(self, user_id: int, payment_id: str) -> Optional[User]:
        ...


class WebhookEventStore(Protocol):
    """Ledger of received webhook event ids."""

    def claim(self, event_id: str, event_type: str) -> bool:
        ...

    def mark_processed(self, event_id: str) -> None:
        ...

    def mark_failed(self, event_id: str, error: str) -> None:
        ...


class NotificationSender(Protocol):
    """Delivers a rendered email."""

    def send(self, recipient: EmailRecipient) -> bool:
        ...
