"""Subscription domain model mirroring a Stripe subscription locally."""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Union


class SubscriptionStatus(str, Enum):
    """Statuses written to a subscription record.

    Subscription statuses come from Stripe subscriptions; payment intent
    statuses are written through verbatim by the payment intent webhook.
    """

    incomplete = "incomplete"
    incomplete_expired = "incomplete_expired"
    trialing = "trialing"
    active = "active"
    past_due = "past_due"
    canceled = "canceled"
    unpaid = "unpaid"
    paused = "paused"
    succeeded = "succeeded"
    processing = "processing"
    requires_payment_method = "requires_payment_method"
    requires_action = "requires_action"


class SubscriptionRecord:
    """
    Local record of a Stripe subscription.

    Attributes:
        subscription_id: Stripe subscription ID (unique)
        user_id: Reference to User
        subscription_start: Start of current billing period (epoch seconds)
        subscription_end: End of current billing period (epoch seconds)
        currency: Billing currency
        price_id: Stripe price ID
        recurrency: Billing cadence, "month" or "year"
        customer: Stripe customer ID or expanded customer object
        latest_invoice: Latest invoice; holds the payment intent correlation key
        status: Subscription or payment intent status
        subscription_schedule_id: Stripe subscription schedule ID, once created
        created_at: Record creation timestamp
        updated_at: Last update timestamp
    """

    def __init__(
        self,
        subscription_id: str,
        user_id: int,
        subscription_start: Optional[int],
        subscription_end: Optional[int],
        currency: str,
        price_id: str,
        status: str,
        recurrency: Optional[str] = None,
        customer: Union[str, Dict[str, Any], None] = None,
        latest_invoice: Optional[Dict[str, Any]] = None,
        subscription_schedule_id: Optional[str] = None,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
    ):
        self.subscription_id = subscription_id
        self.user_id = user_id
        self.subscription_start = subscription_start
        self.subscription_end = subscription_end
        self.currency = currency
        self.price_id = price_id
        self.status = status
        self.recurrency = recurrency
        self.customer = customer
        self.latest_invoice = latest_invoice or {}
        self.subscription_schedule_id = subscription_schedule_id
        self.created_at = created_at or datetime.utcnow()
        self.updated_at = updated_at or datetime.utcnow()

    @property
    def customer_id(self) -> Optional[str]:
        if isinstance(self.customer, dict):
            return self.customer.get("id")
        return self.customer

    @property
    def payment_intent_id(self) -> Optional[str]:
        payment_intent = self.latest_invoice.get("payment_intent")
        if isinstance(payment_intent, dict):
            return payment_intent.get("id")
        return payment_intent

    def is_active(self) -> bool:
        """Check if subscription is currently active."""
        return self.status in (
            SubscriptionStatus.active.value,
            SubscriptionStatus.trialing.value,
            SubscriptionStatus.succeeded.value,
        )

    def __repr__(self) -> str:
        return (
            f"<SubscriptionRecord subscription_id={self.subscription_id} "
            f"user_id={self.user_id} status={self.status}>"
        )
