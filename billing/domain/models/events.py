"""Typed shapes of the Stripe webhook events handled by the service."""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class EventCategory(str, Enum):
    PAYMENT_INTENT = "payment_intent"
    INVOICE = "invoice"
    UNKNOWN = "unknown"


def _reference_id(value: Union[str, Dict[str, Any], None]) -> Optional[str]:
    """Return the id of an expandable Stripe reference."""
    if isinstance(value, dict):
        return value.get("id")
    return value or None


class EventData(BaseModel):
    model_config = ConfigDict(extra="allow")

    object: Dict[str, Any]


class WebhookEvent(BaseModel):
    """Envelope of a verified Stripe event."""

    model_config = ConfigDict(extra="allow")

    id: str
    type: str
    created: Optional[int] = None
    livemode: bool = False
    data: EventData

    @property
    def category(self) -> EventCategory:
        prefix = self.type.split(".", 1)[0]
        if prefix == EventCategory.PAYMENT_INTENT.value:
            return EventCategory.PAYMENT_INTENT
        if prefix == EventCategory.INVOICE.value:
            return EventCategory.INVOICE
        return EventCategory.UNKNOWN


class PaymentIntentPayload(BaseModel):
    """The `data.object` of a `payment_intent.*` event."""

    model_config = ConfigDict(extra="allow")

    id: str
    amount_received: int = 0
    currency: str = "usd"
    receipt_email: Optional[str] = None
    customer: Union[str, Dict[str, Any], None] = None
    status: Optional[str] = None

    @property
    def customer_id(self) -> Optional[str]:
        return _reference_id(self.customer)


class InvoicePayload(BaseModel):
    """The `data.object` of an `invoice.*` event."""

    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    customer: Union[str, Dict[str, Any], None] = None
    customer_email: Optional[str] = None
    subscription: Union[str, Dict[str, Any], None] = None
    amount_due: int = 0
    amount_paid: int = 0
    currency: str = "usd"
    status: Optional[str] = None
    billing_reason: Optional[str] = None
    payment_intent: Union[str, Dict[str, Any], None] = None
    hosted_invoice_url: Optional[str] = None
    period_start: Optional[int] = None
    period_end: Optional[int] = None
    lines: Dict[str, Any] = Field(default_factory=dict)

    @property
    def customer_id(self) -> Optional[str]:
        return _reference_id(self.customer)

    @property
    def subscription_id(self) -> Optional[str]:
        return _reference_id(self.subscription)

    @property
    def payment_intent_id(self) -> Optional[str]:
        return _reference_id(self.payment_intent)

    def billing_period(self) -> tuple[Optional[int], Optional[int]]:
        """Service period of the first line item, falling back to the invoice period."""
        for line in self.lines.get("data") or []:
            period = line.get("period") or {}
            if period.get("start") and period.get("end"):
                return period["start"], period["end"]
        return self.period_start, self.period_end
