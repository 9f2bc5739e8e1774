"""Pydantic schemas for subscription API endpoints."""

from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field

from billing.domain.models import SubscriptionRecord


class CreateSubscriptionRequest(BaseModel):
    """Request schema for starting a subscription."""

    currency: str = Field(default="usd", description="Billing currency")
    recurrency: Literal["month", "year"] = Field(..., description="Billing cadence")
    plan_type: str = Field(..., description="Plan identifier, e.g. 'pro'")


class SubscriptionResponse(BaseModel):
    """Response schema for subscription data."""

    subscription_id: str
    subscription_schedule_id: Optional[str]
    subscription_start: Optional[int]
    subscription_end: Optional[int]
    currency: str
    price_id: str
    recurrency: Optional[str]
    customer: Union[str, Dict[str, Any], None]
    status: str
    is_active: bool

    @classmethod
    def from_record(cls, record: SubscriptionRecord) -> "SubscriptionResponse":
        return cls(
            subscription_id=record.subscription_id,
            subscription_schedule_id=record.subscription_schedule_id,
            subscription_start=record.subscription_start,
            subscription_end=record.subscription_end,
            currency=record.currency,
            price_id=record.price_id,
            recurrency=record.recurrency,
            customer=record.customer,
            status=record.status,
            is_active=record.is_active(),
        )


class CreateSubscriptionResponse(BaseModel):
    """Response schema for a started subscription."""

    subscription: SubscriptionResponse
    client_secret: Optional[str] = None


class SubscriptionListResponse(BaseModel):
    items: List[SubscriptionResponse]
    count: int
