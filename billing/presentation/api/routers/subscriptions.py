"""API router for user subscription management."""

from fastapi import APIRouter, Depends, HTTPException, status

from billing.core.dependencies import get_subscription_service
from billing.domain.exceptions import PaymentProviderError
from billing.domain.models import User
from billing.presentation.api.dependencies import get_current_user
from billing.presentation.api.schemas.subscription_schemas import (
    CreateSubscriptionRequest,
    CreateSubscriptionResponse,
    SubscriptionListResponse,
    SubscriptionResponse,
)
from billing.services.subscription_service import SubscriptionService

router = APIRouter(prefix="/api/subscriptions", tags=["subscriptions"])


@router.post("", response_model=CreateSubscriptionResponse, status_code=status.HTTP_201_CREATED)
async def create_subscription(
    payload: CreateSubscriptionRequest,
    user: User = Depends(get_current_user),
    subscription_service: SubscriptionService = Depends(get_subscription_service),
) -> CreateSubscriptionResponse:
    """Start a subscription and return the client secret of its first payment."""
    try:
        record, client_secret = subscription_service.start_subscription(
            user,
            currency=payload.currency,
            recurrency=payload.recurrency,
            plan_type=payload.plan_type,
        )
    except PaymentProviderError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    return CreateSubscriptionResponse(
        subscription=SubscriptionResponse.from_record(record),
        client_secret=client_secret,
    )


@router.get("", response_model=SubscriptionListResponse)
async def list_subscriptions(
    user: User = Depends(get_current_user),
    subscription_service: SubscriptionService = Depends(get_subscription_service),
) -> SubscriptionListResponse:
    """List the current user's subscriptions."""
    records = subscription_service.list_user_subscriptions(user.id)
    return SubscriptionListResponse(
        items=[SubscriptionResponse.from_record(record) for record in records],
        count=len(records),
    )


@router.delete("/{subscription_id}", response_model=SubscriptionResponse)
async def cancel_subscription(
    subscription_id: str,
    user: User = Depends(get_current_user),
    subscription_service: SubscriptionService = Depends(get_subscription_service),
) -> SubscriptionResponse:
    """Cancel one of the current user's subscriptions."""
    record = subscription_service.cancel_subscription(user, subscription_id)
    if not record:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Subscription not found or could not be canceled",
        )
    return SubscriptionResponse.from_record(record)
