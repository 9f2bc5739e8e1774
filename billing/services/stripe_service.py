"""Stripe payment integration service."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Union

import stripe
from pydantic import ValidationError

from billing.domain.exceptions import (
    PaymentProviderError,
    WebhookConfigurationError,
    WebhookPayloadError,
    WebhookSignatureError,
)
from billing.domain.models import SubscriptionRecord, SubscriptionStatus, User, WebhookEvent
from billing.infrastructure.repositories.subscription_repository import SubscriptionRepository
from billing.infrastructure.repositories.user_repository import UserRepository

from .pricing import PriceCatalog

logger = logging.getLogger(__name__)


def as_dict(value: Any) -> Any:
    """Recursively convert Stripe objects into plain JSON-compatible values."""
    if isinstance(value, dict):
        return {key: as_dict(item) for key, item in value.items()}
    if isinstance(value, list):
        return [as_dict(item) for item in value]
    return value


class StripeService:
    """Adapter around an explicitly constructed Stripe client.

    Business failures are reported as ``None`` return values; callers check
    every result before continuing.
    """

    def __init__(
        self,
        client: Optional[stripe.StripeClient],
        subscription_repository: SubscriptionRepository,
        user_repository: UserRepository,
        price_catalog: PriceCatalog,
        webhook_tolerance: int = stripe.Webhook.DEFAULT_TOLERANCE,
    ) -> None:
        self._client = client
        self._subscriptions = subscription_repository
        self._users = user_repository
        self._prices = price_catalog
        self._webhook_tolerance = webhook_tolerance

    @property
    def is_configured(self) -> bool:
        return self._client is not None

    # ============ CUSTOMERS ============

    def create_customer(self, user: User) -> Optional[stripe.Customer]:
        """Create the Stripe customer of a user."""
        if not self._client:
            return None

        try:
            customer = self._client.customers.create(
                params={
                    "email": user.email,
                    "name": user.full_name,
                    "metadata": {"userId": str(user.id)},
                }
            )
        except stripe.StripeError as e:
            logger.error("Failed to create Stripe customer for %s: %s", user.email, str(e))
            return None

        return customer or None

    def assure_customer_created(self, user: User) -> User:
        """Return the user with a Stripe customer, creating one if needed."""
        if not self._client:
            raise PaymentProviderError("Stripe not configured. Please set STRIPE_SECRET_KEY.")

        if user.payment_id:
            return user

        customer = self.create_customer(user)
        if not customer:
            raise PaymentProviderError("Payment customer could not be created")

        updated = self._users.update_payment_id(user.id, customer["id"])
        return updated or user

    # ============ PAYMENT INTENTS ============

    def get_payment_intent(self, payment_intent_id: str) -> Optional[stripe.PaymentIntent]:
        if not self._client or not payment_intent_id:
            return None

        try:
            return self._client.payment_intents.retrieve(payment_intent_id)
        except stripe.StripeError as e:
            logger.error("Failed to retrieve payment intent %s: %s", payment_intent_id, str(e))
            return None

    # ============ SUBSCRIPTIONS ============

    def create_subscription(
        self,
        customer_id: Optional[str],
        currency: str,
        recurrency: str,
        plan_type: str,
    ) -> Optional[stripe.Subscription]:
        """Create an incomplete subscription awaiting its first payment."""
        if not self._client or not customer_id:
            return None

        price_id = self._prices.price_id_for(recurrency, plan_type)
        if not price_id:
            logger.warning("No Stripe price configured for %s/%s", plan_type, recurrency)
            return None

        try:
            subscription = self._client.subscriptions.create(
                params={
                    "customer": customer_id,
                    "items": [{"price": price_id}],
                    "cancel_at_period_end": True,
                    "currency": currency,
                    "collection_method": "charge_automatically",
                    "payment_settings": {"save_default_payment_method": "on_subscription"},
                    "payment_behavior": "default_incomplete",
                    "expand": ["latest_invoice.payment_intent"],
                }
            )
        except stripe.StripeError as e:
            logger.error("Failed to create subscription for %s: %s", customer_id, str(e))
            return None

        return subscription or None

    def cancel_subscription(self, subscription_id: str) -> Optional[SubscriptionRecord]:
        """
        Cancel a subscription locally and on Stripe.

        The local record is canceled first; when it does not exist the
        Stripe call is skipped. Canceling an already canceled record is a
        no-op. If Stripe rejects the cancel, the local status is restored
        so the cancel can be retried.

        Returns:
            The canceled local record, or None on failure
        """
        if not self._client:
            return None

        existing = self._subscriptions.get_by_subscription_id(subscription_id)
        if not existing:
            return None
        if existing.status == SubscriptionStatus.canceled.value:
            return existing

        canceled = self._subscriptions.cancel(subscription_id)
        if not canceled:
            return None

        try:
            self._client.subscriptions.cancel(subscription_id)
        except stripe.StripeError as e:
            logger.error("Failed to cancel subscription %s on Stripe: %s", subscription_id, str(e))
            self._subscriptions.update(subscription_id, status=existing.status)
            return None

        logger.info("Subscription %s canceled", subscription_id)
        return canceled

    def create_subscription_schedule(
        self,
        customer_id: Optional[str],
        subscription_id: Optional[str],
    ) -> Optional[stripe.SubscriptionSchedule]:
        if not self._client or not customer_id or not subscription_id:
            return None

        try:
            return self._client.subscription_schedules.create(
                params={"from_subscription": subscription_id}
            )
        except stripe.StripeError as e:
            logger.error(
                "Failed to create schedule for subscription %s (%s): %s",
                subscription_id,
                customer_id,
                str(e),
            )
            return None

    # ============ WEBHOOK ============

    def construct_event(
        self,
        payload: Union[bytes, str],
        signature: Optional[str],
        secret: Optional[str],
    ) -> WebhookEvent:
        """
        Verify a webhook signature and parse its body.

        Raises:
            WebhookConfigurationError: If no signing secret is configured
            WebhookSignatureError: If the signature does not match
            WebhookPayloadError: If the body is not a Stripe event
        """
        if not secret:
            raise WebhookConfigurationError("STRIPE_WEBHOOK_SECRET not configured")

        try:
            body = payload.decode("utf-8") if isinstance(payload, bytes) else payload
        except UnicodeDecodeError as exc:
            raise WebhookPayloadError("Webhook payload is not valid UTF-8") from exc

        try:
            stripe.WebhookSignature.verify_header(
                body, signature or "", secret, self._webhook_tolerance
            )
        except stripe.SignatureVerificationError as exc:
            raise WebhookSignatureError(str(exc)) from exc

        try:
            return WebhookEvent.model_validate_json(body)
        except ValidationError as exc:
            raise WebhookPayloadError(f"Invalid webhook payload: {exc.error_count()} error(s)") from exc


def subscription_to_record(
    subscription: Dict[str, Any],
    user_id: int,
    currency: str,
    recurrency: str,
) -> SubscriptionRecord:
    """Build the local mirror of a freshly created Stripe subscription."""
    data = as_dict(subscription)
    items = (data.get("items") or {}).get("data") or [{}]
    first_item = items[0]
    price_id = (first_item.get("price") or {}).get("id", "")
    latest_invoice = data.get("latest_invoice")
    if not isinstance(latest_invoice, dict):
        latest_invoice = {"id": latest_invoice} if latest_invoice else {}

    return SubscriptionRecord(
        subscription_id=data["id"],
        user_id=user_id,
        subscription_start=data.get("current_period_start")
        or first_item.get("current_period_start")
        or data.get("start_date"),
        subscription_end=data.get("current_period_end") or first_item.get("current_period_end"),
        currency=data.get("currency") or currency,
        price_id=price_id,
        recurrency=recurrency,
        customer=data.get("customer"),
        latest_invoice=latest_invoice,
        status=data.get("status") or SubscriptionStatus.incomplete.value,
    )
