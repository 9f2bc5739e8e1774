"""Reconciles `payment_intent.*` events with local subscriptions."""

from __future__ import annotations

import logging
from typing import Optional

from billing.domain.models import (
    EmailRecipient,
    PaymentIntentPayload,
    SubscriptionRecord,
    WebhookEvent,
)

from ..localization import language_from_currency
from ..pricing import format_amount
from ..stripe_service import StripeService
from .base import WebhookHandler

logger = logging.getLogger(__name__)

PAYMENT_FAILED = "payment_intent.payment_failed"
PAYMENT_SUCCEEDED = "payment_intent.succeeded"


class PaymentIntentHandler(WebhookHandler):
    """Updates the subscription a payment intent belongs to and notifies its user."""

    def __init__(
        self,
        *args,
        stripe_service: StripeService,
        system_email: Optional[str] = None,
        **kwargs,
    ) -> None:
        super().__init__(*args, **kwargs)
        self._stripe = stripe_service
        self._system_email = system_email

    def handle(self, event: WebhookEvent, payment_intent: PaymentIntentPayload) -> None:
        user = self._find_user(payment_intent.receipt_email)
        if not user:
            logger.debug("No user for payment intent %s; ignoring", payment_intent.id)
            return

        language = language_from_currency(payment_intent.currency)
        amount = format_amount(payment_intent.amount_received, payment_intent.currency)

        updated = self._subscriptions.update_from_payment_intent(payment_intent.model_dump())
        if not updated:
            logger.error(
                "Error updating payment intent %s: no subscription record matches",
                payment_intent.id,
            )
            return

        plan = self._prices.plan_for_price_id(updated.price_id)
        recipient: Optional[EmailRecipient] = None

        if event.type == PAYMENT_FAILED:
            logger.warning("Payment of user %s failed", user.email)
            recipient = self._templates.payment_failed(user, language)

        elif event.type == PAYMENT_SUCCEEDED:
            logger.info("Payment succeeded for user %s", user.email)
            self._attach_schedule(payment_intent, updated)
            recipient = self._templates.payment_succeeded(user, language, plan)

            if self._system_email:
                self._notify(
                    self._templates.payment_summary(
                        self._system_email, user, plan, amount, payment_intent.currency
                    )
                )

        else:
            logger.info("Unhandled event type %s", event.type)

        if recipient:
            self._notify(recipient)

    def _attach_schedule(
        self,
        payment_intent: PaymentIntentPayload,
        subscription: SubscriptionRecord,
    ) -> None:
        if subscription.subscription_schedule_id:
            return

        customer_id = payment_intent.customer_id or subscription.customer_id
        if not customer_id or not subscription.subscription_id:
            return

        schedule = self._stripe.create_subscription_schedule(
            customer_id, subscription.subscription_id
        )
        if schedule:
            self._subscriptions.update(
                subscription.subscription_id,
                subscription_schedule_id=schedule["id"],
            )
