"""Service for subscription management with Stripe."""

import logging
from typing import List, Optional, Tuple

from billing.domain.models import SubscriptionRecord, User
from billing.infrastructure.repositories.subscription_repository import SubscriptionRepository

from .stripe_service import StripeService, subscription_to_record

logger = logging.getLogger(__name__)


class SubscriptionService:
    """Service for starting, listing and canceling user subscriptions."""

    def __init__(
        self,
        subscription_repository: SubscriptionRepository,
        stripe_service: StripeService,
    ):
        self.subscription_repository = subscription_repository
        self.stripe_service = stripe_service

    def start_subscription(
        self,
        user: User,
        currency: str,
        recurrency: str,
        plan_type: str,
    ) -> Tuple[SubscriptionRecord, Optional[str]]:
        """
        Create a Stripe subscription and mirror it locally.

        Args:
            user: Subscribing user
            currency: Billing currency
            recurrency: "month" or "year"
            plan_type: Plan identifier, e.g. "pro"

        Returns:
            Tuple of (stored record, payment intent client secret)

        Raises:
            PaymentProviderError: If the Stripe customer cannot be ensured
            ValueError: If Stripe did not create the subscription
        """
        user = self.stripe_service.assure_customer_created(user)

        subscription = self.stripe_service.create_subscription(
            user.payment_id, currency, recurrency, plan_type
        )
        if not subscription:
            raise ValueError("Subscription could not be created")

        record = self.subscription_repository.create(
            subscription_to_record(subscription, user.id, currency, recurrency)
        )
        logger.info(
            "Subscription %s created for user %s (%s/%s)",
            record.subscription_id,
            user.email,
            plan_type,
            recurrency,
        )

        payment_intent = record.latest_invoice.get("payment_intent")
        client_secret = payment_intent.get("client_secret") if isinstance(payment_intent, dict) else None
        return record, client_secret

    def list_user_subscriptions(self, user_id: int) -> List[SubscriptionRecord]:
        """List all subscriptions for a user."""
        return self.subscription_repository.list_by_user_id(user_id)

    def cancel_subscription(self, user: User, subscription_id: str) -> Optional[SubscriptionRecord]:
        """
        Cancel one of the user's subscriptions.

        Returns:
            The canceled record, or None if the user has no such subscription
            or Stripe refused the cancellation
        """
        subscription = self.subscription_repository.get_by_subscription_id(subscription_id)
        if not subscription or subscription.user_id != user.id:
            return None

        return self.stripe_service.cancel_subscription(subscription_id)
