from dataclasses import dataclass

from .config import Settings
from ..infrastructure.repositories.subscription_repository import SubscriptionRepository
from ..infrastructure.repositories.user_repository import UserRepository
from ..infrastructure.repositories.webhook_event_repository import WebhookEventRepository
from ..domain.ports.persistence import NotificationSender
from ..services.stripe_service import StripeService
from ..services.subscription_service import SubscriptionService
from ..services.user_service import UserService
from ..services.webhooks.dispatcher import WebhookDispatcher


@dataclass(slots=True)
class ApplicationContainer:
    """Dependency registry shared across the FastAPI application lifecycle."""

    settings: Settings
    user_repository: UserRepository
    subscription_repository: SubscriptionRepository
    webhook_event_repository: WebhookEventRepository
    stripe_service: StripeService
    email_service: NotificationSender
    user_service: UserService
    subscription_service: SubscriptionService
    webhook_dispatcher: WebhookDispatcher
