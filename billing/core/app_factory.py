from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional

import stripe
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import Settings
from .container import ApplicationContainer
from .logging import configure_logging
from ..domain.ports.persistence import NotificationSender
from ..infrastructure.repositories.subscription_repository import SubscriptionRepository
from ..infrastructure.repositories.user_repository import UserRepository
from ..infrastructure.repositories.webhook_event_repository import WebhookEventRepository
from ..presentation.api.routers import subscriptions as subscriptions_router
from ..presentation.api.routers import webhooks as webhooks_router
from ..services.email_service import EmailService
from ..services.email_templates import EmailTemplates
from ..services.pricing import PriceCatalog
from ..services.stripe_service import StripeService
from ..services.subscription_service import SubscriptionService
from ..services.user_service import UserService
from ..services.webhooks.dispatcher import WebhookDispatcher
from ..services.webhooks.invoice import InvoiceHandler
from ..services.webhooks.payment_intent import PaymentIntentHandler

logger = logging.getLogger(__name__)


def create_application(
    settings: Optional[Settings] = None,
    *,
    stripe_client: Optional[stripe.StripeClient] = None,
    email_sender: Optional[NotificationSender] = None,
) -> FastAPI:
    settings = settings or Settings()

    app = FastAPI(
        title="Subscription Billing",
        lifespan=_create_lifespan(settings, stripe_client, email_sender),
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(subscriptions_router.router)
    app.include_router(webhooks_router.router)

    @app.get("/health")
    async def health() -> Dict[str, Any]:
        container: ApplicationContainer = app.state.container  # type: ignore[attr-defined]
        return {"ok": True, "stripe": container.stripe_service.is_configured}

    return app


def build_container(
    settings: Settings,
    stripe_client: Optional[stripe.StripeClient] = None,
    email_sender: Optional[NotificationSender] = None,
) -> ApplicationContainer:
    settings.database_path.parent.mkdir(parents=True, exist_ok=True)
    db_path = str(settings.database_path)

    user_repository = UserRepository(db_path)
    subscription_repository = SubscriptionRepository(db_path)
    webhook_event_repository = WebhookEventRepository(db_path)

    if stripe_client is None and settings.stripe_secret_key:
        stripe_client = stripe.StripeClient(settings.stripe_secret_key)
    if stripe_client is None:
        logger.warning("STRIPE_SECRET_KEY not configured; Stripe calls are disabled")

    price_catalog = PriceCatalog(settings.price_ids)
    stripe_service = StripeService(
        stripe_client,
        subscription_repository,
        user_repository,
        price_catalog,
        webhook_tolerance=settings.stripe_webhook_tolerance,
    )
    email_service = email_sender or EmailService(
        smtp_host=settings.smtp_host,
        smtp_port=settings.smtp_port,
        smtp_username=settings.smtp_username,
        smtp_password=settings.smtp_password,
        from_email=settings.smtp_from_email,
        from_name=settings.app_name,
    )
    templates = EmailTemplates(settings.app_name, settings.app_url)

    handler_args = (
        user_repository,
        subscription_repository,
        email_service,
        templates,
        price_catalog,
    )
    webhook_dispatcher = WebhookDispatcher(
        PaymentIntentHandler(
            *handler_args,
            stripe_service=stripe_service,
            system_email=settings.system_email,
        ),
        InvoiceHandler(*handler_args),
        event_store=webhook_event_repository,
    )

    return ApplicationContainer(
        settings=settings,
        user_repository=user_repository,
        subscription_repository=subscription_repository,
        webhook_event_repository=webhook_event_repository,
        stripe_service=stripe_service,
        email_service=email_service,
        user_service=UserService(
            user_repository,
            jwt_secret=settings.jwt_secret,
            jwt_expiration_hours=settings.jwt_expiration_hours,
        ),
        subscription_service=SubscriptionService(subscription_repository, stripe_service),
        webhook_dispatcher=webhook_dispatcher,
    )


def _create_lifespan(
    settings: Settings,
    stripe_client: Optional[stripe.StripeClient],
    email_sender: Optional[NotificationSender],
):
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        configure_logging()
        if not settings.stripe_webhook_secret:
            logger.warning("STRIPE_WEBHOOK_SECRET not configured; webhooks will be rejected")

        app.state.container = build_container(settings, stripe_client, email_sender)  # type: ignore[attr-defined]
        yield

    return lifespan
