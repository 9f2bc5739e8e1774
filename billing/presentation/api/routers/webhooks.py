"""Stripe webhook endpoint."""

import logging

from fastapi import APIRouter, BackgroundTasks, Depends, Request, Response, status
from fastapi.responses import JSONResponse

from billing.core.config import Settings
from billing.core.dependencies import get_settings, get_stripe_service, get_webhook_dispatcher
from billing.domain.exceptions import (
    WebhookConfigurationError,
    WebhookPayloadError,
    WebhookSignatureError,
)
from billing.presentation.api.schemas.error_schemas import ErrorResponse
from billing.services.stripe_service import StripeService
from billing.services.webhooks.dispatcher import WebhookDispatcher

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/webhooks", tags=["webhooks"])


def _error(message: str, detail: str = None) -> JSONResponse:
    body = ErrorResponse(
        message=message,
        detail=detail,
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=body.model_dump())


@router.post("/stripe", include_in_schema=False)
async def stripe_webhook(
    request: Request,
    background_tasks: BackgroundTasks,
    settings: Settings = Depends(get_settings),
    stripe_service: StripeService = Depends(get_stripe_service),
    dispatcher: WebhookDispatcher = Depends(get_webhook_dispatcher),
) -> Response:
    """Verify a Stripe event and handle it after the response is sent."""
    payload = await request.body()
    signature = request.headers.get("stripe-signature", "")

    try:
        event = stripe_service.construct_event(payload, signature, settings.stripe_webhook_secret)
    except WebhookConfigurationError as exc:
        logger.error("Webhook rejected: %s", exc)
        return _error("Internal error")
    except WebhookSignatureError as exc:
        logger.error("Webhook Error %s", exc)
        return _error("Webhook Error", str(exc))
    except WebhookPayloadError as exc:
        logger.error("Webhook Error %s", exc)
        return _error("Webhook Error", str(exc))

    background_tasks.add_task(dispatcher.dispatch, event)
    return Response(status_code=status.HTTP_200_OK)
