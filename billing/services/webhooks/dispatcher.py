"""Routes verified Stripe events to their handlers."""

from __future__ import annotations

import logging
from typing import Optional

from billing.domain.models import (
    EventCategory,
    InvoicePayload,
    PaymentIntentPayload,
    WebhookEvent,
)
from billing.domain.ports.persistence import WebhookEventStore

from .invoice import InvoiceHandler
from .payment_intent import PaymentIntentHandler

logger = logging.getLogger(__name__)


class WebhookDispatcher:
    """Classifies events by category and runs each event id at most once."""

    def __init__(
        self,
        payment_intent_handler: PaymentIntentHandler,
        invoice_handler: InvoiceHandler,
        event_store: Optional[WebhookEventStore] = None,
    ) -> None:
        self._payment_intents = payment_intent_handler
        self._invoices = invoice_handler
        self._events = event_store

    def dispatch(self, event: WebhookEvent) -> bool:
        """Handle an event; returns True when a handler ran to completion."""
        category = event.category
        if category is EventCategory.UNKNOWN:
            logger.debug("Ignoring Stripe event %s of type %s", event.id, event.type)
            return False

        if self._events is not None and not self._events.claim(event.id, event.type):
            logger.info("Skipping duplicate Stripe event %s (%s)", event.id, event.type)
            return False

        try:
            if category is EventCategory.PAYMENT_INTENT:
                payload = PaymentIntentPayload.model_validate(event.data.object)
                self._payment_intents.handle(event, payload)
            elif category is EventCategory.INVOICE:
                payload = InvoicePayload.model_validate(event.data.object)
                self._invoices.handle(event, payload)
        except Exception as exc:
            # Failed events are claimed again when Stripe redelivers them
            logger.exception("Failed to handle Stripe event %s (%s)", event.id, event.type)
            if self._events is not None:
                self._events.mark_failed(event.id, str(exc))
            return False

        if self._events is not None:
            self._events.mark_processed(event.id)
        return True
