"""Reconciles `invoice.*` events with local subscriptions."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from billing.domain.models import (
    EmailRecipient,
    InvoicePayload,
    SubscriptionRecord,
    SubscriptionStatus,
    WebhookEvent,
)

from ..localization import language_from_currency
from ..pricing import format_amount
from .base import WebhookHandler

logger = logging.getLogger(__name__)

INVOICE_PAID = "invoice.paid"
INVOICE_PAYMENT_SUCCEEDED = "invoice.payment_succeeded"
INVOICE_PAYMENT_FAILED = "invoice.payment_failed"
INVOICE_UPCOMING = "invoice.upcoming"

PAID_EVENTS = (INVOICE_PAID, INVOICE_PAYMENT_SUCCEEDED)

# The first invoice is acknowledged by the payment intent email
FIRST_INVOICE_REASON = "subscription_create"


class InvoiceHandler(WebhookHandler):
    """Updates the subscription an invoice bills and notifies its user."""

    def handle(self, event: WebhookEvent, invoice: InvoicePayload) -> None:
        user = self._find_user(invoice.customer_email)
        if not user:
            logger.debug("No user for invoice %s; ignoring", invoice.id)
            return

        language = language_from_currency(invoice.currency)

        updated = self._reconcile(event, invoice)
        if not updated:
            logger.error(
                "Error updating invoice %s: no subscription record for %s",
                invoice.id,
                invoice.subscription_id,
            )
            return

        plan = self._prices.plan_for_price_id(updated.price_id)
        recipient: Optional[EmailRecipient] = None

        if event.type == INVOICE_PAYMENT_SUCCEEDED:
            logger.info("Invoice %s payment succeeded for user %s", invoice.id, user.email)

        elif event.type == INVOICE_PAID:
            logger.info("Invoice %s paid by user %s", invoice.id, user.email)
            if invoice.billing_reason != FIRST_INVOICE_REASON:
                recipient = self._templates.invoice_paid(
                    user,
                    language,
                    plan,
                    format_amount(invoice.amount_paid, invoice.currency),
                    invoice.hosted_invoice_url,
                )

        elif event.type == INVOICE_PAYMENT_FAILED:
            logger.warning("Invoice %s of user %s could not be charged", invoice.id, user.email)
            recipient = self._templates.invoice_payment_failed(
                user,
                language,
                format_amount(invoice.amount_due, invoice.currency),
                invoice.hosted_invoice_url,
            )

        elif event.type == INVOICE_UPCOMING:
            recipient = self._templates.invoice_upcoming(
                user,
                language,
                plan,
                format_amount(invoice.amount_due, invoice.currency),
                invoice.billing_period()[0],
            )

        else:
            logger.info("Unhandled event type %s", event.type)

        if recipient:
            self._notify(recipient)

    def _reconcile(self, event: WebhookEvent, invoice: InvoicePayload) -> Optional[SubscriptionRecord]:
        if not invoice.subscription_id:
            return None

        existing = self._subscriptions.get_by_subscription_id(invoice.subscription_id)
        if not existing:
            return None

        # Upcoming invoices have no id of their own yet
        if event.type == INVOICE_UPCOMING:
            return existing

        fields: Dict[str, Any] = {
            "latest_invoice": _merge_invoice(existing.latest_invoice, invoice),
        }
        if event.type in PAID_EVENTS:
            fields["status"] = SubscriptionStatus.active
            start, end = invoice.billing_period()
            if start and end:
                fields["subscription_start"] = start
                fields["subscription_end"] = end
        elif event.type == INVOICE_PAYMENT_FAILED:
            fields["status"] = SubscriptionStatus.past_due

        return self._subscriptions.update(invoice.subscription_id, **fields)


def _merge_invoice(latest_invoice: Dict[str, Any], invoice: InvoicePayload) -> Dict[str, Any]:
    """Latest invoice summary; the stored payment intent survives while its id is unchanged."""
    merged = dict(latest_invoice)
    merged.update(
        {
            "id": invoice.id,
            "status": invoice.status,
            "amount_due": invoice.amount_due,
            "amount_paid": invoice.amount_paid,
            "currency": invoice.currency,
            "hosted_invoice_url": invoice.hosted_invoice_url,
        }
    )

    payment_intent_id = invoice.payment_intent_id
    stored = merged.get("payment_intent")
    stored_id = stored.get("id") if isinstance(stored, dict) else stored
    if payment_intent_id and payment_intent_id != stored_id:
        merged["payment_intent"] = {"id": payment_intent_id}
    return merged
