from __future__ import annotations

import logging
from typing import Optional

from billing.domain.models import EmailRecipient, User
from billing.domain.ports.persistence import NotificationSender, SubscriptionStore, UserStore

from ..email_templates import EmailTemplates
from ..pricing import PriceCatalog

logger = logging.getLogger(__name__)


class WebhookHandler:
    """Collaborators shared by the Stripe event handlers."""

    def __init__(
        self,
        user_repository: UserStore,
        subscription_repository: SubscriptionStore,
        email_sender: NotificationSender,
        templates: EmailTemplates,
        price_catalog: PriceCatalog,
    ) -> None:
        self._users = user_repository
        self._subscriptions = subscription_repository
        self._email_sender = email_sender
        self._templates = templates
        self._prices = price_catalog

    def _find_user(self, email: Optional[str]) -> Optional[User]:
        if not email:
            return None
        return self._users.get_by_email(email)

    def _notify(self, recipient: EmailRecipient) -> None:
        """Send an email; delivery failures never abort event handling."""
        try:
            delivered = self._email_sender.send(recipient)
        except Exception:
            logger.exception("Failed to send %r to %s", recipient.subject, recipient.email)
            return
        if not delivered:
            logger.warning("Email %r to %s was not delivered", recipient.subject, recipient.email)
