"""Service for sending emails."""

import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr
from typing import Optional

from billing.domain.models import EmailRecipient

logger = logging.getLogger(__name__)


class EmailService:
    """Delivers rendered emails over SMTP with STARTTLS."""

    def __init__(
        self,
        smtp_host: Optional[str] = None,
        smtp_port: int = 587,
        smtp_username: Optional[str] = None,
        smtp_password: Optional[str] = None,
        from_email: Optional[str] = None,
        from_name: str = "Socialbio",
        timeout: float = 10.0,
    ):
        self.smtp_host = smtp_host or ""
        self.smtp_port = smtp_port
        self.smtp_username = smtp_username or ""
        self.smtp_password = smtp_password or ""
        self.from_email = from_email or ""
        self.from_name = from_name
        self.timeout = timeout
        self.enabled = bool(self.smtp_host and self.smtp_username and self.from_email)

    def send(self, recipient: EmailRecipient) -> bool:
        """
        Send a rendered email to its recipient.

        Args:
            recipient: Rendered email descriptor

        Returns:
            True if sent successfully, False otherwise
        """
        if not self.enabled:
            # Development mode: nothing to deliver through
            logger.info(
                "SMTP not configured; email %r to %s not sent",
                recipient.subject,
                recipient.email,
            )
            return True

        message = self._build_message(recipient)
        try:
            with smtplib.SMTP(self.smtp_host, self.smtp_port, timeout=self.timeout) as server:
                server.starttls()
                server.login(self.smtp_username, self.smtp_password)
                server.send_message(message)
        except (smtplib.SMTPException, OSError) as exc:
            logger.error("Failed to send %r to %s: %s", recipient.subject, recipient.email, exc)
            return False

        logger.info("Sent %r to %s", recipient.subject, recipient.email)
        return True

    def _build_message(self, recipient: EmailRecipient) -> MIMEMultipart:
        message = MIMEMultipart("alternative")
        message["Subject"] = recipient.subject
        message["From"] = formataddr((self.from_name, self.from_email))
        message["To"] = formataddr((recipient.name, recipient.email))
        # HTML must be the last alternative
        message.attach(MIMEText(recipient.message_plain_text, "plain", "utf-8"))
        message.attach(MIMEText(recipient.message_html, "html", "utf-8"))
        return message
