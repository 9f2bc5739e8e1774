from dataclasses import dataclass


@dataclass(frozen=True)
class EmailRecipient:
    """A rendered email addressed to a single recipient."""

    name: str
    email: str
    subject: str
    message_html: str
    message_plain_text: str
