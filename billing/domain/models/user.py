"""User referenced by subscription records."""

from datetime import datetime
from typing import Optional


class User:
    """
    User entity owned by the host application.

    Attributes:
        id: Unique identifier
        email: User email address (unique)
        first_name: Given name used in emails
        last_name: Family name
        payment_id: Stripe customer ID, once created
        created_at: Account creation timestamp
        updated_at: Last update timestamp
    """

    def __init__(
        self,
        id: int,
        email: str,
        first_name: str,
        last_name: str = "",
        payment_id: Optional[str] = None,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
    ):
        self.id = id
        self.email = email
        self.first_name = first_name
        self.last_name = last_name
        self.payment_id = payment_id
        self.created_at = created_at or datetime.utcnow()
        self.updated_at = updated_at or datetime.utcnow()

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email} payment_id={self.payment_id}>"
