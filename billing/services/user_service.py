"""Bearer tokens for the subscription endpoints.

Users belong to the host application; the billing service only needs to
know which of them is calling, so a token carries the user id as ``sub``.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from billing.domain.models.user import User
from billing.infrastructure.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)


class UserService:
    def __init__(
        self,
        user_repository: UserRepository,
        jwt_secret: str,
        jwt_algorithm: str = "HS256",
        jwt_expiration_hours: int = 24,
    ):
        self.user_repository = user_repository
        self.jwt_secret = jwt_secret
        self.jwt_algorithm = jwt_algorithm
        self.token_ttl = timedelta(hours=jwt_expiration_hours)

    def create_token(self, user: User) -> str:
        issued_at = datetime.now(timezone.utc)
        claims = {
            "sub": str(user.id),
            "email": user.email,
            "iat": issued_at,
            "exp": issued_at + self.token_ttl,
        }
        return jwt.encode(claims, self.jwt_secret, algorithm=self.jwt_algorithm)

    def authenticate(self, token: str) -> Optional[User]:
        """Return the user a token was issued for, or None if it is unusable."""
        try:
            claims = jwt.decode(
                token,
                self.jwt_secret,
                algorithms=[self.jwt_algorithm],
                options={"require": ["sub", "exp"]},
            )
        except jwt.InvalidTokenError as exc:
            logger.debug("Rejected bearer token: %s", exc)
            return None

        try:
            user_id = int(claims["sub"])
        except ValueError:
            return None
        return self.user_repository.get_by_id(user_id)
