import os
from pathlib import Path
from typing import Dict, Optional, Tuple

from dotenv import load_dotenv

PLAN_TYPES = ("basic", "pro")
RECURRENCIES = {"month": "MONTHLY", "year": "YEARLY"}


class Settings:
    """Centralised application configuration sourced from environment variables."""

    def __init__(self) -> None:
        load_dotenv()
        self.app_name = os.getenv("APP_NAME", "Socialbio")
        self.app_url = os.getenv("APP_URL", "https://socialbio.me")
        self.database_path = Path(os.getenv("DATABASE_PATH", "data/billing.db")).resolve()
        self.stripe_secret_key = os.getenv("STRIPE_SECRET_KEY")
        self.stripe_webhook_secret = os.getenv("STRIPE_WEBHOOK_SECRET")
        self.stripe_webhook_tolerance = self._get_int("STRIPE_WEBHOOK_TOLERANCE", default=300)
        self.price_ids = self._load_price_ids()
        self.system_email = os.getenv("SYSTEM_EMAIL")
        self.smtp_host = os.getenv("SMTP_HOST")
        self.smtp_port = self._get_int("SMTP_PORT", default=587)
        self.smtp_username = os.getenv("SMTP_USERNAME")
        self.smtp_password = os.getenv("SMTP_PASSWORD")
        self.smtp_from_email = os.getenv("SMTP_FROM_EMAIL")
        self.jwt_secret = os.getenv("JWT_SECRET", "change-me")
        self.jwt_expiration_hours = self._get_int("JWT_EXPIRATION_HOURS", default=24)
        origins = os.getenv("CORS_ALLOW_ORIGINS")
        if origins:
            self.cors_allow_origins = [item.strip() for item in origins.split(",") if item.strip()]
        else:
            self.cors_allow_origins = ["*"]

    @staticmethod
    def _load_price_ids() -> Dict[Tuple[str, str], str]:
        # STRIPE_PRICE_PRO_MONTHLY, STRIPE_PRICE_BASIC_YEARLY, ...
        price_ids: Dict[Tuple[str, str], str] = {}
        for plan_type in PLAN_TYPES:
            for recurrency, suffix in RECURRENCIES.items():
                value = os.getenv(f"STRIPE_PRICE_{plan_type.upper()}_{suffix}")
                if value:
                    price_ids[(recurrency, plan_type)] = value.strip()
        return price_ids

    @staticmethod
    def _get_int(key: str, default: Optional[int] = None) -> int:
        value = os.getenv(key)
        if value is None:
            if default is None:
                raise RuntimeError(f"Missing required environment variable: {key}")
            return default
        try:
            return int(value)
        except ValueError as exc:
            raise RuntimeError(f"Environment variable {key} must be an integer") from exc
