import logging
import os
from typing import Optional

# The Stripe SDK logs every request at INFO.
QUIET_LOGGERS = ("stripe", "httpx")


def configure_logging(level: Optional[str] = None) -> None:
    """Configure logging for the billing service.

    ``level`` overrides ``LOG_LEVEL``; third-party HTTP clients are held at
    WARNING unless DEBUG is requested.
    """
    resolved = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(
        level=resolved,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    if resolved != "DEBUG":
        for name in QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)
