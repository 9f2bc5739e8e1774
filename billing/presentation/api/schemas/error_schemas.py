from typing import Optional

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """JSON body returned when a request cannot be processed."""

    message: str
    detail: Optional[str] = None
    status_code: int
