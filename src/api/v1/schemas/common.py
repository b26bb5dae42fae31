"""Common Pydantic schemas shared across the API."""

from typing import Any

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Error envelope returned by every failing endpoint."""

    error_code: str
    message: str
    details: Any | None = None
