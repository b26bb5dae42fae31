"""Custom exceptions and error codes."""

from enum import StrEnum
from typing import Any


class ErrorCode(StrEnum):
    """Standardized error codes for the API."""

    # Not found errors (404)
    PENDING_SIGNUP_NOT_FOUND = "PENDING_SIGNUP_NOT_FOUND"

    # Validation errors (400)
    VALIDATION_ERROR = "VALIDATION_ERROR"
    MISSING_REQUIRED_FIELDS = "MISSING_REQUIRED_FIELDS"
    PAYMENT_NOT_COMPLETED = "PAYMENT_NOT_COMPLETED"

    # Conflict errors (409)
    USERNAME_TAKEN = "USERNAME_TAKEN"

    # Rate limiting (429)
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"

    # Upstream errors (502)
    PAYMENT_PROVIDER_ERROR = "PAYMENT_PROVIDER_ERROR"

    # Server errors (500)
    INTERNAL_ERROR = "INTERNAL_ERROR"
    DATABASE_ERROR = "DATABASE_ERROR"


class AppException(Exception):
    """Base application exception."""

    def __init__(
        self,
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Any | None = None,
    ) -> None:
        self.error_code = error_code
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)


class MissingFieldsError(AppException):
    """A required signup field is blank."""

    def __init__(self, fields: list[str]) -> None:
        super().__init__(
            error_code=ErrorCode.MISSING_REQUIRED_FIELDS,
            message="Missing required fields",
            status_code=400,
            details={"fields": fields},
        )


class UsernameTakenError(AppException):
    """A profile with this username already exists."""

    def __init__(self, username: str) -> None:
        super().__init__(
            error_code=ErrorCode.USERNAME_TAKEN,
            message="Username already exists",
            status_code=409,
            details={"username": username},
        )


class PaymentNotCompletedError(AppException):
    """The payment intent is unknown or has not succeeded yet."""

    def __init__(self, payment_reference: str, payment_status: str | None = None) -> None:
        super().__init__(
            error_code=ErrorCode.PAYMENT_NOT_COMPLETED,
            message="Payment not completed",
            status_code=400,
            details={"payment_reference": payment_reference, "status": payment_status},
        )


class PendingSignupNotFoundError(AppException):
    """No pending signup is staged under this payment reference."""

    def __init__(self, payment_reference: str) -> None:
        super().__init__(
            error_code=ErrorCode.PENDING_SIGNUP_NOT_FOUND,
            message=f"Pending signup not found: {payment_reference}",
            status_code=404,
            details={"payment_reference": payment_reference},
        )


class PaymentProviderError(AppException):
    """The payment provider rejected or failed a request."""

    def __init__(self, message: str = "Payment provider error") -> None:
        super().__init__(
            error_code=ErrorCode.PAYMENT_PROVIDER_ERROR,
            message=message,
            status_code=502,
        )
