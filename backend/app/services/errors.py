"""Domain errors raised by the booking, payment and listing services.

Each error carries a machine-readable ``code`` and the HTTP status the API
layer renders it with. Services raise these; ``app.main`` installs the
exception handlers that turn them, and unexpected failures as ``ServerError``,
into ``{"detail": ..., "code": ...}``.
"""

from fastapi import status


class BookingError(Exception):
    """Base class for all domain errors."""

    code: str = "server_error"
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, str]:
        return {"detail": self.message, "code": self.code}


class MissingField(BookingError):
    code = "missing_field"
    status_code = status.HTTP_400_BAD_REQUEST


class InvalidArgument(BookingError):
    code = "invalid_argument"
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class NotFound(BookingError):
    code = "not_found"
    status_code = status.HTTP_404_NOT_FOUND


class InvalidOperation(BookingError):
    code = "invalid_operation"
    status_code = status.HTTP_400_BAD_REQUEST


class Unavailable(BookingError):
    code = "unavailable"
    status_code = status.HTTP_409_CONFLICT


class InvalidRange(BookingError):
    code = "invalid_range"
    status_code = status.HTTP_400_BAD_REQUEST


class Conflict(BookingError):
    code = "conflict"
    status_code = status.HTTP_409_CONFLICT


class Forbidden(BookingError):
    code = "forbidden"
    status_code = status.HTTP_403_FORBIDDEN


class InvalidTransition(BookingError):
    code = "invalid_transition"
    status_code = status.HTTP_409_CONFLICT


class PriceMismatch(BookingError):
    code = "price_mismatch"
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class PaymentFailed(BookingError):
    code = "payment_failed"
    status_code = status.HTTP_402_PAYMENT_REQUIRED


class ServerError(BookingError):
    """Unexpected or storage failure; carries the underlying message."""

    code = "server_error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
