# backend/carservice/services/errors.py
"""Domain errors raised by the booking services."""

from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    UNKNOWN_SERVICE = "UNKNOWN_SERVICE"
    SLOT_UNAVAILABLE = "SLOT_UNAVAILABLE"
    NO_BAY_AVAILABLE = "NO_BAY_AVAILABLE"
    INVALID_BOOKING_STATE = "INVALID_BOOKING_STATE"
    BOOKING_NOT_FOUND = "BOOKING_NOT_FOUND"
    PERSISTENCE_FAILURE = "PERSISTENCE_FAILURE"


class BookingError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode = ErrorCode.PERSISTENCE_FAILURE
    status_code: int = 422

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class UnknownServiceError(BookingError):
    """Raised when requested service ids are missing from the catalog."""

    code = ErrorCode.UNKNOWN_SERVICE

    def __init__(self, service_ids: list[int]) -> None:
        super().__init__("One or more selected services do not exist.")
        self.service_ids = service_ids


class SlotUnavailableError(BookingError):
    """Raised when the requested start time is no longer offered."""

    code = ErrorCode.SLOT_UNAVAILABLE

    def __init__(self, start_time: str) -> None:
        super().__init__("The selected time slot is not available.")
        self.start_time = start_time


class NoBayAvailableError(BookingError):
    """Raised when every active bay is busy for the exact interval."""

    code = ErrorCode.NO_BAY_AVAILABLE

    def __init__(self) -> None:
        super().__init__("No service bay available for the selected time.")


class BookingStateError(BookingError):
    """Raised when a status transition is not allowed."""

    code = ErrorCode.INVALID_BOOKING_STATE


class BookingNotFoundError(BookingError):
    """Raised when a booking does not exist or is not visible to the caller."""

    code = ErrorCode.BOOKING_NOT_FOUND
    status_code = 404

    def __init__(self, booking_id: int) -> None:
        super().__init__("Booking not found.")
        self.booking_id = booking_id


class PersistenceError(BookingError):
    """Raised when the store fails during a write; nothing was committed."""

    code = ErrorCode.PERSISTENCE_FAILURE
    status_code = 500

    def __init__(self, message: str = "Failed to save booking.") -> None:
        super().__init__(message)
