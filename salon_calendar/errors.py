"""Exceptions raised by the salon calendar package."""


class SalonCalendarError(Exception):
    """Base class for dashboard errors."""


class TimeParseError(SalonCalendarError, ValueError):
    """Raised when a time-of-day string is not "H:MM AM|PM"."""


class DateParseError(SalonCalendarError, ValueError):
    """Raised when a date string is not "YYYY-MM-DD"."""


class InvalidTransition(SalonCalendarError):
    """Raised when a navigation action is not valid in the current view."""


class DraftIncompleteError(SalonCalendarError):
    """Raised when an appointment draft is submitted without required fields."""


class ApiError(SalonCalendarError):
    """Backend returned a non-success response."""

    def __init__(self, message: str, status: int = None):
        super().__init__(message)
        self.message = message
        self.status = status


class AuthenticationRequired(ApiError):
    """No auth token is available for the backend."""

    def __init__(self, message: str = "Authentication required. Please log in."):
        super().__init__(message, status=401)
