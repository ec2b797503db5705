"""
Domain-specific exception hierarchy for the make-up class booking application.
"""


class BookingError(Exception):
    """Base class for all application-level errors."""


class EmptySelection(BookingError):
    """Raised when a draft is committed without any selected slot."""

    def __init__(self, message: str = "Select at least one time slot before submitting.") -> None:
        super().__init__(message)


class MissingIdentity(BookingError):
    """Raised when a draft is committed without a student name or class."""

    def __init__(self, message: str = "Both name and class are required.") -> None:
        super().__init__(message)


class SlotOccupied(BookingError):
    """A slot is already claimed by a committed booking."""


class SlotNotFound(BookingError):
    """Raised when removing a slot that no booking holds."""


class PersistedStateCorrupt(BookingError):
    """Raised when a stored payload cannot be decoded."""


class AuthenticationError(BookingError):
    """Raised when the administrative password check fails."""
