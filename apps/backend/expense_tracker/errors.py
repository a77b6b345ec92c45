"""Domain errors raised by the store and the services.

The HTTP layer maps each class to a status code in ``main.py``.
"""

from __future__ import annotations


class TrackerError(Exception):
    """Base class for recoverable expense tracker failures."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationFailure(TrackerError):
    """Input rejected before any store call."""

    status_code = 400


class RecordNotFound(TrackerError):
    status_code = 404


class InvalidTransition(TrackerError):
    """Paid/unpaid transition requested from the wrong state."""

    status_code = 409


class StoreWriteFailure(TrackerError):
    """An insert, update or delete against the store did not commit."""

    status_code = 503
