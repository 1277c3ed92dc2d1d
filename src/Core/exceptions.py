# src/Core/exceptions.py
"""
Domain errors raised by the trip lifecycle.

Only the lifecycle mutators raise these. Parsing of the notes field never
raises; persistence errors are SQLAlchemy exceptions and propagate as-is.
"""


class TripValidationError(ValueError):
    """
    Odometer or ordering rule violated by a lifecycle call.

    Raised before any mutation or persistence call, so the trip record is
    left exactly as it was. Meant to be shown to the user, never retried.
    """

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field


class TripStateError(TripValidationError):
    """Completion requested for a trip that is not in progress (strict mode only)."""
