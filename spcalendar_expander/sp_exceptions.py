"""Exception hierarchy for SharePoint recurrence parsing and expansion.

Unknown descriptor shapes and stale exception records are not errors and
never surface here. These types cover upstream data corruption only.
"""

from typing import Optional


class RecurrenceExpanderError(Exception):
    """Base exception for all spcalendar_expander errors."""


class RecurrenceParseError(RecurrenceExpanderError):
    """A token inside an otherwise-matched descriptor tag is malformed.

    Raised when:
    - An integer attribute (frequency, day, month, count) does not parse
      or is out of range
    - A window end timestamp does not parse
    - A qualifier or kind-of-day token is outside its closed vocabulary
    - A recognized descriptor carries no end condition
    """

    def __init__(self, descriptor: str, field: str, reason: Optional[str] = None):
        self.descriptor = descriptor
        self.field = field
        self.reason = reason
        message = f"Unable to parse {field} in recurrence descriptor {descriptor!r}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class AppointmentFieldError(RecurrenceExpanderError):
    """A source field is missing or does not have the expected shape."""

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid appointment field {field}: {reason}")


class RecurrenceExpansionError(RecurrenceExpanderError):
    """Occurrence generation failed for a well-formed rule."""
