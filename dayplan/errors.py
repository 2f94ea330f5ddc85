"""Exception types raised by the scheduling core."""

from typing import List, Optional


class DayplanError(Exception):
    """Base class for all dayplan errors."""


class RecurrenceError(DayplanError):
    """Raised when a recurrence rule is malformed or cannot be evaluated."""

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        super().__init__(message)
        self.errors = list(errors or [])


class ScheduleInputError(DayplanError):
    """Raised for structurally invalid scheduling input (bad window, bad time)."""

    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code
