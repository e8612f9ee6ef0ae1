"""Exception types raised by the engine."""

from typing import Optional


class WardRosterError(Exception):
    """Base class for all engine errors."""


class InvalidTransition(WardRosterError):
    """A lifecycle operation was requested from a state that does not permit it."""

    def __init__(self, current, target):
        self.current = current
        self.target = target
        super().__init__(
            f"Cannot move pre-schedule from {current.value} to {target.value}"
        )


class RequestLocked(WardRosterError):
    """A mutation was attempted on a locked pre-schedule."""

    def __init__(self, message: str = "Pre-schedule is locked"):
        super().__init__(message)


class RequestNotOpen(WardRosterError):
    """A mutation was attempted while the pre-schedule is not accepting edits."""

    def __init__(self, message: str = "Pre-schedule is not open for editing"):
        super().__init__(message)


class UnknownShiftCode(WardRosterError):
    """A shift code is not defined in the unit's shift catalog."""

    def __init__(self, code: str):
        self.code = code
        super().__init__(f"Unknown shift code: {code!r}")


class DateOutsideMonth(WardRosterError):
    """A date lies outside the month it is supposed to belong to."""

    def __init__(self, value, message: Optional[str] = None):
        self.value = value
        super().__init__(message or f"Date {value} is outside the target month")


class ConfigError(WardRosterError):
    """Engine configuration is malformed."""


class ConcurrentModification(WardRosterError):
    """A conditional write found a different prior state than expected."""

    def __init__(self, key, expected, actual):
        self.key = key
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Conditional write on {key} failed: expected {expected}, found {actual}"
        )
