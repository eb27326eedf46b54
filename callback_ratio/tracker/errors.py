"""Error types raised by the Application Tracker."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from callback_ratio.tracker.models import ApplicationStatus


def _name(status: object) -> str:
    return str(getattr(status, "value", status))


class TrackerError(Exception):
    """Base class for tracker errors."""


class InvalidTransitionError(TrackerError):
    """Raised when a status change is not an edge of the transition table."""

    def __init__(self, from_status: ApplicationStatus, to_status: ApplicationStatus):
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(
            f"Invalid status transition: {_name(from_status)} -> {_name(to_status)}"
        )


class InvalidDateError(TrackerError, ValueError):
    """Raised when a stored timestamp is not a valid ISO-8601 instant."""

    def __init__(self, field: str, value: object):
        self.field = field
        self.value = value
        super().__init__(f"Invalid {field}: {value!r}")


class NotFoundError(TrackerError, LookupError):
    """Raised when an application id is not present in the repository."""

    def __init__(self, application_id: str):
        self.application_id = application_id
        super().__init__(f"Application not found: {application_id}")


class DuplicateKeyError(TrackerError):
    """Raised when creating an application whose id already exists."""

    def __init__(self, application_id: str):
        self.application_id = application_id
        super().__init__(f"Application already exists: {application_id}")


class TimestampOrderError(TrackerError, ValueError):
    """Raised when a status change would be dated before an earlier timestamp."""

    def __init__(self, field: str, value: str, changed_at: str):
        self.field = field
        self.value = value
        self.changed_at = changed_at
        super().__init__(f"Status change at {changed_at} precedes {field} {value}")
