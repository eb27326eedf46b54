"""Status transition guard for job applications.

Every status change goes through ``transition_status``, which validates the
edge against ``VALID_STATUS_TRANSITIONS`` and stamps the write-once
milestone timestamps.
"""

from collections.abc import Mapping
from dataclasses import replace
from datetime import datetime
from types import MappingProxyType

from callback_ratio.tracker.errors import InvalidTransitionError, TimestampOrderError
from callback_ratio.tracker.models import (
    ApplicationStatus,
    JobApplication,
    format_timestamp,
    parse_timestamp,
    utc_now,
)

VALID_STATUS_TRANSITIONS: Mapping[ApplicationStatus, frozenset[ApplicationStatus]] = (
    MappingProxyType(
        {
            ApplicationStatus.APPLIED: frozenset(
                {ApplicationStatus.CALLBACK, ApplicationStatus.REJECTED}
            ),
            ApplicationStatus.CALLBACK: frozenset(
                {ApplicationStatus.INTERVIEW, ApplicationStatus.REJECTED}
            ),
            ApplicationStatus.INTERVIEW: frozenset(
                {ApplicationStatus.OFFER, ApplicationStatus.REJECTED}
            ),
            ApplicationStatus.OFFER: frozenset(),
            ApplicationStatus.REJECTED: frozenset(),
        }
    )
)


def can_transition_status(
    from_status: ApplicationStatus, to_status: ApplicationStatus
) -> bool:
    """Return True if ``from_status -> to_status`` is an allowed edge."""
    return to_status in VALID_STATUS_TRANSITIONS.get(from_status, frozenset())


def is_terminal(status: ApplicationStatus) -> bool:
    """Return True if no transition leaves ``status``."""
    return not VALID_STATUS_TRANSITIONS.get(status)


def milestone_field(status: ApplicationStatus) -> str | None:
    """Name of the record field stamped on first entry into ``status``.

    REJECTED has no guarded milestone; ``rejection_date`` is owned by the
    caller.
    """
    match status:
        case ApplicationStatus.CALLBACK:
            return "first_callback_date"
        case ApplicationStatus.INTERVIEW:
            return "first_interview_date"
        case ApplicationStatus.OFFER:
            return "offer_date"
        case ApplicationStatus.APPLIED | ApplicationStatus.REJECTED:
            return None


def transition_status(
    application: JobApplication,
    next_status: ApplicationStatus,
    now: datetime | None = None,
) -> JobApplication:
    """Apply a status transition.

    Args:
        application: The current record. It is not modified.
        next_status: The requested status.
        now: Instant of the change. Defaults to the current UTC time.

    Returns:
        A new record with the status, ``last_updated`` and, on first entry,
        the milestone timestamp updated.

    Raises:
        InvalidTransitionError: If the edge is not in the transition table.
        TimestampOrderError: If ``now`` is earlier than ``applied_date`` or
            ``last_updated``.
        InvalidDateError: If either of those stored timestamps is invalid.
    """
    if not can_transition_status(application.status, next_status):
        raise InvalidTransitionError(application.status, next_status)

    changed_at = parse_timestamp(now or utc_now(), "now")
    stamp = format_timestamp(changed_at)

    # last_updated never precedes applied_date or a previous change
    for field_name in ("applied_date", "last_updated"):
        value = getattr(application, field_name)
        if changed_at < parse_timestamp(value, field_name):
            raise TimestampOrderError(field_name, value, stamp)

    changes: dict[str, str | ApplicationStatus] = {
        "status": next_status,
        "last_updated": stamp,
    }

    # Milestones are write-once
    milestone = milestone_field(next_status)
    if milestone is not None and not getattr(application, milestone):
        changes[milestone] = stamp

    return replace(application, **changes)


def record_status_change(
    application: JobApplication,
    next_status: ApplicationStatus,
    now: datetime | None = None,
) -> JobApplication:
    """Guarded transition plus the caller-owned ``rejection_date``.

    This is the status change every write path persists: the result of
    ``transition_status``, with ``rejection_date`` set to the change
    instant on first entry into REJECTED.
    """
    updated = transition_status(application, next_status, now)
    if next_status == ApplicationStatus.REJECTED and not updated.rejection_date:
        updated = replace(updated, rejection_date=updated.last_updated)
    return updated
