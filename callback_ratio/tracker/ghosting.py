"""Ghosting classification.

An application is ghosted when at least ``GHOSTING_THRESHOLD_DAYS`` have
passed since the last employer action and nothing has happened since. The
threshold is shared by all three phases.
"""

from datetime import datetime, timedelta

from callback_ratio.tracker.models import (
    ApplicationStatus,
    GhostingPhase,
    JobApplication,
    parse_timestamp,
    utc_now,
)

GHOSTING_THRESHOLD_DAYS = 14

_DAY = timedelta(days=1)


def days_between(start: datetime, end: datetime) -> float:
    """Fractional number of days from ``start`` to ``end``."""
    return (end - start) / _DAY


def _silent_for(
    value: str | None, field_name: str, now: datetime, threshold_days: float
) -> bool:
    since = parse_timestamp(value, field_name)
    return days_between(since, now) >= threshold_days


def get_ghosting_phase(
    application: JobApplication,
    now: datetime | None = None,
    threshold_days: float = GHOSTING_THRESHOLD_DAYS,
) -> GhostingPhase | None:
    """Classify whether and where an application has gone silent.

    Only the branch matching the current status is evaluated, so at most
    one phase is returned. OFFER and REJECTED applications never ghost.

    Args:
        application: The record to classify.
        now: Reference instant. Defaults to the current UTC time.
        threshold_days: Days of silence after which an application ghosts.

    Returns:
        The ghosting phase, or None if the application is not ghosted.

    Raises:
        InvalidDateError: If the timestamp the branch depends on is invalid.
    """
    now = parse_timestamp(now or utc_now(), "now")
    app = application

    match app.status:
        case ApplicationStatus.APPLIED:
            if not app.first_callback_date and _silent_for(
                app.applied_date, "applied_date", now, threshold_days
            ):
                return GhostingPhase.PRE_RESPONSE
        case ApplicationStatus.CALLBACK:
            if (
                app.first_callback_date
                and not app.first_interview_date
                and _silent_for(
                    app.first_callback_date, "first_callback_date", now, threshold_days
                )
            ):
                return GhostingPhase.POST_CALLBACK
        case ApplicationStatus.INTERVIEW:
            if (
                app.first_interview_date
                and not app.offer_date
                and not app.rejection_date
                and _silent_for(
                    app.first_interview_date,
                    "first_interview_date",
                    now,
                    threshold_days,
                )
            ):
                return GhostingPhase.POST_INTERVIEW
        case ApplicationStatus.OFFER | ApplicationStatus.REJECTED:
            pass

    return None


def is_ghosted(
    application: JobApplication,
    now: datetime | None = None,
    threshold_days: float = GHOSTING_THRESHOLD_DAYS,
) -> bool:
    return get_ghosting_phase(application, now, threshold_days) is not None


def is_pre_response_ghosted(
    application: JobApplication,
    now: datetime | None = None,
    threshold_days: float = GHOSTING_THRESHOLD_DAYS,
) -> bool:
    """True if the application got no response at all within the threshold."""
    return (
        get_ghosting_phase(application, now, threshold_days)
        == GhostingPhase.PRE_RESPONSE
    )
