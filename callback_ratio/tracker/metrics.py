"""Funnel metrics derived from a collection of applications."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any

from callback_ratio.tracker.ghosting import (
    GHOSTING_THRESHOLD_DAYS,
    days_between,
    get_ghosting_phase,
)
from callback_ratio.tracker.models import (
    ApplicationStatus,
    GhostingPhase,
    JobApplication,
    parse_timestamp,
    utc_now,
)

CALLBACK_STAGES = frozenset(
    {ApplicationStatus.CALLBACK, ApplicationStatus.INTERVIEW, ApplicationStatus.OFFER}
)
INTERVIEW_STAGES = frozenset({ApplicationStatus.INTERVIEW, ApplicationStatus.OFFER})

DAYS_PER_WEEK = 7


@dataclass(frozen=True)
class ApplicationMetrics:
    """Summary statistics for a dashboard snapshot."""

    total: int
    callbacks: int
    interviews: int
    offers: int
    rejections: int

    ghosted: int
    pre_response_ghosted: int
    post_callback_ghosted: int
    post_interview_ghosted: int

    callback_ratio: float
    interview_ratio: float
    offer_ratio: float

    avg_response_time_days: float
    ghost_after_callback_rate: float
    applications_per_week: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _ratio(numerator: int, denominator: int) -> float:
    return 0.0 if denominator == 0 else numerator / denominator


def _response_times(applications: list[JobApplication]) -> list[float]:
    """Days from submission to first callback, for apps that got one."""
    return [
        days_between(
            parse_timestamp(app.applied_date, "applied_date"),
            parse_timestamp(app.first_callback_date, "first_callback_date"),
        )
        for app in applications
        if app.first_callback_date
    ]


def _applications_per_week(applications: list[JobApplication], now: datetime) -> float:
    if not applications:
        return 0.0
    earliest = min(
        parse_timestamp(app.applied_date, "applied_date") for app in applications
    )
    weeks = max(days_between(earliest, now) / DAYS_PER_WEEK, 1.0)
    return len(applications) / weeks


def derive_metrics(
    applications: Iterable[JobApplication],
    now: datetime | None = None,
    threshold_days: float = GHOSTING_THRESHOLD_DAYS,
) -> ApplicationMetrics:
    """Fold a collection of applications into funnel metrics.

    Stage counts are based on the current status: an application counts as
    a callback if it is in CALLBACK, INTERVIEW or OFFER, and as an
    interview if it is in INTERVIEW or OFFER. Each application is run
    through the ghosting classifier once at ``now``.

    Args:
        applications: Applications to aggregate, in any order.
        now: Reference instant. Defaults to the current UTC time.
        threshold_days: Ghosting threshold passed to the classifier.

    Returns:
        The derived metrics. Ratios are 0 when their denominator is 0 and
        ``avg_response_time_days`` is 0 when no application got a callback.

    Raises:
        InvalidDateError: If a timestamp needed for the metrics is invalid.
    """
    apps = list(applications)
    now = parse_timestamp(now or utc_now(), "now")

    statuses = Counter(app.status for app in apps)
    total = len(apps)
    callbacks = sum(statuses[status] for status in CALLBACK_STAGES)
    interviews = sum(statuses[status] for status in INTERVIEW_STAGES)
    offers = statuses[ApplicationStatus.OFFER]
    rejections = statuses[ApplicationStatus.REJECTED]

    phases = Counter(get_ghosting_phase(app, now, threshold_days) for app in apps)
    pre_response = phases[GhostingPhase.PRE_RESPONSE]
    post_callback = phases[GhostingPhase.POST_CALLBACK]
    post_interview = phases[GhostingPhase.POST_INTERVIEW]

    response_times = _response_times(apps)
    avg_response = (
        sum(response_times) / len(response_times) if response_times else 0.0
    )

    return ApplicationMetrics(
        total=total,
        callbacks=callbacks,
        interviews=interviews,
        offers=offers,
        rejections=rejections,
        ghosted=pre_response + post_callback + post_interview,
        pre_response_ghosted=pre_response,
        post_callback_ghosted=post_callback,
        post_interview_ghosted=post_interview,
        callback_ratio=_ratio(callbacks, total),
        interview_ratio=_ratio(interviews, callbacks),
        offer_ratio=_ratio(offers, interviews),
        avg_response_time_days=avg_response,
        ghost_after_callback_rate=_ratio(post_callback, callbacks),
        applications_per_week=_applications_per_week(apps, now),
    )
