"""Pytest configuration and shared fixtures."""

from datetime import UTC, datetime, timedelta

import pytest

from callback_ratio.tracker.models import (
    ApplicationSource,
    ApplicationStatus,
    JobApplication,
)

NOW = datetime(2025, 12, 21, tzinfo=UTC)


def days_ago(days: float, now: datetime = NOW) -> str:
    """ISO-8601 timestamp ``days`` before ``now``."""
    return (now - timedelta(days=days)).isoformat()


@pytest.fixture(name="days_ago")
def days_ago_fixture():
    """Helper building ISO-8601 timestamps relative to the reference instant."""
    return days_ago


@pytest.fixture
def now() -> datetime:
    """Fixed reference instant for time-dependent tests."""
    return NOW


@pytest.fixture
def applied_record() -> JobApplication:
    """A freshly submitted application."""
    return JobApplication(
        id="A0",
        company="ExampleCo",
        role="Software Engineer",
        source=ApplicationSource.LINKEDIN,
        status=ApplicationStatus.APPLIED,
        applied_date=days_ago(2),
        last_updated=days_ago(2),
        tech_tags=("Python",),
    )


@pytest.fixture
def mixed_applications() -> list[JobApplication]:
    """One application per ghosting phase, one active and one rejected."""
    return [
        JobApplication(
            id="A1",
            company="Silent Corp",
            role="Frontend Dev",
            tech_tags=("React",),
            source=ApplicationSource.LINKEDIN,
            status=ApplicationStatus.APPLIED,
            applied_date=days_ago(30),
            last_updated=days_ago(30),
        ),
        JobApplication(
            id="A2",
            company="Callback Then Vanish LLC",
            role="Backend Dev",
            tech_tags=("Java",),
            source=ApplicationSource.REFERRAL,
            status=ApplicationStatus.CALLBACK,
            applied_date=days_ago(40),
            first_callback_date=days_ago(25),
            last_updated=days_ago(25),
        ),
        JobApplication(
            id="A3",
            company="Interview Ghost Inc",
            role="Fullstack Dev",
            tech_tags=("Angular",),
            source=ApplicationSource.OTHER,
            status=ApplicationStatus.INTERVIEW,
            applied_date=days_ago(50),
            first_callback_date=days_ago(35),
            first_interview_date=days_ago(25),
            last_updated=days_ago(25),
        ),
        JobApplication(
            id="A4",
            company="Active Process Ltd",
            role="Engineer",
            tech_tags=("TypeScript",),
            source=ApplicationSource.LINKEDIN,
            status=ApplicationStatus.CALLBACK,
            applied_date=days_ago(5),
            first_callback_date=days_ago(3),
            last_updated=days_ago(3),
        ),
        JobApplication(
            id="A5",
            company="Fast Reject Co",
            role="Dev",
            tech_tags=("Node",),
            source=ApplicationSource.OTHER,
            status=ApplicationStatus.REJECTED,
            applied_date=days_ago(10),
            rejection_date=days_ago(4),
            last_updated=days_ago(4),
        ),
    ]


@pytest.fixture(autouse=True)
def _reset_logging():
    """Restore the application logger after each test."""
    from callback_ratio.utils.logging import reset_logging

    yield
    reset_logging()
