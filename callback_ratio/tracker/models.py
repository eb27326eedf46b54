"""Data models for the Application Tracker."""

from __future__ import annotations

import uuid
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from callback_ratio.tracker.errors import InvalidDateError


class ApplicationStatus(str, Enum):
    """Lifecycle phase of a job application."""

    APPLIED = "APPLIED"
    CALLBACK = "CALLBACK"
    INTERVIEW = "INTERVIEW"
    OFFER = "OFFER"
    REJECTED = "REJECTED"


class ApplicationSource(str, Enum):
    """Channel through which the application was submitted."""

    LINKEDIN = "LinkedIn"
    REFERRAL = "Referral"
    CAREER_PAGE = "CareerPage"
    OTHER = "Other"


class GhostingPhase(str, Enum):
    """Point in the lifecycle at which an employer went silent."""

    PRE_RESPONSE = "PRE_RESPONSE"
    POST_CALLBACK = "POST_CALLBACK"
    POST_INTERVIEW = "POST_INTERVIEW"


def utc_now() -> datetime:
    return datetime.now(UTC)


def format_timestamp(value: datetime) -> str:
    """Render an instant as an ISO-8601 string in UTC.

    Naive datetimes are taken to already be in UTC.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).isoformat()


def parse_timestamp(value: Any, field_name: str) -> datetime:
    """Parse a stored ISO-8601 timestamp into an aware UTC datetime.

    Args:
        value: The stored value (normally a string).
        field_name: Record field the value came from, used in the error.

    Returns:
        The parsed instant, normalized to UTC.

    Raises:
        InvalidDateError: If the value is not a valid ISO-8601 instant.
    """
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(value)
        except (TypeError, ValueError) as exc:
            raise InvalidDateError(field_name, value) from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


@dataclass(frozen=True)
class JobApplication:
    """A tracked job application.

    Records are immutable; status changes produce a new record through
    ``transition_status``.

    Attributes:
        id: Unique identifier, fixed at creation.
        company: Name of the company.
        role: Title of the job role.
        source: Channel the application was submitted through.
        status: Current lifecycle phase.
        applied_date: ISO-8601 timestamp of submission.
        last_updated: ISO-8601 timestamp of the latest status change.
        tech_tags: Ordered, informational technology tags.
        first_callback_date: Set on first entry into CALLBACK.
        first_interview_date: Set on first entry into INTERVIEW.
        offer_date: Set on first entry into OFFER.
        rejection_date: Set by the caller when the application is rejected.
    """

    id: str
    company: str
    role: str
    source: ApplicationSource
    status: ApplicationStatus
    applied_date: str
    last_updated: str
    tech_tags: tuple[str, ...] = field(default_factory=tuple)
    first_callback_date: str | None = None
    first_interview_date: str | None = None
    offer_date: str | None = None
    rejection_date: str | None = None

    @classmethod
    def new(
        cls,
        company: str,
        role: str,
        source: ApplicationSource,
        tech_tags: Iterable[str] = (),
        applied_at: datetime | None = None,
        id: str | None = None,
    ) -> JobApplication:
        """Create a freshly submitted application in the APPLIED phase."""
        applied = format_timestamp(applied_at or utc_now())
        return cls(
            id=id or uuid.uuid4().hex,
            company=company,
            role=role,
            source=ApplicationSource(source),
            status=ApplicationStatus.APPLIED,
            applied_date=applied,
            last_updated=applied,
            tech_tags=tuple(tech_tags),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize the record to a dictionary.

        Returns:
            Dictionary representation of the record.
        """
        return {
            "id": self.id,
            "company": self.company,
            "role": self.role,
            "tech_tags": list(self.tech_tags),
            "source": self.source.value,
            "status": self.status.value,
            "applied_date": self.applied_date,
            "last_updated": self.last_updated,
            "first_callback_date": self.first_callback_date,
            "first_interview_date": self.first_interview_date,
            "offer_date": self.offer_date,
            "rejection_date": self.rejection_date,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> JobApplication:
        """Deserialize a record from a dictionary.

        Args:
            data: Dictionary containing record data.

        Returns:
            JobApplication instance.
        """
        return cls(
            id=data["id"],
            company=data["company"],
            role=data["role"],
            source=ApplicationSource(data["source"]),
            status=ApplicationStatus(data["status"]),
            applied_date=data["applied_date"],
            last_updated=data["last_updated"],
            tech_tags=tuple(data.get("tech_tags") or ()),
            first_callback_date=data.get("first_callback_date"),
            first_interview_date=data.get("first_interview_date"),
            offer_date=data.get("offer_date"),
            rejection_date=data.get("rejection_date"),
        )
