"""Business logic service for the Application Tracker.

This module provides the TrackerService class which handles:
- Application creation
- Guarded status transitions persisted through the repository
- Dashboard snapshots (ghosting phases and funnel metrics)
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING

from callback_ratio.tracker.errors import InvalidTransitionError, NotFoundError
from callback_ratio.tracker.ghosting import GHOSTING_THRESHOLD_DAYS, get_ghosting_phase
from callback_ratio.tracker.metrics import ApplicationMetrics, derive_metrics
from callback_ratio.tracker.models import (
    ApplicationSource,
    ApplicationStatus,
    GhostingPhase,
    JobApplication,
    parse_timestamp,
    utc_now,
)
from callback_ratio.tracker.repository import (
    ApplicationRepository,
    SQLiteApplicationRepository,
)
from callback_ratio.tracker.transitions import record_status_change
from callback_ratio.utils.logging import configure_logging

if TYPE_CHECKING:
    from callback_ratio.config.settings import Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DashboardSnapshot:
    """Metrics plus the ghosting phase of every ghosted application."""

    metrics: ApplicationMetrics
    phases: dict[str, GhostingPhase] = field(default_factory=dict)

    def ghosted_ids(self, phase: GhostingPhase | None = None) -> list[str]:
        """Ids of ghosted applications, optionally limited to one phase."""
        return [
            application_id
            for application_id, ghost_phase in self.phases.items()
            if phase is None or ghost_phase == phase
        ]


class TrackerService:
    """Business logic service for tracking job applications.

    This class coordinates the transition guard, the ghosting classifier
    and the metrics aggregator with an injected repository.
    """

    def __init__(
        self,
        repository: ApplicationRepository,
        threshold_days: float = GHOSTING_THRESHOLD_DAYS,
    ):
        """Initialize the service.

        Args:
            repository: Storage for applications.
            threshold_days: Days of silence after which an application ghosts.
        """
        self.repository = repository
        self.threshold_days = threshold_days

    async def create_application(
        self,
        company: str,
        role: str,
        source: ApplicationSource,
        tech_tags: Iterable[str] = (),
        applied_at: datetime | None = None,
    ) -> JobApplication:
        """Create and store a new application in the APPLIED phase.

        Returns:
            The stored application.
        """
        application = JobApplication.new(
            company=company,
            role=role,
            source=source,
            tech_tags=tech_tags,
            applied_at=applied_at,
        )
        await self.repository.create(application)
        logger.info(
            "Tracking application %s: %s at %s",
            application.id,
            role,
            company,
        )
        return application

    async def get_application(self, application_id: str) -> JobApplication | None:
        return await self.repository.get_by_id(application_id)

    async def list_applications(
        self, status: ApplicationStatus | None = None
    ) -> list[JobApplication]:
        """List applications, most recently submitted first.

        Args:
            status: Optional status to filter by.
        """
        applications = await self.repository.get_all()
        if status is not None:
            applications = [app for app in applications if app.status == status]
        return sorted(
            applications,
            key=lambda app: parse_timestamp(app.applied_date, "applied_date"),
            reverse=True,
        )

    async def transition(
        self,
        application_id: str,
        next_status: ApplicationStatus,
        now: datetime | None = None,
    ) -> JobApplication:
        """Move an application to a new status and persist it.

        A first rejection also records ``rejection_date``.

        Args:
            application_id: Id of the application to update.
            next_status: The requested status.
            now: Instant of the change. Defaults to the current UTC time.

        Returns:
            The updated application.

        Raises:
            NotFoundError: If the application does not exist.
            InvalidTransitionError: If the status change is not allowed.
            TimestampOrderError: If ``now`` precedes the stored timestamps.
        """
        current = await self.repository.get_by_id(application_id)
        if current is None:
            raise NotFoundError(application_id)

        try:
            updated = record_status_change(current, next_status, now or utc_now())
        except InvalidTransitionError:
            logger.warning(
                "Rejected status change for %s: %s -> %s",
                application_id,
                current.status.value,
                next_status.value,
            )
            raise

        await self.repository.update(updated)
        logger.info(
            "Application %s moved %s -> %s",
            application_id,
            current.status.value,
            next_status.value,
        )
        return updated

    async def delete_application(self, application_id: str) -> None:
        await self.repository.delete(application_id)

    async def dashboard(self, now: datetime | None = None) -> DashboardSnapshot:
        """Build a dashboard snapshot of every stored application.

        Args:
            now: Reference instant. Defaults to the current UTC time.
        """
        now = now or utc_now()
        applications = await self.repository.get_all()

        phases: dict[str, GhostingPhase] = {}
        for application in applications:
            phase = get_ghosting_phase(application, now, self.threshold_days)
            if phase is not None:
                phases[application.id] = phase

        metrics = derive_metrics(applications, now, self.threshold_days)
        logger.debug(
            "Dashboard snapshot: %d applications, %d ghosted",
            metrics.total,
            metrics.ghosted,
        )
        return DashboardSnapshot(metrics=metrics, phases=phases)


async def open_tracker_service(settings: Settings) -> TrackerService:
    """Open the SQLite store named by ``settings`` and wrap it in a service.

    Also configures application logging at ``settings.log_level``. The
    caller owns the returned service's repository and must close it.
    """
    configure_logging(settings.log_level)
    repository = SQLiteApplicationRepository(settings.tracker_db_path)
    await repository.initialize()
    return TrackerService(repository, threshold_days=settings.ghosting_threshold_days)
