"""In-memory application repository, for tests and throwaway sessions."""

from datetime import datetime

from callback_ratio.tracker.errors import DuplicateKeyError, NotFoundError
from callback_ratio.tracker.models import ApplicationStatus, JobApplication
from callback_ratio.tracker.transitions import record_status_change


class InMemoryApplicationRepository:
    """Dict-backed ``ApplicationRepository``.

    Records are immutable, so they are handed out without copying.
    """

    def __init__(self, applications: list[JobApplication] | None = None):
        self._applications: dict[str, JobApplication] = {}
        for application in applications or []:
            self._insert(application)

    def _insert(self, application: JobApplication) -> None:
        if application.id in self._applications:
            raise DuplicateKeyError(application.id)
        self._applications[application.id] = application

    async def get_all(self) -> list[JobApplication]:
        return list(self._applications.values())

    async def get_by_id(self, application_id: str) -> JobApplication | None:
        return self._applications.get(application_id)

    async def create(self, application: JobApplication) -> None:
        self._insert(application)

    async def update(self, application: JobApplication) -> None:
        if application.id not in self._applications:
            raise NotFoundError(application.id)
        self._applications[application.id] = application

    async def update_status(
        self,
        application_id: str,
        status: ApplicationStatus,
        now: datetime | None = None,
    ) -> None:
        existing = self._applications.get(application_id)
        if existing is None:
            raise NotFoundError(application_id)
        self._applications[application_id] = record_status_change(
            existing, status, now
        )

    async def delete(self, application_id: str) -> None:
        self._applications.pop(application_id, None)
