"""Repository port and SQLite store for job applications.

``ApplicationRepository`` is the only storage boundary the tracker depends
on. ``SQLiteApplicationRepository`` implements it with async SQLite
operations through aiosqlite.
"""

import json
import logging
import sqlite3
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import datetime
from pathlib import Path
from typing import Protocol, runtime_checkable

import aiosqlite

from callback_ratio.tracker.errors import DuplicateKeyError, NotFoundError
from callback_ratio.tracker.models import (
    ApplicationSource,
    ApplicationStatus,
    JobApplication,
)
from callback_ratio.tracker.transitions import record_status_change

logger = logging.getLogger(__name__)


@runtime_checkable
class ApplicationRepository(Protocol):
    """Storage boundary for job applications."""

    async def get_all(self) -> list[JobApplication]:
        """Return every stored application, in no particular order."""
        ...

    async def get_by_id(self, application_id: str) -> JobApplication | None:
        """Return the application, or None if it does not exist."""
        ...

    async def create(self, application: JobApplication) -> None:
        """Store a new application.

        Raises:
            DuplicateKeyError: If an application with the same id exists.
        """
        ...

    async def update(self, application: JobApplication) -> None:
        """Replace a stored application.

        Raises:
            NotFoundError: If no application with that id exists.
        """
        ...

    async def update_status(
        self,
        application_id: str,
        status: ApplicationStatus,
        now: datetime | None = None,
    ) -> None:
        """Move a stored application to ``status`` through the transition guard.

        The stored record is the result of ``record_status_change``, so a
        first rejection also sets ``rejection_date``.

        Raises:
            NotFoundError: If no application with that id exists.
            InvalidTransitionError: If the status change is not allowed.
            TimestampOrderError: If ``now`` precedes the stored timestamps.
        """
        ...

    async def delete(self, application_id: str) -> None:
        """Remove an application. Missing ids are ignored."""
        ...


# SQL schema for the applications table
CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS applications (
    id TEXT PRIMARY KEY,
    company TEXT NOT NULL,
    role TEXT NOT NULL,
    tech_tags TEXT NOT NULL DEFAULT '[]',
    source TEXT NOT NULL,
    status TEXT NOT NULL,
    applied_date TEXT NOT NULL,
    last_updated TEXT NOT NULL,
    first_callback_date TEXT,
    first_interview_date TEXT,
    offer_date TEXT,
    rejection_date TEXT
)
"""

CREATE_INDEX_SQL = """
CREATE INDEX IF NOT EXISTS idx_applications_status ON applications(status);
CREATE INDEX IF NOT EXISTS idx_applications_applied_date ON applications(applied_date);
"""

_COLUMNS = (
    "id",
    "company",
    "role",
    "tech_tags",
    "source",
    "status",
    "applied_date",
    "last_updated",
    "first_callback_date",
    "first_interview_date",
    "offer_date",
    "rejection_date",
)

INSERT_SQL = (
    f"INSERT INTO applications ({', '.join(_COLUMNS)}) "
    f"VALUES ({', '.join('?' for _ in _COLUMNS)})"
)

UPDATE_SQL = (
    "UPDATE applications SET "
    + ", ".join(f"{column} = ?" for column in _COLUMNS[1:])
    + " WHERE id = ?"
)


_KEY_CONFLICT_ERRORS = {"SQLITE_CONSTRAINT_PRIMARYKEY", "SQLITE_CONSTRAINT_UNIQUE"}


def _is_key_conflict(exc: sqlite3.IntegrityError) -> bool:
    """True if the integrity error is a primary key or UNIQUE violation."""
    return getattr(exc, "sqlite_errorname", None) in _KEY_CONFLICT_ERRORS


class SQLiteApplicationRepository:
    """Async SQLite repository for job applications.

    Each instance owns one connection, opened lazily and released by
    ``close()``.
    """

    def __init__(self, db_path: Path | str):
        """Initialize the repository.

        Args:
            db_path: Path to the SQLite database file.
        """
        self.db_path = Path(db_path)
        self._connection: aiosqlite.Connection | None = None

    @asynccontextmanager
    async def _get_connection(self) -> AsyncGenerator[aiosqlite.Connection, None]:
        """Get a database connection.

        Yields:
            An aiosqlite connection.
        """
        if self._connection is None:
            self._connection = await aiosqlite.connect(self.db_path)
            self._connection.row_factory = aiosqlite.Row
        yield self._connection

    async def initialize(self) -> None:
        """Initialize the database, creating tables if needed."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        async with self._get_connection() as conn:
            await conn.execute(CREATE_TABLE_SQL)
            await conn.executescript(CREATE_INDEX_SQL)
            await conn.commit()
        logger.debug("Initialized application store at %s", self.db_path)

    async def close(self) -> None:
        """Close the database connection."""
        if self._connection is not None:
            await self._connection.close()
            self._connection = None

    async def get_all(self) -> list[JobApplication]:
        async with self._get_connection() as conn:
            cursor = await conn.execute("SELECT * FROM applications")
            rows = await cursor.fetchall()

        return [self._row_to_application(row) for row in rows]

    async def get_by_id(self, application_id: str) -> JobApplication | None:
        async with self._get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM applications WHERE id = ?",
                (application_id,),
            )
            row = await cursor.fetchone()

        if row is None:
            return None

        return self._row_to_application(row)

    async def create(self, application: JobApplication) -> None:
        async with self._get_connection() as conn:
            try:
                await conn.execute(INSERT_SQL, self._application_to_row(application))
            except sqlite3.IntegrityError as exc:
                await conn.rollback()
                if _is_key_conflict(exc):
                    raise DuplicateKeyError(application.id) from exc
                raise
            await conn.commit()
        logger.debug("Inserted application %s", application.id)

    async def update(self, application: JobApplication) -> None:
        row = self._application_to_row(application)
        async with self._get_connection() as conn:
            try:
                cursor = await conn.execute(UPDATE_SQL, (*row[1:], application.id))
            except sqlite3.Error:
                await conn.rollback()
                raise
            if cursor.rowcount == 0:
                await conn.rollback()
                raise NotFoundError(application.id)
            await conn.commit()
        logger.debug("Updated application %s", application.id)

    async def update_status(
        self,
        application_id: str,
        status: ApplicationStatus,
        now: datetime | None = None,
    ) -> None:
        existing = await self.get_by_id(application_id)
        if existing is None:
            raise NotFoundError(application_id)

        await self.update(record_status_change(existing, status, now))

    async def delete(self, application_id: str) -> None:
        async with self._get_connection() as conn:
            await conn.execute(
                "DELETE FROM applications WHERE id = ?",
                (application_id,),
            )
            await conn.commit()
        logger.debug("Deleted application %s", application_id)

    @staticmethod
    def _application_to_row(application: JobApplication) -> tuple:
        return (
            application.id,
            application.company,
            application.role,
            json.dumps(list(application.tech_tags)),
            application.source.value,
            application.status.value,
            application.applied_date,
            application.last_updated,
            application.first_callback_date,
            application.first_interview_date,
            application.offer_date,
            application.rejection_date,
        )

    @staticmethod
    def _row_to_application(row: aiosqlite.Row) -> JobApplication:
        """Convert a database row to a JobApplication.

        Args:
            row: The database row.

        Returns:
            A JobApplication instance.
        """
        return JobApplication(
            id=row["id"],
            company=row["company"],
            role=row["role"],
            tech_tags=tuple(json.loads(row["tech_tags"] or "[]")),
            source=ApplicationSource(row["source"]),
            status=ApplicationStatus(row["status"]),
            applied_date=row["applied_date"],
            last_updated=row["last_updated"],
            first_callback_date=row["first_callback_date"],
            first_interview_date=row["first_interview_date"],
            offer_date=row["offer_date"],
            rejection_date=row["rejection_date"],
        )
