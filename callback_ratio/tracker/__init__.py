"""Application lifecycle tracking.

This module tracks job applications through a fixed lifecycle, detects
applications that have gone silent, and derives funnel metrics.

Public API:
- TrackerService: Service for creating, transitioning and summarizing applications
- ApplicationRepository: Storage boundary protocol
- SQLiteApplicationRepository / InMemoryApplicationRepository: Storage backends
- JobApplication: Data model for a tracked application
- transition_status / can_transition_status: Status transition guard
- get_ghosting_phase: Ghosting classifier
- derive_metrics: Funnel metrics aggregator
"""

from callback_ratio.tracker.errors import (
    DuplicateKeyError,
    InvalidDateError,
    InvalidTransitionError,
    NotFoundError,
    TimestampOrderError,
    TrackerError,
)
from callback_ratio.tracker.ghosting import (
    GHOSTING_THRESHOLD_DAYS,
    get_ghosting_phase,
    is_ghosted,
    is_pre_response_ghosted,
)
from callback_ratio.tracker.memory import InMemoryApplicationRepository
from callback_ratio.tracker.metrics import ApplicationMetrics, derive_metrics
from callback_ratio.tracker.models import (
    ApplicationSource,
    ApplicationStatus,
    GhostingPhase,
    JobApplication,
)
from callback_ratio.tracker.repository import (
    ApplicationRepository,
    SQLiteApplicationRepository,
)
from callback_ratio.tracker.service import DashboardSnapshot, TrackerService
from callback_ratio.tracker.transitions import (
    VALID_STATUS_TRANSITIONS,
    can_transition_status,
    record_status_change,
    transition_status,
)

__all__ = [
    "TrackerService",
    "DashboardSnapshot",
    "ApplicationRepository",
    "SQLiteApplicationRepository",
    "InMemoryApplicationRepository",
    "JobApplication",
    "ApplicationStatus",
    "ApplicationSource",
    "GhostingPhase",
    "ApplicationMetrics",
    "VALID_STATUS_TRANSITIONS",
    "GHOSTING_THRESHOLD_DAYS",
    "can_transition_status",
    "transition_status",
    "record_status_change",
    "get_ghosting_phase",
    "is_ghosted",
    "is_pre_response_ghosted",
    "derive_metrics",
    "TrackerError",
    "InvalidTransitionError",
    "InvalidDateError",
    "NotFoundError",
    "DuplicateKeyError",
    "TimestampOrderError",
]
