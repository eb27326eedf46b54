"""Tests for the funnel metrics aggregator."""

from dataclasses import replace

import pytest

from callback_ratio.tracker.errors import InvalidDateError
from callback_ratio.tracker.metrics import ApplicationMetrics, derive_metrics
from callback_ratio.tracker.models import ApplicationStatus

S = ApplicationStatus


class TestEmptyCollection:
    """Test metrics for an empty collection."""

    def test_empty_collection_yields_zeros(self, now):
        """No applications should give zero counts, ratios and averages."""
        metrics = derive_metrics([], now)

        assert metrics.total == 0
        assert metrics.callbacks == 0
        assert metrics.ghosted == 0
        assert metrics.callback_ratio == 0
        assert metrics.interview_ratio == 0
        assert metrics.offer_ratio == 0
        assert metrics.avg_response_time_days == 0
        assert metrics.ghost_after_callback_rate == 0
        assert metrics.applications_per_week == 0


class TestMixedCollection:
    """Test metrics for the five-application mixed collection."""

    @pytest.fixture
    def metrics(self, mixed_applications, now) -> ApplicationMetrics:
        return derive_metrics(mixed_applications, now)

    def test_counts(self, metrics):
        """Stage counts should follow the current status."""
        assert metrics.total == 5
        assert metrics.callbacks == 3
        assert metrics.interviews == 1
        assert metrics.offers == 0
        assert metrics.rejections == 1

    def test_ghosting_counts(self, metrics):
        """Each phase should be counted once and summed into ghosted."""
        assert metrics.pre_response_ghosted == 1
        assert metrics.post_callback_ghosted == 1
        assert metrics.post_interview_ghosted == 1
        assert metrics.ghosted == 3

    def test_ratios(self, metrics):
        """Ratios should divide successive stages."""
        assert metrics.callback_ratio == pytest.approx(3 / 5)
        assert metrics.interview_ratio == pytest.approx(1 / 3)
        assert metrics.offer_ratio == 0
        assert metrics.ghost_after_callback_rate == pytest.approx(1 / 3)

    def test_avg_response_time(self, metrics):
        """Average should cover only applications with a callback date."""
        # A2: 40 -> 25 (15 days), A3: 50 -> 35 (15 days), A4: 5 -> 3 (2 days)
        assert metrics.avg_response_time_days == pytest.approx(32 / 3)

    def test_applications_per_week(self, metrics):
        """Rate should span from the earliest submission to now."""
        # Earliest submission is 50 days ago
        assert metrics.applications_per_week == pytest.approx(5 / (50 / 7))

    def test_inputs_are_not_mutated(self, mixed_applications, now):
        """derive_metrics should leave its inputs unchanged."""
        before = [app.to_dict() for app in mixed_applications]

        derive_metrics(mixed_applications, now)

        assert [app.to_dict() for app in mixed_applications] == before

    def test_order_does_not_matter(self, mixed_applications, now):
        """Metrics should not depend on collection order."""
        forward = derive_metrics(mixed_applications, now)
        backward = derive_metrics(reversed(mixed_applications), now)

        assert forward == backward

    def test_to_dict(self, metrics):
        """to_dict should expose every metric by name."""
        result = metrics.to_dict()

        assert result["total"] == 5
        assert result["ghosted"] == 3
        assert set(result) >= {
            "callback_ratio",
            "interview_ratio",
            "offer_ratio",
            "avg_response_time_days",
        }


class TestStageCounting:
    """Test how statuses roll up into stage counts."""

    def test_offer_counts_as_callback_and_interview(self, applied_record, now, days_ago):
        """An OFFER should count toward callbacks, interviews and offers."""
        offer = replace(
            applied_record,
            status=S.OFFER,
            first_callback_date=days_ago(1),
            first_interview_date=days_ago(1),
            offer_date=days_ago(1),
        )

        metrics = derive_metrics([offer], now)

        assert (metrics.callbacks, metrics.interviews, metrics.offers) == (1, 1, 1)
        assert metrics.callback_ratio == 1
        assert metrics.interview_ratio == 1
        assert metrics.offer_ratio == 1

    def test_rejected_counts_only_as_rejection(self, applied_record, now, days_ago):
        """A REJECTED record should not count toward earlier stages."""
        rejected = replace(
            applied_record,
            status=S.REJECTED,
            first_callback_date=days_ago(1),
            rejection_date=days_ago(1),
        )

        metrics = derive_metrics([rejected], now)

        assert metrics.callbacks == 0
        assert metrics.rejections == 1

    def test_single_recent_application_counts_one_per_week(self, applied_record, now):
        """Spans shorter than a week should be floored at one week."""
        metrics = derive_metrics([applied_record], now)

        assert metrics.applications_per_week == 1

    @pytest.mark.parametrize(
        "statuses",
        [
            [S.APPLIED],
            [S.CALLBACK, S.APPLIED, S.APPLIED],
            [S.INTERVIEW, S.CALLBACK],
            [S.OFFER, S.INTERVIEW, S.REJECTED, S.APPLIED],
            [S.OFFER, S.OFFER],
        ],
    )
    def test_ratios_stay_within_unit_interval(
        self, applied_record, now, days_ago, statuses
    ):
        """All ratios should lie within [0, 1]."""
        records = [
            replace(
                applied_record,
                id=f"R{index}",
                status=status,
                first_callback_date=days_ago(1) if status != S.APPLIED else None,
            )
            for index, status in enumerate(statuses)
        ]

        metrics = derive_metrics(records, now)

        for ratio in (
            metrics.callback_ratio,
            metrics.interview_ratio,
            metrics.offer_ratio,
            metrics.ghost_after_callback_rate,
        ):
            assert 0 <= ratio <= 1


class TestInvalidData:
    """Test error propagation from malformed records."""

    def test_invalid_date_propagates(self, applied_record, now):
        """Malformed timestamps should raise rather than be skipped."""
        broken = replace(applied_record, applied_date="??")

        with pytest.raises(InvalidDateError):
            derive_metrics([broken], now)
