"""
Unit tests for period keys and the Time-Bucketed Aggregator.
"""

from datetime import datetime, timedelta, timezone

import pytest

from psp_analytics.core.aggregation import (
    TimeBucketedAggregator,
    daily_key,
    dated_journey,
    monthly_key,
    period_key,
    weekly_key,
)
from psp_analytics.core.models import Granularity


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


@pytest.mark.unit
class TestPeriodKeys:
    """Tests for bucket key derivation"""

    @pytest.mark.parametrize("moment,expected", [
        # 2024-01-01 is a Monday
        (utc(2024, 1, 1), "2024-W01"),
        (utc(2024, 1, 6), "2024-W01"),
        (utc(2024, 1, 7), "2024-W02"),
        (utc(2024, 3, 4), "2024-W10"),
        (utc(2024, 12, 31), "2024-W53"),
        # 2023-01-01 is a Sunday
        (utc(2023, 1, 1), "2023-W01"),
        (utc(2023, 1, 7), "2023-W01"),
        (utc(2023, 1, 8), "2023-W02"),
        # 2022-01-01 is a Saturday
        (utc(2022, 1, 1), "2022-W01"),
        (utc(2022, 1, 2), "2022-W02"),
    ])
    def test_weekly_key(self, moment, expected):
        """Test the week approximation, which is not ISO 8601"""
        assert weekly_key(moment) == expected

    def test_weekly_key_differs_from_iso(self):
        """Test that the labels are not the ISO calendar week"""
        moment = utc(2022, 1, 2)
        assert moment.isocalendar()[1] == 52
        assert weekly_key(moment) == "2022-W02"

    def test_daily_and_monthly(self):
        """Test YYYY-MM-DD and YYYY-MM keys"""
        moment = utc(2024, 2, 29, 23, 59)
        assert daily_key(moment) == "2024-02-29"
        assert monthly_key(moment) == "2024-02"

    def test_keys_use_utc_calendar(self):
        """Test that an offset timestamp is bucketed by its UTC day"""
        moment = datetime(2024, 3, 1, 1, 0, tzinfo=timezone(timedelta(hours=3)))
        assert daily_key(moment) == "2024-02-29"
        assert monthly_key(moment) == "2024-02"

    def test_period_key_by_name(self):
        """Test granularity lookup by name"""
        assert period_key(utc(2024, 1, 7), "weekly") == "2024-W02"
        assert period_key(utc(2024, 1, 7), Granularity.MONTHLY) == "2024-01"
        with pytest.raises(ValueError):
            period_key(utc(2024, 1, 7), "hourly")


@pytest.mark.unit
class TestTimeBucketedAggregator:
    """Tests for TimeBucketedAggregator"""

    @pytest.fixture
    def journeys(self, build_journeys, make_transaction):
        day = 24 * 60
        return build_journeys([
            make_transaction("1", "A", "declined", minutes=0),
            make_transaction("1", "B", "approved", minutes=5),
            make_transaction("2", "A", "approved", minutes=day),
            make_transaction("3", "A", "declined", minutes=7 * day),
            make_transaction("4", "C", "approved", processing_date=None),
        ]).values()

    def test_daily_buckets(self, journeys):
        """Test daily buckets sorted by key, undated journeys left out"""
        buckets = TimeBucketedAggregator().aggregate(journeys, "daily")
        assert [b.period_key for b in buckets] == ["2024-03-04", "2024-03-05", "2024-03-11"]
        assert [(b.total, b.approved, b.declined) for b in buckets] == [(1, 1, 0), (1, 1, 0), (1, 0, 1)]
        assert sum(b.total for b in buckets) == 3

    def test_bucket_psp_breakdown(self, journeys):
        """Test unique counting inside a bucket"""
        first = TimeBucketedAggregator().aggregate(journeys, Granularity.DAILY)[0]
        assert first.psp_breakdown["A"].declined == 1
        assert first.psp_breakdown["B"].approved == 1
        assert first.psp_breakdown["B"].approval_ratio == 100.0

    def test_weekly_and_monthly(self, journeys):
        """Test coarser buckets"""
        aggregator = TimeBucketedAggregator()
        weekly = aggregator.aggregate(journeys, "weekly")
        assert [(b.period_key, b.total) for b in weekly] == [("2024-W10", 2), ("2024-W11", 1)]
        assert weekly[0].approval_rate == 100.0
        monthly = aggregator.aggregate(journeys, "monthly")
        assert [(b.period_key, b.total, b.approval_rate) for b in monthly] == [("2024-03", 3, 66.67)]

    def test_without_psp_breakdown(self, journeys):
        """Test that the breakdown can be switched off"""
        buckets = TimeBucketedAggregator(include_psp_breakdown=False).aggregate(journeys, "monthly")
        assert buckets[0].psp_breakdown is None

    def test_analyze_all_granularities(self, journeys):
        """Test the combined time analysis"""
        analysis = TimeBucketedAggregator().analyze(journeys)
        assert len(analysis.daily) == 3
        assert len(analysis.weekly) == 2
        assert len(analysis.monthly) == 1

    def test_empty(self):
        """Test that no journeys produce no buckets"""
        analysis = TimeBucketedAggregator().analyze([])
        assert (analysis.daily, analysis.weekly, analysis.monthly) == ([], [], [])


@pytest.mark.unit
class TestUndatedAttempts:
    """Tests for journeys mixing dated and undated attempts"""

    def test_undated_approval_ignored_in_bucket(self, build_journeys, make_transaction):
        """Test that a dated decline plus an undated approval is declined in its bucket"""
        journeys = build_journeys([
            make_transaction("1", "A", "declined", minutes=0),
            make_transaction("1", "B", "approved", processing_date=None),
        ])
        assert journeys["1"].is_successful

        buckets = TimeBucketedAggregator().aggregate(journeys.values(), "daily")
        assert [(b.period_key, b.approved, b.declined) for b in buckets] == [("2024-03-04", 0, 1)]
        assert list(buckets[0].psp_breakdown) == ["A"]

    def test_undated_first_row_still_bucketed(self, build_journeys, make_transaction):
        """Test that a journey is keyed by its first dated row"""
        journeys = build_journeys([
            make_transaction("1", "A", "declined", processing_date=None),
            make_transaction("1", "B", "approved", minutes=0),
        ])
        assert journeys["1"].has_valid_date is False

        buckets = TimeBucketedAggregator().aggregate(journeys.values(), "daily")
        assert [(b.period_key, b.approved, b.declined) for b in buckets] == [("2024-03-04", 1, 0)]

    def test_first_dated_row_in_input_order(self, build_journeys, make_transaction):
        """Test that the bucket follows input order, not the earliest timestamp"""
        day = 24 * 60
        journeys = build_journeys([
            make_transaction("1", "A", "declined", minutes=day),
            make_transaction("1", "B", "approved", minutes=0),
        ])
        buckets = TimeBucketedAggregator().aggregate(journeys.values(), "daily")
        assert [b.period_key for b in buckets] == ["2024-03-05"]

    def test_dated_journey(self, build_journeys, make_transaction):
        """Test the dated-only rebuild of a journey"""
        journeys = build_journeys([
            make_transaction("1", "A", "approved", processing_date=None),
            make_transaction("1", "B", "declined", minutes=5),
            make_transaction("1", "B", "declined", minutes=1),
            make_transaction("2", "C", "approved", processing_date=None),
        ])
        dated = dated_journey(journeys["1"])
        assert dated.total_attempts == 2
        assert [a.position for a in dated.attempts] == [1, 2]
        assert dated.psps_involved == ("B",)
        assert dated.is_successful is False
        assert dated.approved_by is None
        assert dated.date == journeys["1"].first_dated_at
        assert journeys["1"].is_successful

        assert dated_journey(journeys["2"]) is None
