"""
Unit tests for PSP-level and country-level aggregation.
"""

import pytest

from psp_analytics.core.aggregation import CountryAggregator, PSPAggregator, count_unique_by_psp


@pytest.mark.unit
class TestPSPAggregator:
    """Tests for PSPAggregator"""

    def test_unique_counting_example(self, build_journeys, example_transactions):
        """Test A: 1 approved / 1 declined, B: 1 approved / 0 declined"""
        metrics = PSPAggregator().aggregate(build_journeys(example_transactions).values())

        a = metrics.psp_stats["A"]
        assert (a.unique_approved, a.unique_declined) == (1, 1)
        assert a.true_approval_rate == 50.0

        b = metrics.psp_stats["B"]
        assert (b.unique_approved, b.unique_declined) == (1, 0)
        assert b.true_approval_rate == 100.0

    def test_totals_sum_over_psps(self, build_journeys, example_transactions):
        """Test that PSP-level totals count (journey, PSP) pairs"""
        metrics = PSPAggregator().aggregate(build_journeys(example_transactions).values())
        assert metrics.total_approved_transactions == 2
        assert metrics.total_unique_declined_transactions == 1
        assert metrics.total_processed_transactions == 3
        assert metrics.weighted_success_rate == pytest.approx(200 / 3)

    def test_retries_inflate_attempts_not_unique_counts(self, build_journeys, make_transaction):
        """Test that three attempts by one PSP count once under unique counting"""
        journeys = build_journeys([
            make_transaction("1", "A", "declined", minutes=0),
            make_transaction("1", "A", "declined", minutes=1),
            make_transaction("1", "A", "approved", minutes=2),
        ])
        stats = PSPAggregator().aggregate(journeys.values()).psp_stats["A"]

        assert stats.total_attempts == 3
        assert stats.approved_attempts == 1
        assert stats.declined_attempts == 2
        assert stats.individual_approval_rate == pytest.approx(100 / 3)
        assert (stats.unique_approved, stats.unique_declined) == (1, 0)
        assert stats.true_approval_rate == 100.0
        assert stats.avg_position == 2.0

    def test_filtered_and_other_attempts(self, build_journeys, make_transaction):
        """Test that filtered/other attempts count as attempts but not as declines"""
        journeys = build_journeys([
            make_transaction("1", "A", "credit_card_filtered_by"),
            make_transaction("2", "A", "credit_card_in_process"),
        ])
        stats = PSPAggregator().aggregate(journeys.values()).psp_stats["A"]
        assert stats.total_attempts == 2
        assert stats.approved_attempts == 0
        assert stats.declined_attempts == 0
        # Both journeys failed, so A never approved them
        assert stats.unique_declined == 2

    def test_empty_input(self):
        """Test all-zero totals for no journeys"""
        metrics = PSPAggregator().aggregate([])
        assert metrics.psp_stats == {}
        assert metrics.total_processed_transactions == 0
        assert metrics.weighted_success_rate == 0.0

    def test_serialised_keys(self, build_journeys, example_transactions):
        """Test the camelCase output contract"""
        dumped = PSPAggregator().aggregate(
            build_journeys(example_transactions).values()
        ).model_dump(by_alias=True)
        assert set(dumped) == {
            "pspStats",
            "totalApprovedTransactions",
            "totalUniqueDeclinedTransactions",
            "totalProcessedTransactions",
            "weightedSuccessRate",
        }
        assert set(dumped["pspStats"]["A"]) == {
            "totalAttempts", "approvedAttempts", "declinedAttempts",
            "uniqueApproved", "uniqueDeclined",
            "individualApprovalRate", "trueApprovalRate", "avgPosition",
        }


@pytest.mark.unit
class TestCountryAggregator:
    """Tests for CountryAggregator"""

    def test_each_journey_counted_once(self, build_journeys, example_transactions):
        """Test overall approved=2, declined=0, rate 100%"""
        metrics = CountryAggregator().aggregate(build_journeys(example_transactions).values())
        assert metrics.total_approved_transactions == 2
        assert metrics.total_unique_declined_transactions == 0
        assert metrics.total_processed_transactions == 2
        assert metrics.weighted_success_rate == 100.0

    def test_country_breakdown(self, build_journeys, make_transaction):
        """Test per-country totals with the nested PSP breakdown"""
        journeys = build_journeys([
            make_transaction("1", "A", "declined", minutes=0, country="DE"),
            make_transaction("1", "B", "approved", minutes=1, country="DE"),
            make_transaction("2", "A", "declined", country="FR"),
            make_transaction("3", "B", "approved", country="FR"),
        ])
        metrics = CountryAggregator().aggregate(journeys.values())

        de = metrics.country_breakdown["DE"]
        assert de.total_processed_transactions == 1
        assert de.success_rate == 100.0
        assert de.psp_breakdown["A"].declined_transactions == 1
        assert de.psp_breakdown["B"].approved_transactions == 1

        fr = metrics.country_breakdown["FR"]
        assert (fr.total_approved_transactions, fr.total_unique_declined_transactions) == (1, 1)
        assert fr.success_rate == 50.0
        assert fr.psp_breakdown["A"].success_rate == 0.0
        assert fr.psp_breakdown["B"].total_transactions == 1

        assert metrics.total_processed_transactions == 3
        assert metrics.weighted_success_rate == pytest.approx(200 / 3)

    def test_unknown_country(self, build_journeys, make_transaction):
        """Test that a blank country is grouped under 'Unknown'"""
        journeys = build_journeys([make_transaction("1", "A", "approved", country="  ")])
        metrics = CountryAggregator().aggregate(journeys.values())
        assert list(metrics.country_breakdown) == ["Unknown"]


@pytest.mark.unit
def test_count_unique_by_psp_first_seen_order(build_journeys, make_transaction):
    """Test that PSPs are reported in order of first appearance"""
    journeys = build_journeys([
        make_transaction("1", "Z", "declined", minutes=0),
        make_transaction("1", "M", "approved", minutes=1),
        make_transaction("2", "A", "approved"),
    ])
    assert list(count_unique_by_psp(journeys.values())) == ["Z", "M", "A"]
