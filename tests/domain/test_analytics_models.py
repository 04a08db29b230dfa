#!/usr/bin/env python3
"""
Tests for analytics domain models

Covers Period resolution, score trend classification, and from_dict parsing of
ScoreComparison, ScoreTrend and ExecutionSummary payloads.
"""

import logging

import pytest

from strikeboard.domain.analytics import (
    DataPoint,
    ExecutionSummary,
    Period,
    PeriodStats,
    ScoreComparison,
    ScoreTrend,
    ScoreTrendDirection,
    TrendSummary,
    classify_score_change,
)
from strikeboard.domain.errors import PayloadError


class TestPeriod:
    """Test Period enum"""

    @pytest.mark.parametrize("days,expected", [(7, Period.WEEK), (30, Period.MONTH), (90, Period.QUARTER)])
    def test_from_days_accepts_supported_windows(self, days, expected):
        """Test the three supported windows resolve"""
        assert Period.from_days(days) is expected

    @pytest.mark.parametrize("days", [0, 14, 31, -7])
    def test_from_days_rejects_other_values(self, days):
        """Test any other day count raises ValueError"""
        with pytest.raises(ValueError, match="Unsupported period"):
            Period.from_days(days)

    def test_label(self):
        """Test server-style labels"""
        assert Period.WEEK.label == "7d"
        assert Period.QUARTER.label == "90d"


class TestClassifyScoreChange:
    """Test score trend classification with epsilon = 5.0"""

    @pytest.mark.parametrize(
        "change,expected",
        [
            (5.0, ScoreTrendDirection.IMPROVING),
            (13.5, ScoreTrendDirection.IMPROVING),
            (4.99, ScoreTrendDirection.STABLE),
            (0.0, ScoreTrendDirection.STABLE),
            (-4.99, ScoreTrendDirection.STABLE),
            (-5.0, ScoreTrendDirection.DECLINING),
            (-20.0, ScoreTrendDirection.DECLINING),
        ],
    )
    def test_default_epsilon(self, change, expected):
        """Test the stability band is [-5, +5) exclusive of its edges"""
        assert classify_score_change(change) is expected

    def test_zero_epsilon_counts_any_change(self):
        """Test epsilon=0 classifies every nonzero change"""
        assert classify_score_change(0.1, epsilon=0) is ScoreTrendDirection.IMPROVING
        assert classify_score_change(-0.1, epsilon=0) is ScoreTrendDirection.DECLINING
        assert classify_score_change(0.0, epsilon=0) is ScoreTrendDirection.STABLE

    def test_negative_epsilon_rejected(self):
        """Test negative epsilon raises ValueError"""
        with pytest.raises(ValueError):
            classify_score_change(1.0, epsilon=-1)


class TestScoreComparison:
    """Test ScoreComparison.from_dict"""

    def test_parses_full_payload(self, comparison_payload):
        """Test every field is read"""
        comparison = ScoreComparison.from_dict(comparison_payload)

        assert comparison.current.average_score == 78.5
        assert comparison.current.score_by_tactic == {"discovery": 81.0, "execution": 70.25}
        assert comparison.previous.execution_count == 10
        assert comparison.score_change == 13.5
        assert comparison.blocked_change == 10
        assert comparison.detected_change == -3
        assert comparison.score_trend is ScoreTrendDirection.IMPROVING

    def test_trend_is_derived_from_score_change(self, comparison_payload, caplog):
        """Test a disagreeing server label is replaced and logged"""
        comparison_payload["score_change"] = 3.0
        comparison_payload["score_trend"] = "improving"

        with caplog.at_level(logging.INFO, logger="strikeboard.domain.analytics"):
            comparison = ScoreComparison.from_dict(comparison_payload)

        assert comparison.score_trend is ScoreTrendDirection.STABLE
        assert "disagrees" in caplog.text

    def test_missing_changes_are_derived(self, comparison_payload):
        """Test deltas default to current minus previous"""
        for key in ("score_change", "blocked_change", "detected_change", "score_trend"):
            del comparison_payload[key]

        comparison = ScoreComparison.from_dict(comparison_payload)

        assert comparison.score_change == pytest.approx(13.5)
        assert comparison.blocked_change == 10
        assert comparison.detected_change == -3
        assert comparison.score_trend is ScoreTrendDirection.IMPROVING

    def test_missing_period_rejected(self, comparison_payload):
        """Test a payload without previous stats is malformed"""
        del comparison_payload["previous"]

        with pytest.raises(PayloadError, match="'current' and 'previous'"):
            ScoreComparison.from_dict(comparison_payload)

    def test_non_numeric_score_rejected(self, comparison_payload):
        """Test a string score is malformed"""
        comparison_payload["current"]["average_score"] = "high"

        with pytest.raises(PayloadError, match="average_score"):
            ScoreComparison.from_dict(comparison_payload)

    def test_period_stats_defaults(self):
        """Test optional PeriodStats fields default to zero/empty"""
        stats = PeriodStats.from_dict({"average_score": 50, "execution_count": 2})

        assert stats.total_blocked == 0
        assert stats.total_successful == 0
        assert stats.score_by_tactic == {}
        assert stats.period is None


class TestScoreTrend:
    """Test ScoreTrend.from_dict and TrendSummary"""

    def test_parses_points_in_order(self, trend_payload):
        """Test points are kept in server order"""
        trend = ScoreTrend.from_dict(trend_payload)

        assert [p.date for p in trend.data_points] == ["2026-01-01", "2026-01-02", "2026-01-04"]
        assert trend.data_points[1].execution_count == 2
        assert trend.period == "30d"

    def test_summary_is_recomputed(self, trend_payload):
        """Test summary equals min/max/mean of the points"""
        trend_payload["summary"] = {"min_score": 0, "max_score": 0, "average_score": 12.0}

        trend = ScoreTrend.from_dict(trend_payload)

        assert trend.summary == TrendSummary(min_score=60.0, max_score=80.0, average_score=70.0)

    def test_empty_trend_has_zero_summary(self):
        """Test an empty sequence gives an all-zero summary"""
        trend = ScoreTrend.from_dict({"data_points": [], "summary": {}})

        assert trend.data_points == []
        assert trend.summary == TrendSummary(0.0, 0.0, 0.0)

    def test_null_points_treated_as_empty(self):
        """Test data_points: null is an empty trend"""
        trend = ScoreTrend.from_dict({"data_points": None})

        assert trend.data_points == []

    def test_unsorted_points_rejected(self, trend_payload):
        """Test descending dates make the payload malformed"""
        trend_payload["data_points"].reverse()

        with pytest.raises(PayloadError, match="comes after"):
            ScoreTrend.from_dict(trend_payload)

    def test_duplicate_dates_kept(self, trend_payload):
        """Test equal dates are not an ordering violation"""
        trend_payload["data_points"][1]["date"] = "2026-01-01"

        trend = ScoreTrend.from_dict(trend_payload)

        assert len(trend.data_points) == 3

    def test_invalid_date_rejected(self):
        """Test a non-ISO date is malformed"""
        with pytest.raises(PayloadError, match="not an ISO date"):
            DataPoint.from_dict({"date": "01/02/2026", "average_score": 50})


class TestExecutionSummary:
    """Test ExecutionSummary.from_dict"""

    def test_parses_payload(self, summary_payload):
        """Test counters, statuses and scenario scores"""
        summary = ExecutionSummary.from_dict(summary_payload)

        assert summary.total_executions == 20
        assert summary.completed_executions == 15
        assert summary.best_score == 95.5
        assert summary.average_score == 72.0
        assert summary.executions_by_status == {"completed": 15, "failed": 2, "running": 3}
        assert summary.scores_by_scenario == {"sc-1": 95.5, "sc-2": 40.0}

    def test_completion_rate(self, summary_payload):
        """Test completion rate as a percentage"""
        assert ExecutionSummary.from_dict(summary_payload).completion_rate == 75.0

    def test_completion_rate_without_executions(self):
        """Test completion rate is 0 with no executions"""
        assert ExecutionSummary.from_dict({}).completion_rate == 0.0

    def test_unknown_status_rejected(self, summary_payload):
        """Test a status outside the fixed set is malformed"""
        summary_payload["executions_by_status"]["queued"] = 1

        with pytest.raises(PayloadError, match="queued"):
            ExecutionSummary.from_dict(summary_payload)

    def test_fractional_count_rejected(self, summary_payload):
        """Test a non-integral count is malformed"""
        summary_payload["total_executions"] = 2.5

        with pytest.raises(PayloadError, match="integer"):
            ExecutionSummary.from_dict(summary_payload)

    def test_non_object_rejected(self):
        """Test a non-object payload is malformed"""
        with pytest.raises(PayloadError, match="expected an object"):
            ExecutionSummary.from_dict(["not", "an", "object"])
