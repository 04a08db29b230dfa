"""
Analytics domain models - Score comparisons, trends and execution summaries

Represents the three analytics views served by the AutoStrike API:
    - ScoreComparison: current period vs the period before it
    - ScoreTrend: daily data points over the period plus summary statistics
    - ExecutionSummary: execution counters and per-scenario scores

All models are built from decoded JSON with from_dict(), which raises
PayloadError when the server sends something we cannot read.
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import date
from enum import Enum, IntEnum
from typing import Any

from .constants import analytics_thresholds
from .errors import PayloadError
from .payload import read_int, read_number, read_str, require_list, require_mapping

logger = logging.getLogger(__name__)


class Period(IntEnum):
    """Rolling analytics window in days. The only parameter of the analytics queries."""

    WEEK = 7
    MONTH = 30
    QUARTER = 90

    @classmethod
    def from_days(cls, days: int) -> "Period":
        """
        Resolve a day count to a Period.

        Raises:
            ValueError: If days is not one of 7, 30 or 90

        Example:
            >>> Period.from_days(30)
            <Period.MONTH: 30>
        """
        try:
            return cls(days)
        except ValueError:
            allowed = ", ".join(str(p.value) for p in cls)
            raise ValueError(f"Unsupported period {days!r}: expected one of {allowed}") from None

    @property
    def label(self) -> str:
        """Short label used by the server, e.g. '30d'."""
        return f"{self.value}d"


class ScoreTrendDirection(str, Enum):
    IMPROVING = "improving"
    DECLINING = "declining"
    STABLE = "stable"


class ExecutionStatus(str, Enum):
    """Fixed set of execution status labels."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


def classify_score_change(
    score_change: float, epsilon: float = analytics_thresholds.SCORE_TREND_EPSILON
) -> ScoreTrendDirection:
    """
    Classify a score delta as improving, declining or stable.

    A change of at least +epsilon is improving, at most -epsilon is declining,
    anything in between is stable. With epsilon=0 any nonzero change counts.

    Args:
        score_change: Current average score minus previous average score
        epsilon: Stability band half-width in score points

    Returns:
        ScoreTrendDirection

    Example:
        >>> classify_score_change(7.5)
        <ScoreTrendDirection.IMPROVING: 'improving'>
        >>> classify_score_change(-2.0)
        <ScoreTrendDirection.STABLE: 'stable'>
    """
    if epsilon < 0:
        raise ValueError(f"epsilon must not be negative, got {epsilon}")
    if score_change > 0 and score_change >= epsilon:
        return ScoreTrendDirection.IMPROVING
    if score_change < 0 and score_change <= -epsilon:
        return ScoreTrendDirection.DECLINING
    return ScoreTrendDirection.STABLE


@dataclass
class PeriodStats:
    """
    Aggregated execution statistics for one period.

    Attributes:
        average_score: Mean overall score of the period's completed executions
        execution_count: Number of completed executions
        total_blocked: Techniques blocked across all executions
        total_detected: Techniques detected across all executions
        total_successful: Techniques that went through undetected
        total_techniques: Techniques attempted
        period: Server label ("current" / "previous")
        score_by_tactic: Average score per MITRE tactic
    """

    average_score: float
    execution_count: int
    total_blocked: int
    total_detected: int
    total_successful: int = 0
    total_techniques: int = 0
    period: str | None = None
    score_by_tactic: dict[str, float] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any) -> "PeriodStats":
        data = require_mapping(data, "period stats")
        tactics = require_mapping(data.get("score_by_tactic") or {}, "score_by_tactic")
        return cls(
            average_score=read_number(data, "average_score", 0.0),
            execution_count=read_int(data, "execution_count", 0),
            total_blocked=read_int(data, "total_blocked", 0),
            total_detected=read_int(data, "total_detected", 0),
            total_successful=read_int(data, "total_successful", 0),
            total_techniques=read_int(data, "total_techniques", 0),
            period=read_str(data, "period", None),
            score_by_tactic={str(k): read_number(tactics, k) for k in tactics},
        )


@dataclass
class ScoreComparison:
    """
    Comparison of the current period against the previous one.

    score_trend is always derived from score_change (see classify_score_change);
    the server's own label is only used to log disagreements.
    """

    current: PeriodStats
    previous: PeriodStats
    score_change: float
    blocked_change: int
    detected_change: int
    score_trend: ScoreTrendDirection

    @classmethod
    def from_dict(cls, data: Any) -> "ScoreComparison":
        data = require_mapping(data, "score comparison")
        if "current" not in data or "previous" not in data:
            raise PayloadError("Malformed score comparison payload: 'current' and 'previous' are required")

        current = PeriodStats.from_dict(data["current"])
        previous = PeriodStats.from_dict(data["previous"])

        score_change = read_number(data, "score_change", current.average_score - previous.average_score)
        trend = classify_score_change(score_change)

        reported = data.get("score_trend")
        if reported is not None and reported != trend.value:
            logger.info(
                f"Server score_trend '{reported}' disagrees with change {score_change:+.2f}, using '{trend.value}'"
            )

        return cls(
            current=current,
            previous=previous,
            score_change=score_change,
            blocked_change=read_int(data, "blocked_change", current.total_blocked - previous.total_blocked),
            detected_change=read_int(data, "detected_change", current.total_detected - previous.total_detected),
            score_trend=trend,
        )


@dataclass
class DataPoint:
    """One day of the score trend."""

    date: str
    average_score: float
    blocked: int = 0
    detected: int = 0
    successful: int = 0
    execution_count: int = 0

    @property
    def day(self) -> date:
        return date.fromisoformat(self.date)

    @classmethod
    def from_dict(cls, data: Any) -> "DataPoint":
        data = require_mapping(data, "trend data point")
        point = cls(
            date=read_str(data, "date"),
            average_score=read_number(data, "average_score", 0.0),
            blocked=read_int(data, "blocked", 0),
            detected=read_int(data, "detected", 0),
            successful=read_int(data, "successful", 0),
            execution_count=read_int(data, "execution_count", 0),
        )
        try:
            point.day
        except ValueError:
            raise PayloadError(f"Malformed trend data point: date '{point.date}' is not an ISO date") from None
        return point


@dataclass
class TrendSummary:
    """
    Summary statistics over a sequence of data points.

    Invariant: values equal the min / max / mean of the points' average_score.
    """

    min_score: float = 0.0
    max_score: float = 0.0
    average_score: float = 0.0

    @classmethod
    def from_points(cls, points: list[DataPoint]) -> "TrendSummary":
        """
        Compute the summary from data points (all zero for an empty sequence).

        Example:
            >>> TrendSummary.from_points([])
            TrendSummary(min_score=0.0, max_score=0.0, average_score=0.0)
        """
        if not points:
            return cls()
        scores = [p.average_score for p in points]
        return cls(
            min_score=min(scores),
            max_score=max(scores),
            average_score=math.fsum(scores) / len(scores),
        )


@dataclass
class ScoreTrend:
    """
    Daily score trend over a period.

    Attributes:
        data_points: Points sorted ascending by date
        summary: Recomputed from data_points
        period: Server label ("7d", "30d", "90d")
    """

    data_points: list[DataPoint]
    summary: TrendSummary
    period: str | None = None

    @classmethod
    def from_dict(cls, data: Any) -> "ScoreTrend":
        data = require_mapping(data, "score trend")
        raw_points = require_list(data.get("data_points") or [], "data_points")
        points = [DataPoint.from_dict(p) for p in raw_points]

        for earlier, later in zip(points, points[1:]):
            if later.day < earlier.day:
                raise PayloadError(f"Malformed score trend: data point {later.date} comes after {earlier.date}")

        summary = TrendSummary.from_points(points)
        reported = data.get("summary")
        if isinstance(reported, dict) and reported.get("average_score") is not None:
            try:
                reported_avg = read_number(reported, "average_score")
            except PayloadError:
                reported_avg = None
            if reported_avg is not None and not math.isclose(reported_avg, summary.average_score, abs_tol=1e-6):
                logger.debug(
                    f"Recomputed trend average {summary.average_score:.2f} differs from server value {reported_avg:.2f}"
                )

        return cls(data_points=points, summary=summary, period=read_str(data, "period", None))


@dataclass
class ExecutionSummary:
    """
    Execution counters for a period.

    Attributes:
        executions_by_status: ExecutionStatus label -> count
        scores_by_scenario: Scenario id -> score (0-100)
    """

    total_executions: int
    completed_executions: int
    best_score: float
    worst_score: float
    average_score: float = 0.0
    executions_by_status: dict[str, int] = field(default_factory=dict)
    scores_by_scenario: dict[str, float] = field(default_factory=dict)

    @property
    def completion_rate(self) -> float:
        """Completed executions as a percentage of all executions (0 when there are none)."""
        if self.total_executions <= 0:
            return 0.0
        return self.completed_executions / self.total_executions * 100

    @classmethod
    def from_dict(cls, data: Any) -> "ExecutionSummary":
        data = require_mapping(data, "execution summary")
        statuses = require_mapping(data.get("executions_by_status") or {}, "executions_by_status")
        scores = require_mapping(data.get("scores_by_scenario") or {}, "scores_by_scenario")

        known = {s.value for s in ExecutionStatus}
        unknown = [label for label in statuses if label not in known]
        if unknown:
            raise PayloadError(f"Malformed execution summary: unknown execution status {', '.join(unknown)}")

        return cls(
            total_executions=read_int(data, "total_executions", 0),
            completed_executions=read_int(data, "completed_executions", 0),
            best_score=read_number(data, "best_score", 0.0),
            worst_score=read_number(data, "worst_score", 0.0),
            average_score=read_number(data, "average_score", 0.0),
            executions_by_status={label: read_int(statuses, label) for label in statuses},
            scores_by_scenario={str(sid): read_number(scores, sid) for sid in scores},
        )
