"""Formatting and classification logic for the Analytics dashboard

Pure functions, safe to call with whatever the orchestrator has resolved:
- Signed score/count deltas for the comparison cards
- Score clamping to the displayable 0-100 range
- Trend indicators (↑↓→) with icon names and colors
- Card and summary-row models built from the domain dataclasses
"""

import math
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, localcontext

from strikeboard.domain.analytics import ExecutionSummary, ScoreComparison, ScoreTrend, ScoreTrendDirection
from strikeboard.domain.constants import analytics_thresholds

GREEN = "#22c55e"
RED = "#ef4444"
AMBER = "#f59e0b"
BLUE = "#3b82f6"
GRAY = "#6b7280"


@dataclass(frozen=True)
class TrendIndicator:
    """Display style of a score trend: icon name, arrow symbol, color"""

    direction: ScoreTrendDirection
    icon: str
    symbol: str
    color: str


TREND_INDICATORS = {
    ScoreTrendDirection.IMPROVING: TrendIndicator(ScoreTrendDirection.IMPROVING, "arrow-trending-up", "↑", GREEN),
    ScoreTrendDirection.DECLINING: TrendIndicator(ScoreTrendDirection.DECLINING, "arrow-trending-down", "↓", RED),
    ScoreTrendDirection.STABLE: TrendIndicator(ScoreTrendDirection.STABLE, "minus", "→", GRAY),
}


@dataclass(frozen=True)
class MetricCard:
    """One comparison card: title, big value, subtitle, optional trend"""

    title: str
    value: str
    subtitle: str
    color: str = GRAY
    trend: TrendIndicator | None = None


@dataclass(frozen=True)
class SummaryRow:
    label: str
    value: str
    color: str | None = None


def _is_number(value) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return isinstance(value, int) or math.isfinite(value)


def _one_decimal(value: float) -> Decimal:
    # Half-up on the decimal text, so 5.25 -> 5.3 regardless of binary representation
    number = Decimal(str(value))
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, number.adjusted() + 3)
        return number.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)


def format_score_change(change: float | None) -> str:
    """Signed score delta with one decimal

    Args:
        change: Score change in points (None when unknown)

    Returns:
        "+5.3" for 5.25, "-3.0" for -3, "0" for None, zero or a non-finite value
    """
    if not _is_number(change) or change == 0:
        return "0"
    prefix = "+" if change > 0 else ""
    return f"{prefix}{_one_decimal(change)}"


def format_count_change(change: int | None) -> str:
    """Signed integer delta: "+3", "-2", "0"."""
    if not _is_number(change) or change == 0:
        return "0"
    return f"{int(change):+d}"


def clamp_score(value: float | None) -> float:
    """Clamp a score to [0, 100]; None and NaN count as 0."""
    if value is None or isinstance(value, bool) or not isinstance(value, (int, float)):
        return analytics_thresholds.SCORE_MIN
    if isinstance(value, float) and math.isnan(value):
        return analytics_thresholds.SCORE_MIN
    return float(max(analytics_thresholds.SCORE_MIN, min(analytics_thresholds.SCORE_MAX, value)))


def format_score(value: float | None) -> str:
    """Clamped score as a percentage with one decimal, e.g. "87.5%"."""
    return f"{_one_decimal(clamp_score(value))}%"


def trend_indicator(trend: ScoreTrendDirection | str | None) -> TrendIndicator:
    """Get trend indicator (icon, symbol, color); unknown values fall back to stable"""
    try:
        direction = ScoreTrendDirection(trend)
    except (ValueError, TypeError):
        direction = ScoreTrendDirection.STABLE
    return TREND_INDICATORS[direction]


def build_comparison_cards(comparison: ScoreComparison | None) -> list[MetricCard]:
    """Build the four period-comparison cards

    Args:
        comparison: Ready comparison for the active period, or None while loading

    Returns:
        Average score, executions, blocked and detected cards (empty list when None)
    """
    if comparison is None:
        return []

    indicator = trend_indicator(comparison.score_trend)
    current = comparison.current
    previous = comparison.previous

    return [
        MetricCard(
            title="Average Score",
            value=format_score(current.average_score),
            subtitle=f"{format_score_change(comparison.score_change)}% vs previous period",
            color=indicator.color,
            trend=indicator,
        ),
        MetricCard(
            title="Executions",
            value=str(current.execution_count),
            subtitle=f"{previous.execution_count} previous period",
        ),
        MetricCard(
            title="Blocked Attacks",
            value=str(current.total_blocked),
            subtitle=f"{format_count_change(comparison.blocked_change)} vs previous",
            color=GREEN,
        ),
        MetricCard(
            title="Detected Attacks",
            value=str(current.total_detected),
            subtitle=f"{format_count_change(comparison.detected_change)} vs previous",
            color=AMBER,
        ),
    ]


def build_trend_summary_rows(trend: ScoreTrend | None) -> list[SummaryRow]:
    """Min / max / average rows shown under the score trend chart."""
    if trend is None:
        return []
    summary = trend.summary
    return [
        SummaryRow("Min Score", format_score(summary.min_score)),
        SummaryRow("Max Score", format_score(summary.max_score)),
        SummaryRow("Average", format_score(summary.average_score)),
    ]


def build_execution_summary_rows(summary: ExecutionSummary | None) -> list[SummaryRow]:
    """Totals panel: executions, completed, best and worst score."""
    if summary is None:
        return []
    return [
        SummaryRow("Total Executions", str(summary.total_executions)),
        SummaryRow("Completed", str(summary.completed_executions), GREEN),
        SummaryRow("Best Score", format_score(summary.best_score)),
        SummaryRow("Worst Score", format_score(summary.worst_score)),
    ]
