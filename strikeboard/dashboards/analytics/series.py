"""
Chart series for the Analytics dashboard

Each builder turns one domain value into a renderer-agnostic ChartSeries
(labels + datasets). Trend series follow the DataPoint order exactly as
received: points are never re-sorted or de-duplicated here.

Usage:
    view = await orchestrator.load()
    score_chart = build_score_series(view.trend)
    detection_chart = build_detection_series(view.trend)
"""

from dataclasses import dataclass, field

from strikeboard.dashboards.analytics.calculator import AMBER, BLUE, GRAY, GREEN, RED, clamp_score
from strikeboard.domain.analytics import ExecutionStatus, ExecutionSummary, ScoreTrend

STATUS_COLORS: dict[str, str] = {
    ExecutionStatus.COMPLETED.value: GREEN,
    ExecutionStatus.FAILED.value: RED,
    ExecutionStatus.PENDING.value: AMBER,
    ExecutionStatus.RUNNING.value: BLUE,
    ExecutionStatus.CANCELLED.value: GRAY,
}


@dataclass(frozen=True)
class Dataset:
    label: str
    data: list[float]
    colors: list[str]


@dataclass(frozen=True)
class ChartSeries:
    """
    One chart's worth of data.

    Attributes:
        labels: X-axis labels (dates, status labels or scenario ids)
        datasets: One Dataset per plotted series, each aligned with labels
    """

    labels: list[str] = field(default_factory=list)
    datasets: list[Dataset] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.labels


def build_score_series(trend: ScoreTrend | None) -> ChartSeries:
    """Average score per day, clamped to 0-100."""
    if trend is None:
        return ChartSeries()
    points = trend.data_points
    return ChartSeries(
        labels=[p.date for p in points],
        datasets=[Dataset("Average Score", [clamp_score(p.average_score) for p in points], [BLUE])],
    )


def build_detection_series(trend: ScoreTrend | None) -> ChartSeries:
    """
    Stacked blocked / detected / successful counts per day.

    Args:
        trend: Ready trend for the active period (None while loading)

    Returns:
        ChartSeries with three datasets in blocked, detected, successful order
    """
    if trend is None:
        return ChartSeries()
    points = trend.data_points
    return ChartSeries(
        labels=[p.date for p in points],
        datasets=[
            Dataset("Blocked", [p.blocked for p in points], [GREEN]),
            Dataset("Detected", [p.detected for p in points], [AMBER]),
            Dataset("Successful", [p.successful for p in points], [RED]),
        ],
    )


def build_status_series(summary: ExecutionSummary | None) -> ChartSeries:
    """Executions per status label, colored by label (not by position)."""
    if summary is None:
        return ChartSeries()
    labels = list(summary.executions_by_status)
    return ChartSeries(
        labels=labels,
        datasets=[
            Dataset(
                "Executions",
                [summary.executions_by_status[label] for label in labels],
                [STATUS_COLORS.get(label, GRAY) for label in labels],
            )
        ],
    )


def build_scenario_scores(summary: ExecutionSummary | None) -> list[tuple[str, float]]:
    """(scenario id, clamped score) pairs in server order; empty when there is no data."""
    if summary is None:
        return []
    return [(scenario_id, clamp_score(score)) for scenario_id, score in summary.scores_by_scenario.items()]
