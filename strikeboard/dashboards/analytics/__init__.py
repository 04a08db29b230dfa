"""Analytics dashboard projection logic"""

from strikeboard.dashboards.analytics.calculator import (
    AMBER,
    BLUE,
    GRAY,
    GREEN,
    RED,
    MetricCard,
    SummaryRow,
    TrendIndicator,
    build_comparison_cards,
    build_execution_summary_rows,
    build_trend_summary_rows,
    clamp_score,
    format_count_change,
    format_score,
    format_score_change,
    trend_indicator,
)
from strikeboard.dashboards.analytics.series import (
    ChartSeries,
    Dataset,
    build_detection_series,
    build_scenario_scores,
    build_score_series,
    build_status_series,
)

__all__ = [
    "AMBER",
    "BLUE",
    "GRAY",
    "GREEN",
    "RED",
    "MetricCard",
    "SummaryRow",
    "TrendIndicator",
    "ChartSeries",
    "Dataset",
    "build_comparison_cards",
    "build_execution_summary_rows",
    "build_trend_summary_rows",
    "build_detection_series",
    "build_scenario_scores",
    "build_score_series",
    "build_status_series",
    "clamp_score",
    "format_count_change",
    "format_score",
    "format_score_change",
    "trend_indicator",
]
