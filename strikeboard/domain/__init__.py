"""
Domain Models - Type-safe data structures for analytics and scenarios

This package contains dataclasses representing business domain concepts:
    - analytics: Period, ScoreComparison, ScoreTrend, ExecutionSummary
    - scenario: Scenario, Phase, ScenarioDraft, ImportBatch, ImportResult
    - errors: the error taxonomy shared by every layer

Usage:
    from strikeboard.domain.analytics import Period, ScoreTrend
    from strikeboard.domain.scenario import ImportResult

    trend = ScoreTrend.from_dict(payload)
    print(trend.summary.max_score)
"""

from .analytics import (
    DataPoint,
    ExecutionStatus,
    ExecutionSummary,
    Period,
    PeriodStats,
    ScoreComparison,
    ScoreTrend,
    ScoreTrendDirection,
    TrendSummary,
    classify_score_change,
)
from .errors import (
    AggregatedQueryError,
    InvalidTransitionError,
    ParseError,
    PayloadError,
    StrikeboardError,
    TransportError,
    ValidationError,
)
from .scenario import (
    ExecutionHandle,
    ImportBatch,
    ImportResult,
    Phase,
    RunRequest,
    Scenario,
    ScenarioDraft,
    ScenarioExport,
    TechniqueSelection,
)

__all__ = [
    # Analytics
    "Period",
    "PeriodStats",
    "ScoreComparison",
    "ScoreTrendDirection",
    "DataPoint",
    "TrendSummary",
    "ScoreTrend",
    "ExecutionStatus",
    "ExecutionSummary",
    "classify_score_change",
    # Scenarios
    "TechniqueSelection",
    "Phase",
    "Scenario",
    "ScenarioDraft",
    "ImportBatch",
    "ImportResult",
    "ScenarioExport",
    "RunRequest",
    "ExecutionHandle",
    # Errors
    "StrikeboardError",
    "TransportError",
    "PayloadError",
    "ValidationError",
    "ParseError",
    "AggregatedQueryError",
    "InvalidTransitionError",
]
