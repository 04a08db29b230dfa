"""
Analytics Orchestrator - three independent analytics queries behind one view

Coordinates the score comparison, score trend and execution summary queries
for the active Period:

- Each query is cached under ("analytics", kind, period), so switching the
  period switches all three keys together; returning to a period within the
  cache TTL is served without network calls.
- The three fetches run concurrently and may finish in any order; view() is
  computed from whatever has resolved at the moment it is called.
- Blank-while-loading: only entries for the active period are shown, and only
  once they are ready, so old-period data never mixes with new-period data.
- Combined error = first failing query in priority order compare > trend > summary.
- Nothing retries on its own; refresh_all() re-fetches all three queries.

Usage:
    orchestrator = AnalyticsOrchestrator(get_autostrike_rest_client(), get_query_cache())
    view = await orchestrator.load()
    if view.error:
        print(view.error.message)
    view = await orchestrator.set_period(Period.WEEK)
"""

import asyncio
from dataclasses import dataclass

from strikeboard.collectors.autostrike_rest_client import AutoStrikeRESTClient
from strikeboard.collectors.query_cache import QueryCache, QueryStatus, analytics_key, combine_entries, get_query_cache
from strikeboard.core import get_logger
from strikeboard.core.logging_config import log_with_context
from strikeboard.domain.analytics import ExecutionSummary, Period, ScoreComparison, ScoreTrend
from strikeboard.domain.errors import AggregatedQueryError, StrikeboardError

logger = get_logger(__name__)

COMPARE = "compare"
TREND = "trend"
SUMMARY = "summary"

# Priority order for the combined error
QUERY_KINDS: tuple[str, ...] = (COMPARE, TREND, SUMMARY)


@dataclass
class AnalyticsView:
    """
    Snapshot of the analytics page state for one period.

    Attributes:
        period: Active period
        is_loading: True while any of the three queries is in flight
        error: Combined error (None if no query failed)
        comparison / trend / summary: Ready data for the active period, else None
    """

    period: Period
    is_loading: bool
    error: AggregatedQueryError | None
    comparison: ScoreComparison | None = None
    trend: ScoreTrend | None = None
    summary: ExecutionSummary | None = None

    @property
    def is_complete(self) -> bool:
        return self.comparison is not None and self.trend is not None and self.summary is not None


class AnalyticsOrchestrator:
    """Drives the comparison, trend and summary queries for a mutable Period."""

    def __init__(self, client: AutoStrikeRESTClient, cache: QueryCache | None = None, period: Period = Period.MONTH):
        self.client = client
        self.cache = cache if cache is not None else get_query_cache()
        self._period = Period.from_days(int(period))
        self._loaders = {
            COMPARE: client.get_score_comparison,
            TREND: client.get_score_trend,
            SUMMARY: client.get_execution_summary,
        }

    @property
    def period(self) -> Period:
        return self._period

    def view(self) -> AnalyticsView:
        """Compute the combined view from the active period's cache entries."""
        entries = [(kind, self.cache.get(analytics_key(kind, self._period))) for kind in QUERY_KINDS]
        combined = combine_entries(entries)

        values = {
            kind: entry.value
            for kind, entry in entries
            if entry is not None and entry.status == QueryStatus.READY
        }
        return AnalyticsView(
            period=self._period,
            is_loading=combined.is_loading,
            error=combined.error,
            comparison=values.get(COMPARE),
            trend=values.get(TREND),
            summary=values.get(SUMMARY),
        )

    async def load(self) -> AnalyticsView:
        """Fetch whatever is missing or expired for the active period."""
        return await self._fetch_all(force=False)

    async def set_period(self, period: Period | int) -> AnalyticsView:
        """
        Switch the active period and load its data.

        Raises:
            ValueError: If period is not 7, 30 or 90
        """
        period = Period.from_days(int(period))
        if period != self._period:
            logger.info(f"Analytics period changed {self._period.label} -> {period.label}")
        self._period = period
        return await self.load()

    async def refresh_all(self) -> AnalyticsView:
        """Re-fetch all three queries concurrently; one failure does not stop the others."""
        return await self._fetch_all(force=True)

    async def _fetch_all(self, force: bool) -> AnalyticsView:
        period = self._period
        results = await asyncio.gather(
            *(
                self.cache.fetch(analytics_key(kind, period), self._loader_for(kind, period), force=force)
                for kind in QUERY_KINDS
            ),
            return_exceptions=True,
        )

        failed = []
        for kind, result in zip(QUERY_KINDS, results):
            if isinstance(result, StrikeboardError):
                failed.append(kind)
            elif isinstance(result, BaseException):
                raise result

        log_with_context(
            logger,
            "info" if not failed else "warning",
            f"Analytics load for {period.label} finished",
            period=int(period),
            forced=force,
            failed=failed,
        )

        # The active period may have changed while we were waiting
        return self.view()

    def _loader_for(self, kind: str, period: Period):
        fetch = self._loaders[kind]

        async def load():
            return await fetch(period)

        return load
