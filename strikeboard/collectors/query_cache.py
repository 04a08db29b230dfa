"""
Query Cache - keyed, single-flight, TTL-bounded cache of remote query results

Each query key (a tuple such as ("analytics", "trend", 30)) maps to one
CacheEntry {status, value, error, last_fetched_at}. The cache guarantees:

- At most one current in-flight fetch per key: concurrent callers asking for
  the same key join the running task instead of issuing a second request.
- Fresh ready values (younger than the TTL) are returned without a network call.
- Every loader is bounded by a deadline; expiry becomes a TransportError.
- Stale-response guard: a completion is applied only if the entry still
  belongs to the fetch that produced it. Invalidation or a newer fetch turns
  a late completion into a logged no-op.

All mutation happens on the event loop thread, so no locks are needed.

Usage:
    cache = get_query_cache()  # ttl and deadline from AUTOSTRIKE_* settings
    trend = await cache.fetch(analytics_key("trend", Period.MONTH), lambda: client.get_score_trend(30))
    cache.invalidate(SCENARIOS_KEY)
"""

import asyncio
import itertools
import time
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from strikeboard.core import get_config, get_logger
from strikeboard.domain.analytics import Period
from strikeboard.domain.constants import api_config, cache_config
from strikeboard.domain.errors import AggregatedQueryError, StrikeboardError, TransportError
from strikeboard.utils.error_handling import log_and_continue

logger = get_logger(__name__)

QueryKey = tuple[Any, ...]
Loader = Callable[[], Awaitable[Any]]

# Shared key names: every owner of cached data must build keys through these
ANALYTICS_PREFIX: QueryKey = ("analytics",)
SCENARIOS_KEY: QueryKey = ("scenarios",)
EXECUTIONS_KEY: QueryKey = ("executions",)


def analytics_key(kind: str, period: Period) -> QueryKey:
    """Cache key of one analytics query for one period, e.g. ("analytics", "trend", 30)."""
    return (*ANALYTICS_PREFIX, kind, int(period))


class QueryStatus(str, Enum):
    PENDING = "pending"
    READY = "ready"
    ERROR = "error"


@dataclass
class CacheEntry:
    """
    State of one cached query.

    Attributes:
        status: pending while a fetch runs, ready after success, error after failure
        value: Last successfully fetched value (None unless ready)
        error: Typed error of the last failed fetch (None unless error)
        last_fetched_at: Clock reading of the last successful fetch
        fetch_id: Id of the fetch that owns this entry (stale-response guard)
    """

    status: QueryStatus = QueryStatus.PENDING
    value: Any = None
    error: StrikeboardError | None = None
    last_fetched_at: float | None = None
    fetch_id: int = 0
    task: asyncio.Task | None = field(default=None, repr=False)

    @property
    def is_loading(self) -> bool:
        return self.status == QueryStatus.PENDING


@dataclass
class FetchOutcome:
    value: Any = None
    error: StrikeboardError | None = None


@dataclass
class CombinedState:
    """Aggregate of several entries: loading if any is pending, error = first by priority."""

    is_loading: bool = False
    error: AggregatedQueryError | None = None


def combine_entries(entries: Sequence[tuple[str, CacheEntry | None]]) -> CombinedState:
    """
    Combine independent query entries into one loading/error state.

    Args:
        entries: (kind, entry) pairs in priority order; entry may be None if never requested

    Returns:
        CombinedState whose error (if any) displays the first failing kind's message
        and carries every failing kind's error

    Example:
        state = combine_entries([("compare", c), ("trend", t), ("summary", s)])
        if state.error:
            print(state.error.source, state.error.message)
    """
    is_loading = any(entry is not None and entry.is_loading for _, entry in entries)

    errors: dict[str, StrikeboardError] = {}
    for kind, entry in entries:
        if entry is not None and entry.status == QueryStatus.ERROR and entry.error is not None:
            errors[kind] = entry.error

    error = AggregatedQueryError(next(iter(errors)), errors) if errors else None
    return CombinedState(is_loading=is_loading, error=error)


class QueryCache:
    """Single-flight, TTL-bounded cache of query results keyed by tuples."""

    def __init__(
        self,
        ttl: float = cache_config.DEFAULT_TTL_SECONDS,
        deadline: float = api_config.DEFAULT_TIMEOUT_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the cache.

        Args:
            ttl: Freshness window in seconds (0 disables freshness, every fetch goes to the network)
            deadline: Upper bound in seconds on a single loader call
            clock: Monotonic clock (injectable for tests)
        """
        if ttl < 0:
            raise ValueError("ttl must not be negative")
        if deadline <= 0:
            raise ValueError("deadline must be positive")

        self.ttl = ttl
        self.deadline = deadline
        self._clock = clock
        self._entries: dict[QueryKey, CacheEntry] = {}
        self._fetch_ids = itertools.count(1)

    def get(self, key: QueryKey) -> CacheEntry | None:
        return self._entries.get(key)

    def keys(self) -> list[QueryKey]:
        return list(self._entries)

    def is_fresh(self, entry: CacheEntry) -> bool:
        """True if the entry holds a ready value fetched within the TTL."""
        if entry.status != QueryStatus.READY or entry.last_fetched_at is None:
            return False
        return self._clock() - entry.last_fetched_at < self.ttl

    def start(self, key: QueryKey, loader: Loader, force: bool = False) -> asyncio.Task | None:
        """
        Schedule a fetch for key unless one is running or the cached value is fresh.

        Must be called from a running event loop. The entry turns pending
        synchronously, so the combined state reflects the fetch immediately.

        Args:
            key: Query key
            loader: Zero-argument coroutine function performing the remote call
            force: Ignore freshness (an in-flight fetch is still joined, never duplicated)

        Returns:
            The task producing a FetchOutcome, or None when the cached value is fresh
        """
        entry = self._entries.get(key)

        if entry is not None and entry.task is not None and not entry.task.done():
            logger.debug(f"Joining in-flight fetch for {key}")
            return entry.task

        if entry is not None and not force and self.is_fresh(entry):
            logger.debug(f"Cache hit for {key}")
            return None

        fetch_id = next(self._fetch_ids)
        if entry is None:
            entry = CacheEntry()
            self._entries[key] = entry

        entry.status = QueryStatus.PENDING
        entry.value = None
        entry.error = None
        entry.fetch_id = fetch_id
        entry.task = asyncio.get_running_loop().create_task(self._run(key, fetch_id, loader))
        logger.debug(f"Fetching {key} (fetch #{fetch_id})")
        return entry.task

    async def fetch(self, key: QueryKey, loader: Loader, force: bool = False) -> Any:
        """
        Return the value for key, fetching it at most once across concurrent callers.

        Raises:
            StrikeboardError: The typed error of the fetch this call waited on
        """
        task = self.start(key, loader, force=force)
        if task is None:
            return self._entries[key].value

        outcome: FetchOutcome = await asyncio.shield(task)
        if outcome.error is not None:
            raise outcome.error
        return outcome.value

    async def _run(self, key: QueryKey, fetch_id: int, loader: Loader) -> FetchOutcome:
        try:
            value = await asyncio.wait_for(loader(), timeout=self.deadline)
            outcome = FetchOutcome(value=value)
        except asyncio.TimeoutError:
            outcome = FetchOutcome(error=TransportError(f"Request timed out after {self.deadline:g}s"))
        except StrikeboardError as e:
            outcome = FetchOutcome(error=e)
        except Exception as e:
            logger.error(f"Unexpected error fetching {key}: {e}", exc_info=True)
            wrapped = StrikeboardError(f"Unexpected error: {e}")
            wrapped.__cause__ = e
            outcome = FetchOutcome(error=wrapped)

        entry = self._entries.get(key)
        if entry is None or entry.fetch_id != fetch_id:
            logger.debug(f"Discarding stale response for {key} (fetch #{fetch_id})")
            return outcome

        if outcome.error is not None:
            entry.status = QueryStatus.ERROR
            entry.error = outcome.error
            log_and_continue(logger, outcome.error, {"key": key, "fetch_id": fetch_id}, "Query")
        else:
            entry.status = QueryStatus.READY
            entry.value = outcome.value
            entry.last_fetched_at = self._clock()
        return outcome

    def invalidate(self, prefix: QueryKey) -> int:
        """
        Drop every entry whose key starts with prefix.

        A fetch still running for a dropped key completes for its own awaiters
        but is not written back (stale-response guard).

        Returns:
            Number of entries dropped
        """
        matched = [key for key in self._entries if key[: len(prefix)] == prefix]
        for key in matched:
            del self._entries[key]
        if matched:
            logger.info(f"Invalidated {len(matched)} cached queries under {prefix}")
        return len(matched)

    async def aclose(self) -> None:
        """Cancel in-flight fetches and empty the cache."""
        tasks = [e.task for e in self._entries.values() if e.task is not None and not e.task.done()]
        self._entries.clear()
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)


def get_query_cache(clock: Callable[[], float] = time.monotonic) -> QueryCache:
    """
    Get a QueryCache with settings from config.

    The freshness window is AUTOSTRIKE_CACHE_TTL and the loader deadline is
    AUTOSTRIKE_REQUEST_TIMEOUT, matching the client's own request timeout.

    Raises:
        ConfigurationError: If the AutoStrike settings are missing or invalid
    """
    autostrike = get_config().get_autostrike_config()
    return QueryCache(ttl=autostrike.cache_ttl, deadline=autostrike.request_timeout, clock=clock)
