"""
Scenario Catalog - cached mirror of the server's scenario list

The listing is cached under SCENARIOS_KEY so every owner (this catalog, the
import reconciler) invalidates the same entry. Running a scenario goes through
the run-confirmation dialog, consumed here only as a callback:

    async def confirm(scenario: Scenario) -> RunRequest | None:
        ...  # None means the user cancelled

    handle = await catalog.run_scenario(scenario, confirm)
"""

from collections.abc import Awaitable, Callable

from strikeboard.collectors.autostrike_rest_client import AutoStrikeRESTClient
from strikeboard.collectors.query_cache import EXECUTIONS_KEY, SCENARIOS_KEY, QueryCache, QueryStatus
from strikeboard.core import get_logger
from strikeboard.core.logging_config import log_with_context
from strikeboard.domain.scenario import ExecutionHandle, RunRequest, Scenario

logger = get_logger(__name__)

ConfirmRun = Callable[[Scenario], Awaitable[RunRequest | None]]


class ScenarioCatalog:
    """Cached scenario listing plus the run-scenario action."""

    def __init__(self, client: AutoStrikeRESTClient, cache: QueryCache):
        self.client = client
        self.cache = cache

    async def list_scenarios(self, force: bool = False) -> list[Scenario]:
        """
        Scenario listing, served from the cache while fresh.

        Raises:
            TransportError: If the listing could not be fetched
        """
        return await self.cache.fetch(SCENARIOS_KEY, self.client.list_scenarios, force=force)

    async def refresh(self) -> list[Scenario]:
        """Re-fetch the listing regardless of freshness."""
        return await self.list_scenarios(force=True)

    def cached_scenarios(self) -> list[Scenario] | None:
        """Listing currently held in the cache, or None if there is none ready."""
        entry = self.cache.get(SCENARIOS_KEY)
        if entry is None or entry.status != QueryStatus.READY:
            return None
        return entry.value

    def invalidate(self) -> None:
        """Drop the cached listing; the next list_scenarios() goes to the server."""
        self.cache.invalidate(SCENARIOS_KEY)

    async def run_scenario(self, scenario: Scenario, confirm: ConfirmRun) -> ExecutionHandle | None:
        """
        Ask for confirmation, then start the scenario.

        Args:
            scenario: Scenario to run
            confirm: Confirmation dialog callback; returns None on cancel

        Returns:
            ExecutionHandle, or None if the user cancelled

        Raises:
            ValidationError: If the confirmation selected no agents
            TransportError: If the server refused to start (message is the server's error)
        """
        request = await confirm(scenario)
        if request is None:
            logger.info(f"Run of scenario '{scenario.name}' cancelled")
            return None

        handle = await self.client.start_execution(scenario.id, request.agent_paws, request.safe_mode)

        self.cache.invalidate(SCENARIOS_KEY)
        self.cache.invalidate(EXECUTIONS_KEY)
        log_with_context(
            logger,
            "info",
            "Execution started",
            execution_id=handle.id,
            scenario_id=scenario.id,
            agents=len(request.agent_paws),
            safe_mode=request.safe_mode,
        )
        return handle
