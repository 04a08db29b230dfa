"""
Tests for the Scenario Catalog

Covers the cached listing and the run-scenario action with its confirmation
callback and cache invalidation.
"""

from unittest.mock import AsyncMock, Mock

import pytest

from strikeboard.collectors.query_cache import EXECUTIONS_KEY, SCENARIOS_KEY, QueryCache
from strikeboard.collectors.scenario_catalog import ScenarioCatalog
from strikeboard.domain.errors import TransportError
from strikeboard.domain.scenario import ExecutionHandle, RunRequest, Scenario


@pytest.fixture
def scenario(scenario_payload):
    return Scenario.from_dict(scenario_payload)


@pytest.fixture
def catalog_client(scenario):
    """Provide a client double for listing and starting scenarios"""
    client = Mock()
    client.list_scenarios = AsyncMock(return_value=[scenario])
    client.start_execution = AsyncMock(
        return_value=ExecutionHandle(id="ex-1", scenario_id=scenario.id, status="pending", safe_mode=True)
    )
    return client


class TestListing:
    """Test cached scenario listing"""

    @pytest.mark.asyncio
    async def test_listing_is_cached(self, catalog_client, clock):
        """Test a second listing within the TTL is served from the cache"""
        catalog = ScenarioCatalog(catalog_client, QueryCache(clock=clock))

        first = await catalog.list_scenarios()
        second = await catalog.list_scenarios()

        assert first == second
        assert catalog_client.list_scenarios.await_count == 1
        assert catalog.cached_scenarios() == first

    @pytest.mark.asyncio
    async def test_refresh_forces_fetch(self, catalog_client):
        """Test refresh goes to the server even when fresh"""
        catalog = ScenarioCatalog(catalog_client, QueryCache())

        await catalog.list_scenarios()
        await catalog.refresh()

        assert catalog_client.list_scenarios.await_count == 2

    @pytest.mark.asyncio
    async def test_invalidate(self, catalog_client):
        """Test invalidate drops the cached listing"""
        catalog = ScenarioCatalog(catalog_client, QueryCache())
        await catalog.list_scenarios()

        catalog.invalidate()

        assert catalog.cached_scenarios() is None

    @pytest.mark.asyncio
    async def test_listing_failure(self, catalog_client):
        """Test a failed listing raises and caches nothing ready"""
        catalog_client.list_scenarios.side_effect = TransportError("server down")
        catalog = ScenarioCatalog(catalog_client, QueryCache())

        with pytest.raises(TransportError, match="server down"):
            await catalog.list_scenarios()

        assert catalog.cached_scenarios() is None


class TestRunScenario:
    """Test the run action"""

    @pytest.mark.asyncio
    async def test_confirmed_run_starts_and_invalidates(self, catalog_client, scenario):
        """Test a confirmed run starts the execution and drops stale caches"""
        cache = QueryCache()
        catalog = ScenarioCatalog(catalog_client, cache)
        await catalog.list_scenarios()
        await cache.fetch(EXECUTIONS_KEY, AsyncMock(return_value=[]))
        confirm = AsyncMock(return_value=RunRequest(agent_paws=["paw-1"], safe_mode=False))

        handle = await catalog.run_scenario(scenario, confirm)

        confirm.assert_awaited_once_with(scenario)
        catalog_client.start_execution.assert_awaited_once_with("sc-1", ["paw-1"], False)
        assert handle.id == "ex-1"
        assert cache.get(SCENARIOS_KEY) is None
        assert cache.get(EXECUTIONS_KEY) is None

    @pytest.mark.asyncio
    async def test_cancelled_run(self, catalog_client, scenario):
        """Test cancelling the dialog makes no call and keeps the cache"""
        cache = QueryCache()
        catalog = ScenarioCatalog(catalog_client, cache)
        await catalog.list_scenarios()

        handle = await catalog.run_scenario(scenario, AsyncMock(return_value=None))

        assert handle is None
        catalog_client.start_execution.assert_not_awaited()
        assert cache.get(SCENARIOS_KEY) is not None

    @pytest.mark.asyncio
    async def test_rejected_run_keeps_cache(self, catalog_client, scenario):
        """Test a server rejection surfaces its message and invalidates nothing"""
        catalog_client.start_execution.side_effect = TransportError("agent paw-1 is offline", status_code=400)
        cache = QueryCache()
        catalog = ScenarioCatalog(catalog_client, cache)
        await catalog.list_scenarios()

        with pytest.raises(TransportError, match="agent paw-1 is offline"):
            await catalog.run_scenario(scenario, AsyncMock(return_value=RunRequest(agent_paws=["paw-1"])))

        assert cache.get(SCENARIOS_KEY) is not None
