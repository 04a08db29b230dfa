"""
AutoStrike REST API Client

Typed request/response boundary to the AutoStrike server: analytics,
scenario catalog, import/export and execution endpoints.
Uses AsyncSecureHTTPClient for HTTP/2, connection pooling, and SSL enforcement.

Usage:
    from strikeboard.collectors.autostrike_rest_client import get_autostrike_rest_client

    client = get_autostrike_rest_client()

    trend = await client.get_score_trend(Period.MONTH)
    scenarios = await client.list_scenarios()
    result = await client.import_scenarios(batch)

Error contract:
    - TransportError for network failures, timeouts and non-2xx responses
      (message is the server's "error" string when it sent one)
    - PayloadError when a 2xx response cannot be read into the expected model
    - import_scenarios() returns an ImportResult for any response carrying
      per-item counts, including 207 and 400 partial-failure statuses

Nothing is retried here; retries are always user-triggered.
"""

import json
from typing import Any

import httpx

from strikeboard.async_http_client import AsyncSecureHTTPClient
from strikeboard.core import get_config, get_logger
from strikeboard.core.logging_config import log_with_context
from strikeboard.domain.analytics import ExecutionSummary, Period, ScoreComparison, ScoreTrend
from strikeboard.domain.constants import api_config
from strikeboard.domain.errors import PayloadError, TransportError, ValidationError
from strikeboard.domain.payload import require_list
from strikeboard.domain.scenario import ExecutionHandle, ImportBatch, ImportResult, Scenario, ScenarioExport
from strikeboard.utils.error_handling import log_and_return_default

logger = get_logger(__name__)

_UNDECODABLE = object()


class AutoStrikeRESTClient:
    """
    AutoStrike REST API client using direct HTTP calls.

    Features:
    - Async HTTP/2 requests with connection pooling
    - Optional bearer-token pass-through
    - Bounded per-request deadline (expiry is a TransportError)
    - Typed responses (domain dataclasses) instead of raw dicts
    """

    # The server reads the analytics window from ?days=
    PERIOD_PARAM = "days"

    def __init__(
        self,
        base_url: str,
        api_token: str | None = None,
        timeout: float = api_config.DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize AutoStrike REST client.

        Args:
            base_url: API root (e.g., https://autostrike.example.com/api/v1)
            api_token: Optional bearer token
            timeout: Per-request deadline in seconds
            transport: Optional httpx transport (tests inject httpx.MockTransport)

        Raises:
            ValueError: If base_url is empty or timeout is not positive
        """
        if not base_url:
            raise ValueError("base_url is required")
        if timeout <= 0:
            raise ValueError("timeout must be positive")

        self.base_url = base_url.rstrip("/")
        self.api_token = api_token
        self.timeout = timeout
        self.transport = transport

    def _get_headers(self) -> dict[str, str]:
        """Get AutoStrike API headers"""
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if self.api_token:
            headers["Authorization"] = f"Bearer {self.api_token}"
        return headers

    def _decode_body(self, response: httpx.Response, path: str) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            return log_and_return_default(
                logger,
                e,
                context={"path": path, "status_code": response.status_code},
                default_value=_UNDECODABLE,
                error_type="Response body decoding",
            )

    async def _send(self, method: str, path: str, **kwargs: Any) -> tuple[httpx.Response, Any]:
        """
        Perform one HTTP exchange and decode its body.

        Returns:
            (response, decoded body); body is _UNDECODABLE when it is not JSON

        Raises:
            TransportError: On timeout or network failure
        """
        try:
            async with AsyncSecureHTTPClient(
                base_url=self.base_url + "/",
                headers=self._get_headers(),
                timeout=self.timeout,
                transport=self.transport,
            ) as client:
                response = await client.request(method, path, **kwargs)
        except httpx.TimeoutException as e:
            logger.warning(f"{method} {path} timed out after {self.timeout}s")
            raise TransportError(f"Request to {path} timed out after {self.timeout:g}s") from e
        except httpx.RequestError as e:
            logger.warning(f"{method} {path} failed: {e}")
            raise TransportError(f"Network error calling {path}: {e}") from e

        return response, self._decode_body(response, path)

    def _error_from_response(self, response: httpx.Response, body: Any, path: str) -> TransportError:
        status_code = response.status_code
        message = None
        if isinstance(body, dict) and isinstance(body.get("error"), str) and body["error"]:
            message = body["error"]
        if message is None:
            message = f"HTTP {status_code} from {path}"

        if status_code in (401, 403):
            logger.error(f"Authentication failed (HTTP {status_code}) calling {path}")
        else:
            logger.error(f"HTTP error {status_code} calling {path}: {message}")
        return TransportError(message, status_code=status_code)

    async def _handle_api_call(self, method: str, path: str, **kwargs: Any) -> Any:
        """
        Execute API call and return the decoded JSON body of a 2xx response.

        Raises:
            TransportError: For network errors, timeouts and non-2xx responses
            PayloadError: For a 2xx response whose body is not JSON
        """
        response, body = await self._send(method, path, **kwargs)
        if not response.is_success:
            raise self._error_from_response(response, body, path)
        if body is _UNDECODABLE:
            raise PayloadError(f"Response from {path} is not valid JSON", status_code=response.status_code)
        return body

    # ==============================
    # Analytics APIs
    # ==============================

    async def get_score_comparison(self, period: Period | int) -> ScoreComparison:
        """
        Compare the current period's scores with the previous period.

        REST Endpoint: GET analytics/compare?days={7|30|90}
        """
        period = Period.from_days(int(period))
        body = await self._handle_api_call("GET", "analytics/compare", params={self.PERIOD_PARAM: period.value})
        return ScoreComparison.from_dict(body)

    async def get_score_trend(self, period: Period | int) -> ScoreTrend:
        """
        Daily score trend over the period.

        REST Endpoint: GET analytics/trend?days={7|30|90}
        """
        period = Period.from_days(int(period))
        body = await self._handle_api_call("GET", "analytics/trend", params={self.PERIOD_PARAM: period.value})
        return ScoreTrend.from_dict(body)

    async def get_execution_summary(self, period: Period | int) -> ExecutionSummary:
        """
        Execution counters and per-scenario scores for the period.

        REST Endpoint: GET analytics/summary?days={7|30|90}
        """
        period = Period.from_days(int(period))
        body = await self._handle_api_call("GET", "analytics/summary", params={self.PERIOD_PARAM: period.value})
        return ExecutionSummary.from_dict(body)

    # ==============================
    # Scenario APIs
    # ==============================

    async def list_scenarios(self) -> list[Scenario]:
        """
        List every scenario in the catalog, in server order.

        REST Endpoint: GET scenarios
        """
        body = await self._handle_api_call("GET", "scenarios")
        if body is None:
            return []
        return [Scenario.from_dict(item) for item in require_list(body, "scenario list")]

    async def import_scenarios(self, batch: ImportBatch) -> ImportResult:
        """
        Submit an import batch in a single call.

        REST Endpoint: POST scenarios/import

        The server creates each scenario independently and answers with per-item
        counts: 201 when everything was imported, 207 on partial success, 400 when
        every item failed. All three carry {imported, failed, errors} and are
        returned as an ImportResult. Only a response without those counts is an
        outright failure.

        Returns:
            ImportResult (possibly with failed > 0)

        Raises:
            TransportError: If the call failed before any per-item processing
        """
        response, body = await self._send("POST", "scenarios/import", json=batch.to_dict())

        if _is_structured_import_body(body):
            result = ImportResult.from_dict(body)
        elif response.is_success:
            if body is _UNDECODABLE or not isinstance(body, dict):
                raise PayloadError("Malformed import response: expected per-item counts", response.status_code)
            result = ImportResult.from_dict(body)
        else:
            raise self._error_from_response(response, body, "scenarios/import")

        if result.total != len(batch):
            log_with_context(
                logger,
                "warning",
                "Import result counts do not match batch size",
                imported=result.imported,
                failed=result.failed,
                batch_size=len(batch),
            )
        return result

    async def export_scenarios(self, ids: list[str] | None = None) -> ScenarioExport:
        """
        Export all scenarios, or only the given ids.

        REST Endpoint: GET scenarios/export[?ids=a,b]
        """
        params = {"ids": ",".join(ids)} if ids else None
        body = await self._handle_api_call("GET", "scenarios/export", params=params)
        return ScenarioExport.from_dict(body)

    async def export_scenario(self, scenario_id: str) -> ScenarioExport:
        """
        Export a single scenario.

        REST Endpoint: GET scenarios/{id}/export
        """
        if not scenario_id:
            raise ValueError("scenario_id is required")
        body = await self._handle_api_call("GET", f"scenarios/{scenario_id}/export")
        return ScenarioExport.from_dict(body)

    # ==============================
    # Execution APIs
    # ==============================

    async def start_execution(self, scenario_id: str, agent_paws: list[str], safe_mode: bool) -> ExecutionHandle:
        """
        Start a scenario execution against the given agents.

        REST Endpoint: POST executions {scenario_id, agent_paws, safe_mode}

        Raises:
            ValidationError: If no scenario or no agent is given (no call is made)
            TransportError: If the server rejects the start; message is its "error" string
        """
        if not scenario_id:
            raise ValidationError("A scenario is required to start an execution")
        if not agent_paws:
            raise ValidationError("Select at least one agent to start an execution")

        payload = {"scenario_id": scenario_id, "agent_paws": list(agent_paws), "safe_mode": bool(safe_mode)}
        body = await self._handle_api_call("POST", "executions", json=payload)
        return ExecutionHandle.from_dict(body)


def _is_structured_import_body(body: Any) -> bool:
    return isinstance(body, dict) and ("imported" in body or "failed" in body)


def get_autostrike_rest_client(transport: httpx.AsyncBaseTransport | None = None) -> AutoStrikeRESTClient:
    """
    Get AutoStrike REST client with settings from config.

    Returns:
        AutoStrikeRESTClient: Configured REST client

    Raises:
        ConfigurationError: If AUTOSTRIKE_API_BASE_URL is missing or invalid
    """
    autostrike = get_config().get_autostrike_config()
    return AutoStrikeRESTClient(
        base_url=autostrike.base_url,
        api_token=autostrike.api_token,
        timeout=autostrike.request_timeout,
        transport=transport,
    )
