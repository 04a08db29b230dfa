"""
Pytest configuration and shared fixtures

Provides sample AutoStrike payloads, a controllable clock for the query cache,
and helpers for wiring AutoStrikeRESTClient to an httpx.MockTransport.
"""

import json
from collections.abc import Callable

import httpx
import pytest

from strikeboard.collectors.autostrike_rest_client import AutoStrikeRESTClient

BASE_URL = "https://autostrike.test/api/v1"


# ===== Helpers =====


class FakeClock:
    """Monotonic clock that only moves when a test advances it"""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# ===== Client Fixtures =====


@pytest.fixture
def make_client():
    """Provide a factory for AutoStrikeRESTClient answered by an httpx.MockTransport handler"""

    def factory(handler: Callable[[httpx.Request], httpx.Response], **kwargs) -> AutoStrikeRESTClient:
        return AutoStrikeRESTClient(BASE_URL, transport=httpx.MockTransport(handler), **kwargs)

    return factory


@pytest.fixture
def clock():
    """Provide a FakeClock starting at t=1000s"""
    return FakeClock()


# ===== Analytics Payload Fixtures =====


@pytest.fixture
def comparison_payload():
    """Provide a score comparison payload as served by GET analytics/compare"""
    return {
        "current": {
            "average_score": 78.5,
            "execution_count": 12,
            "total_blocked": 40,
            "total_detected": 25,
            "total_successful": 10,
            "total_techniques": 75,
            "period": "current",
            "score_by_tactic": {"discovery": 81.0, "execution": 70.25},
        },
        "previous": {
            "average_score": 65.0,
            "execution_count": 10,
            "total_blocked": 30,
            "total_detected": 28,
            "total_successful": 15,
            "total_techniques": 73,
            "period": "previous",
        },
        "score_change": 13.5,
        "blocked_change": 10,
        "detected_change": -3,
        "score_trend": "improving",
    }


@pytest.fixture
def trend_payload():
    """Provide a score trend payload as served by GET analytics/trend"""
    return {
        "period": "30d",
        "data_points": [
            {
                "date": "2026-01-01",
                "average_score": 60.0,
                "blocked": 5,
                "detected": 3,
                "successful": 2,
                "execution_count": 1,
            },
            {
                "date": "2026-01-02",
                "average_score": 70.0,
                "blocked": 6,
                "detected": 2,
                "successful": 1,
                "execution_count": 2,
            },
            {
                "date": "2026-01-04",
                "average_score": 80.0,
                "blocked": 8,
                "detected": 1,
                "successful": 0,
                "execution_count": 1,
            },
        ],
        "summary": {"min_score": 60.0, "max_score": 80.0, "average_score": 70.0, "total_executions": 4},
    }


@pytest.fixture
def summary_payload():
    """Provide an execution summary payload as served by GET analytics/summary"""
    return {
        "total_executions": 20,
        "completed_executions": 15,
        "average_score": 72.0,
        "best_score": 95.5,
        "worst_score": 40.0,
        "executions_by_status": {"completed": 15, "failed": 2, "running": 3},
        "scores_by_scenario": {"sc-1": 95.5, "sc-2": 40.0},
    }


# ===== Scenario Payload Fixtures =====


@pytest.fixture
def scenario_payload():
    """Provide a scenario as served by GET scenarios"""
    return {
        "id": "sc-1",
        "name": "Discovery sweep",
        "description": "Basic host discovery",
        "phases": [
            {
                "name": "Recon",
                "description": "Enumerate the host",
                "techniques": [
                    "T1082",
                    {"technique_id": "T1016", "executor_name": "sh"},
                ],
                "order": 1,
            },
            {"name": "Processes", "techniques": ["T1057"], "order": 2},
        ],
        "tags": ["discovery", "safe"],
        "created_at": "2026-01-01T00:00:00Z",
        "updated_at": "2026-01-02T00:00:00Z",
    }


@pytest.fixture
def export_payload(scenario_payload):
    """Provide an export document as served by GET scenarios/export"""
    second = {
        "id": "sc-2",
        "name": "Credential access",
        "phases": [{"name": "Dump", "techniques": [{"technique_id": "T1003"}]}],
    }
    return {"version": "1.0", "exported_at": "2026-03-09T10:00:00Z", "scenarios": [scenario_payload, second]}


@pytest.fixture
def three_draft_upload():
    """Provide an upload document with three valid drafts"""
    return json.dumps(
        {
            "version": "1.0",
            "scenarios": [
                {"name": "First", "phases": [{"name": "P1", "techniques": ["T1082"]}]},
                {"name": "Second", "phases": [{"name": "P1", "techniques": ["T9999"]}]},
                {"name": "Third", "phases": [{"name": "P1", "techniques": ["T1057"]}], "tags": ["x"]},
            ],
        }
    ).encode("utf-8")
