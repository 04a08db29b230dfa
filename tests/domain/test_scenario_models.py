#!/usr/bin/env python3
"""
Tests for scenario domain models

Covers Scenario/Phase parsing (legacy and object technique forms), draft
conversion, ImportResult counts and the export document layout.
"""

import pytest

from strikeboard.domain.errors import PayloadError
from strikeboard.domain.scenario import (
    ExecutionHandle,
    ImportBatch,
    ImportResult,
    Phase,
    Scenario,
    ScenarioDraft,
    ScenarioExport,
    TechniqueSelection,
)


class TestTechniqueSelection:
    """Test both technique forms"""

    def test_plain_string(self):
        """Test legacy string form"""
        assert TechniqueSelection.from_value("T1082") == TechniqueSelection("T1082")

    def test_object_form(self):
        """Test object form with executor"""
        selection = TechniqueSelection.from_value({"technique_id": "T1016", "executor_name": "sh"})

        assert selection.technique_id == "T1016"
        assert selection.executor_name == "sh"
        assert selection.to_dict() == {"technique_id": "T1016", "executor_name": "sh"}

    def test_object_without_executor(self):
        """Test executor_name is omitted when absent"""
        assert TechniqueSelection.from_value({"technique_id": "T1003"}).to_dict() == {"technique_id": "T1003"}

    def test_invalid_value(self):
        """Test a number is not a technique"""
        with pytest.raises(PayloadError):
            TechniqueSelection.from_value(42)


class TestScenario:
    """Test Scenario.from_dict and to_draft"""

    def test_parses_scenario(self, scenario_payload):
        """Test nested phases and techniques"""
        scenario = Scenario.from_dict(scenario_payload)

        assert scenario.id == "sc-1"
        assert scenario.tags == ["discovery", "safe"]
        assert [p.name for p in scenario.phases] == ["Recon", "Processes"]
        assert scenario.phases[0].order == 1
        assert scenario.technique_count == 3

    def test_missing_id_rejected(self, scenario_payload):
        """Test a listed scenario must carry its id"""
        del scenario_payload["id"]

        with pytest.raises(PayloadError, match="'id'"):
            Scenario.from_dict(scenario_payload)

    def test_null_phases_is_empty(self, scenario_payload):
        """Test phases: null parses as no phases"""
        scenario_payload["phases"] = None

        assert Scenario.from_dict(scenario_payload).phases == []

    def test_to_draft_drops_id(self, scenario_payload):
        """Test the draft carries everything but the server-assigned id"""
        draft = Scenario.from_dict(scenario_payload).to_draft()

        assert draft == ScenarioDraft(
            name="Discovery sweep",
            description="Basic host discovery",
            phases=[
                {
                    "name": "Recon",
                    "description": "Enumerate the host",
                    "techniques": [{"technique_id": "T1082"}, {"technique_id": "T1016", "executor_name": "sh"}],
                    "order": 1,
                },
                {"name": "Processes", "techniques": [{"technique_id": "T1057"}], "order": 2},
            ],
            tags=["discovery", "safe"],
        )

    def test_draft_phases_reparse(self, scenario_payload):
        """Test draft phases are valid Phase payloads"""
        scenario = Scenario.from_dict(scenario_payload)

        assert [Phase.from_dict(p) for p in scenario.to_draft().phases] == scenario.phases


class TestScenarioDraft:
    """Test ScenarioDraft.to_dict"""

    def test_omits_absent_fields(self):
        """Test description and tags are left out when None"""
        assert ScenarioDraft(name="A", phases=[]).to_dict() == {"name": "A", "phases": []}

    def test_passes_fields_through(self):
        """Test description and tags are written unchanged"""
        draft = ScenarioDraft(name="A", phases=[{"name": "P"}], description="d", tags=["t"])

        assert draft.to_dict() == {"name": "A", "description": "d", "phases": [{"name": "P"}], "tags": ["t"]}

    def test_batch_to_dict(self):
        """Test batch wire layout"""
        batch = ImportBatch(version="1.0", scenarios=[ScenarioDraft(name="A", phases=[])])

        assert len(batch) == 1
        assert batch.to_dict() == {"version": "1.0", "scenarios": [{"name": "A", "phases": []}]}


class TestImportResult:
    """Test ImportResult.from_dict"""

    def test_partial_result(self):
        """Test a 207-style body"""
        result = ImportResult.from_dict(
            {"imported": 2, "failed": 1, "errors": ["scenario 2 (Second): unknown technique T9999"]}
        )

        assert result.imported == 2
        assert result.failed == 1
        assert result.total == 3
        assert result.is_partial
        assert result.errors == ["scenario 2 (Second): unknown technique T9999"]

    def test_full_success(self):
        """Test no failures is not partial"""
        result = ImportResult.from_dict({"imported": 3, "failed": 0, "scenarios": []})

        assert not result.is_partial
        assert result.errors == []

    def test_negative_counts_rejected(self):
        """Test counts cannot be negative"""
        with pytest.raises(PayloadError, match="negative"):
            ImportResult.from_dict({"imported": -1, "failed": 0})

    def test_oversized_count_rejected(self):
        """Test an integer too large for a float is a payload error"""
        with pytest.raises(PayloadError, match="'imported' is out of range"):
            ImportResult.from_dict({"imported": 10**400, "failed": 0})

    def test_echoed_scenarios(self, scenario_payload):
        """Test created scenarios are parsed"""
        result = ImportResult.from_dict({"imported": 1, "failed": 0, "scenarios": [scenario_payload]})

        assert result.scenarios[0].id == "sc-1"


class TestScenarioExport:
    """Test ScenarioExport parsing and document layout"""

    def test_to_document_writes_drafts(self, export_payload):
        """Test exported scenarios lose their ids"""
        document = ScenarioExport.from_dict(export_payload).to_document()

        assert document["version"] == "1.0"
        assert document["exported_at"] == "2026-03-09T10:00:00Z"
        assert [s["name"] for s in document["scenarios"]] == ["Discovery sweep", "Credential access"]
        assert all("id" not in s for s in document["scenarios"])

    def test_scenarios_required(self):
        """Test an export without scenarios is malformed"""
        with pytest.raises(PayloadError, match="'scenarios' is required"):
            ScenarioExport.from_dict({"version": "1.0"})


class TestExecutionHandle:
    """Test ExecutionHandle.from_dict"""

    def test_parses_execution(self):
        """Test server acknowledgement"""
        handle = ExecutionHandle.from_dict(
            {"id": "ex-1", "scenario_id": "sc-1", "status": "running", "safe_mode": False, "started_at": "2026-01-01"}
        )

        assert handle.id == "ex-1"
        assert handle.status == "running"
        assert handle.safe_mode is False

    def test_safe_mode_must_be_boolean(self):
        """Test safe_mode type is checked"""
        with pytest.raises(PayloadError, match="safe_mode"):
            ExecutionHandle.from_dict({"id": "ex-1", "scenario_id": "sc-1", "safe_mode": "yes"})
