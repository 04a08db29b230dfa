"""
Scenario domain models - Attack scenarios, import batches and execution handles

Represents the scenario catalog held by the AutoStrike server:
    - Scenario / Phase / TechniqueSelection: a named, ordered attack plan
    - ScenarioDraft / ImportBatch: scenarios without ids, ready to import
    - ImportResult: per-item outcome of a bulk import
    - ScenarioExport: downloadable snapshot of the catalog
    - ExecutionHandle / RunRequest: starting a scenario against agents
"""

from dataclasses import dataclass, field
from typing import Any

from .constants import export_config
from .errors import PayloadError
from .payload import read_int, read_str, require_list, require_mapping


@dataclass
class TechniqueSelection:
    """
    A technique to execute within a phase.

    The server accepts both the legacy plain-string form ("T1059") and the
    object form ({"technique_id": "T1059", "executor_name": "bash"}).
    """

    technique_id: str
    executor_name: str | None = None

    @classmethod
    def from_value(cls, value: Any) -> "TechniqueSelection":
        if isinstance(value, str):
            return cls(technique_id=value)
        value = require_mapping(value, "technique selection")
        return cls(
            technique_id=read_str(value, "technique_id"),
            executor_name=read_str(value, "executor_name", None) or None,
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"technique_id": self.technique_id}
        if self.executor_name:
            data["executor_name"] = self.executor_name
        return data


@dataclass
class Phase:
    """An ordered step of a scenario. Owned by its Scenario."""

    name: str
    techniques: list[TechniqueSelection] = field(default_factory=list)
    description: str | None = None
    order: int | None = None

    @classmethod
    def from_dict(cls, data: Any) -> "Phase":
        data = require_mapping(data, "phase")
        techniques = require_list(data.get("techniques") or [], "phase techniques")
        return cls(
            name=read_str(data, "name"),
            techniques=[TechniqueSelection.from_value(t) for t in techniques],
            description=read_str(data, "description", None) or None,
            order=read_int(data, "order", None),
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name}
        if self.description:
            data["description"] = self.description
        data["techniques"] = [t.to_dict() for t in self.techniques]
        if self.order is not None:
            data["order"] = self.order
        return data


@dataclass
class ScenarioDraft:
    """
    A scenario without an id, as submitted for import.

    phases is kept as the raw (structurally validated) list so that uploaded
    documents reach the server unchanged; description and tags pass through
    untouched and are omitted when absent.
    """

    name: str
    phases: list[Any]
    description: Any = None
    tags: Any = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name}
        if self.description is not None:
            data["description"] = self.description
        data["phases"] = self.phases
        if self.tags is not None:
            data["tags"] = self.tags
        return data


@dataclass
class Scenario:
    """
    A named, ordered sequence of attack phases. Identity is id.

    Example:
        scenario = Scenario.from_dict({
            "id": "sc-1",
            "name": "Discovery sweep",
            "phases": [{"name": "Recon", "techniques": ["T1082", "T1016"]}],
            "tags": ["discovery"],
        })
        print(scenario.technique_count)  # 2
    """

    id: str
    name: str
    phases: list[Phase] = field(default_factory=list)
    description: str | None = None
    tags: list[str] | None = None

    @property
    def technique_count(self) -> int:
        return sum(len(phase.techniques) for phase in self.phases)

    @classmethod
    def from_dict(cls, data: Any) -> "Scenario":
        data = require_mapping(data, "scenario")
        phases = require_list(data.get("phases") or [], "scenario phases")
        tags = data.get("tags")
        if tags is not None:
            tags = [str(tag) for tag in require_list(tags, "scenario tags")]
        return cls(
            id=read_str(data, "id"),
            name=read_str(data, "name"),
            phases=[Phase.from_dict(p) for p in phases],
            description=read_str(data, "description", None),
            tags=tags,
        )

    def to_draft(self) -> ScenarioDraft:
        """Strip the server-assigned id, producing the import/export representation."""
        return ScenarioDraft(
            name=self.name,
            phases=[phase.to_dict() for phase in self.phases],
            description=self.description,
            tags=list(self.tags) if self.tags is not None else None,
        )


@dataclass
class ImportBatch:
    """Normalized upload: a version tag plus the drafts in document order."""

    version: str
    scenarios: list[ScenarioDraft]

    def __len__(self) -> int:
        return len(self.scenarios)

    def to_dict(self) -> dict[str, Any]:
        return {"version": self.version, "scenarios": [s.to_dict() for s in self.scenarios]}


@dataclass
class ImportResult:
    """
    Outcome of a bulk import that reached the server.

    A result with failed > 0 is a partial success, not an error: the imported
    scenarios exist on the server. errors holds one self-describing entry per
    failed item.
    """

    imported: int = 0
    failed: int = 0
    errors: list[str] = field(default_factory=list)
    scenarios: list[Scenario] = field(default_factory=list)

    @property
    def is_partial(self) -> bool:
        return self.failed > 0

    @property
    def total(self) -> int:
        return self.imported + self.failed

    @classmethod
    def from_dict(cls, data: Any) -> "ImportResult":
        data = require_mapping(data, "import result")
        imported = read_int(data, "imported", 0)
        failed = read_int(data, "failed", 0)
        if imported < 0 or failed < 0:
            raise PayloadError(f"Malformed import result: negative counts (imported={imported}, failed={failed})")
        errors = [str(e) for e in require_list(data.get("errors") or [], "import errors")]
        scenarios = [Scenario.from_dict(s) for s in require_list(data.get("scenarios") or [], "imported scenarios")]
        return cls(imported=imported, failed=failed, errors=errors, scenarios=scenarios)


@dataclass
class ScenarioExport:
    """Snapshot of scenarios as returned by the export endpoints."""

    version: str
    scenarios: list[Scenario]
    exported_at: str | None = None

    @classmethod
    def from_dict(cls, data: Any) -> "ScenarioExport":
        data = require_mapping(data, "scenario export")
        if "scenarios" not in data:
            raise PayloadError("Malformed scenario export: 'scenarios' is required")
        return cls(
            version=read_str(data, "version", export_config.EXPORT_VERSION),
            scenarios=[Scenario.from_dict(s) for s in require_list(data["scenarios"], "exported scenarios")],
            exported_at=read_str(data, "exported_at", None),
        )

    def to_document(self) -> dict[str, Any]:
        """Downloadable document: scenarios are written as drafts so the file re-imports cleanly."""
        document: dict[str, Any] = {"version": self.version}
        if self.exported_at:
            document["exported_at"] = self.exported_at
        document["scenarios"] = [s.to_draft().to_dict() for s in self.scenarios]
        return document


@dataclass
class RunRequest:
    """What the run-confirmation dialog hands back: target agents and safe mode."""

    agent_paws: list[str]
    safe_mode: bool = True


@dataclass
class ExecutionHandle:
    """A started execution as acknowledged by the server."""

    id: str
    scenario_id: str
    status: str
    safe_mode: bool = True
    started_at: str | None = None

    @classmethod
    def from_dict(cls, data: Any) -> "ExecutionHandle":
        data = require_mapping(data, "execution")
        safe_mode = data.get("safe_mode", True)
        if not isinstance(safe_mode, bool):
            raise PayloadError("Malformed execution payload: 'safe_mode' must be a boolean")
        return cls(
            id=read_str(data, "id"),
            scenario_id=read_str(data, "scenario_id"),
            status=read_str(data, "status", "pending"),
            safe_mode=safe_mode,
            started_at=read_str(data, "started_at", None),
        )
