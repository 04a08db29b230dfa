"""
Scenario export

Fetches scenario snapshots from the server and turns them into the
downloadable document {version, exported_at, scenarios: ScenarioDraft[]}.
The document re-imports through parse_upload() unchanged.

Files are named autostrike-scenarios-<YYYY-MM-DD>.json and written atomically:
a failure at any step leaves no partial file behind.

Usage:
    export = await export_all(client)
    payload = serialize_export(export)

    path = await write_export(client, "exports/")
"""

import json
from datetime import date
from pathlib import Path

from strikeboard.collectors.autostrike_rest_client import AutoStrikeRESTClient
from strikeboard.core import get_logger
from strikeboard.domain.constants import export_config
from strikeboard.domain.errors import StrikeboardError, ValidationError
from strikeboard.domain.scenario import ScenarioExport
from strikeboard.utils.atomic_json import atomic_json_save
from strikeboard.utils.error_handling import log_and_raise

logger = get_logger(__name__)


async def export_all(client: AutoStrikeRESTClient) -> ScenarioExport:
    """Snapshot of every scenario in the catalog."""
    try:
        export = await client.export_scenarios()
    except StrikeboardError as e:
        log_and_raise(logger, e, {"scope": "all"}, "Scenario export")
    logger.info(f"Exported {len(export.scenarios)} scenarios")
    return export


async def export_selected(client: AutoStrikeRESTClient, ids: list[str]) -> ScenarioExport:
    """
    Snapshot of the given scenarios.

    Raises:
        ValidationError: If ids is empty (no call is made)
        TransportError: If the export failed
    """
    if not ids:
        raise ValidationError("Select at least one scenario to export")
    try:
        export = await client.export_scenarios(list(ids))
    except StrikeboardError as e:
        log_and_raise(logger, e, {"scope": "selected", "ids": list(ids)}, "Scenario export")
    logger.info(f"Exported {len(export.scenarios)} of {len(ids)} selected scenarios")
    return export


async def export_one(client: AutoStrikeRESTClient, scenario_id: str) -> ScenarioExport:
    """Snapshot of a single scenario."""
    if not scenario_id:
        raise ValidationError("A scenario is required to export")
    try:
        export = await client.export_scenario(scenario_id)
    except StrikeboardError as e:
        log_and_raise(logger, e, {"scope": "one", "scenario_id": scenario_id}, "Scenario export")
    logger.info(f"Exported scenario {scenario_id}")
    return export


def export_filename(today: date | None = None) -> str:
    """
    Download filename for an export made on the given day.

    Example:
        >>> export_filename(date(2024, 3, 9))
        'autostrike-scenarios-2024-03-09.json'
    """
    today = today or date.today()
    return f"{export_config.FILENAME_PREFIX}-{today.isoformat()}.json"


def serialize_export(export: ScenarioExport) -> bytes:
    """Encode the export document as indented UTF-8 JSON."""
    return json.dumps(export.to_document(), indent=2, ensure_ascii=False).encode("utf-8")


async def write_export(
    client: AutoStrikeRESTClient,
    directory: str | Path,
    ids: list[str] | None = None,
    today: date | None = None,
) -> Path:
    """
    Export scenarios (all, or only ids) and write the file into directory.

    Args:
        client: REST client
        directory: Target directory (created if missing)
        ids: Optional subset of scenario ids
        today: Date used for the filename (defaults to today)

    Returns:
        Path of the written file

    Raises:
        TransportError: If the export could not be fetched (nothing is written)
        OSError: If the file could not be written (no partial file remains)
    """
    export = await (export_selected(client, ids) if ids else export_all(client))
    output_file = Path(directory) / export_filename(today)

    try:
        path = atomic_json_save(export.to_document(), output_file)
    except OSError as e:
        log_and_raise(logger, e, {"path": str(output_file)}, "Export file write")

    logger.info(f"Wrote {len(export.scenarios)} scenarios to {path}")
    return path
