"""
Scenario upload parsing

Turns the raw bytes of an uploaded file into an ImportBatch. Two document
shapes are accepted and resolved once, at the boundary, into a tagged
NormalizedUpload:

    BARE_ARRAY  [ {...scenario...}, ... ]
    ENVELOPE    {"version": "1.0", "scenarios": [ {...scenario...}, ... ]}

Each element needs a non-empty string "name" and a "phases" array (checked
structurally only; the server validates phases in depth). "description" and
"tags" pass through unchanged. Every bad element is reported; none is dropped.

parse_upload() is total: it returns an ImportBatch or raises ParseError.
"""

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any

from strikeboard.core import get_logger
from strikeboard.domain.constants import export_config
from strikeboard.domain.errors import ParseError
from strikeboard.domain.scenario import ImportBatch, ScenarioDraft

logger = get_logger(__name__)

MALFORMED_JSON = "malformed json"
INVALID_FORMAT = "invalid format"
INVALID_SCENARIO = "invalid scenario"
NO_SCENARIOS = "no scenarios"


class UploadShape(str, Enum):
    BARE_ARRAY = "bare_array"
    ENVELOPE = "envelope"


@dataclass(frozen=True)
class NormalizedUpload:
    """An uploaded document reduced to its shape tag, version and raw items."""

    shape: UploadShape
    version: str
    items: list[Any]


def decode_document(raw: bytes | bytearray | str) -> Any:
    """
    Decode uploaded bytes (UTF-8, optional BOM) as JSON.

    Raises:
        ParseError: "malformed json" for undecodable bytes or invalid JSON syntax
    """
    try:
        if isinstance(raw, (bytes, bytearray)):
            text = bytes(raw).decode("utf-8-sig")
        elif isinstance(raw, str):
            text = raw
        else:
            raise ParseError(MALFORMED_JSON)
        return json.loads(text)
    except (UnicodeDecodeError, ValueError, RecursionError) as e:
        logger.info(f"Rejected upload: {e}")
        raise ParseError(MALFORMED_JSON) from e


def normalize_document(document: Any) -> NormalizedUpload:
    """
    Resolve a decoded document to one of the two accepted shapes.

    Raises:
        ParseError: "invalid format" for any other top-level shape, a missing or
            non-array "scenarios", or a non-string "version"
    """
    if isinstance(document, list):
        return NormalizedUpload(UploadShape.BARE_ARRAY, export_config.DEFAULT_IMPORT_VERSION, document)

    if isinstance(document, dict):
        scenarios = document.get("scenarios")
        version = document.get("version")
        if not isinstance(scenarios, list):
            raise ParseError(INVALID_FORMAT)
        if version is None:
            version = export_config.DEFAULT_IMPORT_VERSION
        elif not isinstance(version, str):
            raise ParseError(INVALID_FORMAT)
        return NormalizedUpload(UploadShape.ENVELOPE, version, scenarios)

    raise ParseError(INVALID_FORMAT)


def _draft_from_item(position: int, item: Any) -> ScenarioDraft | str:
    """Build a draft, or return a self-describing error for the element at 1-based position."""
    if not isinstance(item, dict):
        return f"scenario {position}: expected an object, got {type(item).__name__}"

    name = item.get("name")
    if not isinstance(name, str) or not name.strip():
        return f"scenario {position}: missing required field 'name'"

    phases = item.get("phases")
    if not isinstance(phases, list):
        return f"scenario {position} ({name}): 'phases' must be an array"

    return ScenarioDraft(
        name=name,
        phases=phases,
        description=item.get("description"),
        tags=item.get("tags"),
    )


def parse_upload(raw: bytes | bytearray | str) -> ImportBatch:
    """
    Parse an uploaded scenario document into an ImportBatch.

    Args:
        raw: File contents

    Returns:
        ImportBatch whose every draft has a non-empty name and a list of phases

    Raises:
        ParseError: "malformed json", "invalid format", "no scenarios", or
            "invalid scenario" with one entry per rejected element in .errors

    Example:
        >>> batch = parse_upload(b'[{"name": "Recon", "phases": []}]')
        >>> batch.version, len(batch)
        ('1.0', 1)
    """
    upload = normalize_document(decode_document(raw))

    if not upload.items:
        raise ParseError(NO_SCENARIOS)

    drafts: list[ScenarioDraft] = []
    errors: list[str] = []
    for position, item in enumerate(upload.items, start=1):
        draft = _draft_from_item(position, item)
        if isinstance(draft, str):
            errors.append(draft)
        else:
            drafts.append(draft)

    if errors:
        logger.info(f"Rejected upload: {len(errors)} of {len(upload.items)} scenarios are invalid")
        raise ParseError(INVALID_SCENARIO, errors)

    logger.info(f"Parsed upload ({upload.shape.value}, version {upload.version}): {len(drafts)} scenarios")
    return ImportBatch(version=upload.version, scenarios=drafts)
