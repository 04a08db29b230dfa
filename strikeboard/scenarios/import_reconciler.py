"""
Scenario Import Reconciler - drives one bulk import from file selection to result

State machine:

    IDLE -> FILE_SELECTED -> PARSING -> SUBMITTING -> RESULT_READY
    PARSING / SUBMITTING -> FILE_SELECTED          (on error)
    IDLE / FILE_SELECTED / RESULT_READY -> IDLE    (cancel)
    RESULT_READY -> IDLE                           (dismiss)

- A ParseError (no network call) or an outright TransportError returns the
  reconciler to FILE_SELECTED with the error recorded, so the user can retry.
- A structured server answer is an ImportResult and always reaches
  RESULT_READY, including partial and total per-item failure.
- RESULT_READY with imported > 0 invalidates the cached scenario listing.

Usage:
    reconciler = ScenarioImportReconciler(client, cache)
    reconciler.select_file(upload_bytes, "scenarios.json")
    result = await reconciler.submit()
    if result.is_partial:
        for message in result.errors:
            print(message)
    reconciler.dismiss()
"""

import asyncio
from enum import Enum

from strikeboard.collectors.autostrike_rest_client import AutoStrikeRESTClient
from strikeboard.collectors.query_cache import SCENARIOS_KEY, QueryCache
from strikeboard.core import get_logger
from strikeboard.core.logging_config import log_with_context
from strikeboard.domain.errors import InvalidTransitionError, StrikeboardError
from strikeboard.domain.scenario import ImportBatch, ImportResult
from strikeboard.scenarios.upload_parser import parse_upload
from strikeboard.utils.error_handling import log_and_continue

logger = get_logger(__name__)


class ImportState(str, Enum):
    IDLE = "idle"
    FILE_SELECTED = "file_selected"
    PARSING = "parsing"
    SUBMITTING = "submitting"
    RESULT_READY = "result_ready"


# Legal moves between states; anything else raises InvalidTransitionError
TRANSITIONS: dict[ImportState, frozenset[ImportState]] = {
    ImportState.IDLE: frozenset({ImportState.FILE_SELECTED, ImportState.IDLE}),
    ImportState.FILE_SELECTED: frozenset({ImportState.FILE_SELECTED, ImportState.PARSING, ImportState.IDLE}),
    ImportState.PARSING: frozenset({ImportState.SUBMITTING, ImportState.FILE_SELECTED}),
    ImportState.SUBMITTING: frozenset({ImportState.RESULT_READY, ImportState.FILE_SELECTED}),
    ImportState.RESULT_READY: frozenset({ImportState.IDLE}),
}


class ScenarioImportReconciler:
    """One import dialog's worth of state: the selected file, its batch, and the outcome."""

    def __init__(self, client: AutoStrikeRESTClient, cache: QueryCache):
        self.client = client
        self.cache = cache
        self._state = ImportState.IDLE
        self._raw: bytes | str | None = None
        self.filename: str | None = None
        self.batch: ImportBatch | None = None
        self.result: ImportResult | None = None
        self.error: StrikeboardError | None = None

    @property
    def state(self) -> ImportState:
        return self._state

    def _transition(self, target: ImportState) -> None:
        if target not in TRANSITIONS[self._state]:
            raise InvalidTransitionError(f"Cannot move import from {self._state.value} to {target.value}")
        logger.debug(f"Import state {self._state.value} -> {target.value}")
        self._state = target

    def _reset(self) -> None:
        self._raw = None
        self.filename = None
        self.batch = None
        self.result = None
        self.error = None

    def select_file(self, raw: bytes | str, filename: str | None = None) -> None:
        """
        Select (or replace) the file to import. Nothing is parsed yet.

        Raises:
            InvalidTransitionError: If an import is running or a result is awaiting dismissal
        """
        self._transition(ImportState.FILE_SELECTED)
        self._reset()
        self._raw = raw
        self.filename = filename

    async def submit(self, batch: ImportBatch | None = None) -> ImportResult:
        """
        Parse the selected file (unless a batch is given) and submit it in one call.

        Args:
            batch: Already normalized batch; parsed from the selected file when None

        Returns:
            ImportResult; failed > 0 is a partial success, not an error

        Raises:
            InvalidTransitionError: If no file is selected
            ParseError: If the file cannot be normalized (no network call is made)
            TransportError: If the server call failed outright (no partial result)
        """
        self._transition(ImportState.PARSING)
        self.error = None

        try:
            self.batch = batch if batch is not None else parse_upload(self._raw)
        except StrikeboardError as e:
            self._fail(e)
            raise

        self._transition(ImportState.SUBMITTING)
        try:
            result = await self.client.import_scenarios(self.batch)
        except StrikeboardError as e:
            self._fail(e)
            raise
        except (Exception, asyncio.CancelledError):
            self._transition(ImportState.FILE_SELECTED)
            raise

        self.result = result
        self._transition(ImportState.RESULT_READY)
        if result.imported > 0:
            self.cache.invalidate(SCENARIOS_KEY)

        log_with_context(
            logger,
            "warning" if result.is_partial else "info",
            "Scenario import finished",
            filename=self.filename,
            version=self.batch.version,
            submitted=len(self.batch),
            imported=result.imported,
            failed=result.failed,
        )
        return result

    def _fail(self, error: StrikeboardError) -> None:
        self.error = error
        self.result = None
        self._transition(ImportState.FILE_SELECTED)
        log_and_continue(
            logger,
            error,
            context={"filename": self.filename, "state": ImportState.FILE_SELECTED.value},
            error_type="Scenario import",
        )

    def cancel(self) -> None:
        """
        Abandon the import and return to IDLE.

        Raises:
            InvalidTransitionError: While parsing or submitting
        """
        self._transition(ImportState.IDLE)
        self._reset()

    def dismiss(self) -> None:
        """
        Acknowledge the result and return to IDLE.

        Raises:
            InvalidTransitionError: If no result is ready
        """
        if self._state != ImportState.RESULT_READY:
            raise InvalidTransitionError(f"No import result to dismiss (state is {self._state.value})")
        self._transition(ImportState.IDLE)
        self._reset()
