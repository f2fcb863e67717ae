"""Board persisted as a single JSON document on disk."""

import asyncio
import os
import tempfile
from pathlib import Path

import orjson
import structlog
from pydantic import ValidationError

from pulseboard.domain.records import AppState
from pulseboard.domain.seed import default_state
from pulseboard.exceptions import StaleStateError, StorageError
from pulseboard.services.people import sync_team_member_details

logger = structlog.get_logger()


class FileStateStore:
    """JSON file store: camelCase keys, ISO-8601 timestamps.

    Writes go to a temporary file in the same directory and are renamed into
    place, so a crash never leaves a half-written board behind.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path)

    def _read(self) -> AppState | None:
        if not self.path.exists():
            return None
        try:
            raw = orjson.loads(self.path.read_bytes())
            return AppState.model_validate(raw)
        except (orjson.JSONDecodeError, ValidationError) as e:
            raise StorageError(f"Board file {self.path} is unreadable: {e}") from e

    def _write(self, state: AppState) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = orjson.dumps(state.to_json_dict(), option=orjson.OPT_INDENT_2)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(payload)
            os.replace(tmp_name, self.path)
        except OSError as e:
            Path(tmp_name).unlink(missing_ok=True)
            raise StorageError(f"Failed to write board file {self.path}: {e}") from e

    async def load(self) -> AppState:
        state = await asyncio.to_thread(self._read)
        if state is None:
            logger.info("board_file_missing_using_default", path=str(self.path))
            return default_state()
        return sync_team_member_details(state)

    async def save(self, state: AppState, expected_version: int | None = None) -> AppState:
        stored = await asyncio.to_thread(self._read)
        stored_version = stored.version if stored is not None else 0
        if expected_version is not None and expected_version != stored_version:
            raise StaleStateError(expected_version, stored_version)

        saved = state.model_copy(update={"version": stored_version + 1})
        await asyncio.to_thread(self._write, saved)
        logger.debug("board_file_saved", path=str(self.path), version=saved.version)
        return saved
