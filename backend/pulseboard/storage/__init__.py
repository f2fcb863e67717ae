"""Persistence backends for the board snapshot."""

from pulseboard.config import Settings
from pulseboard.storage.base import StateStore
from pulseboard.storage.file_store import FileStateStore
from pulseboard.storage.sql_store import SqlStateStore


def build_store(settings: Settings) -> StateStore:
    """Store selected by ``storage_backend``."""
    if settings.storage_backend == "file":
        return FileStateStore(settings.state_file)

    from pulseboard.db.session import get_session_factory

    return SqlStateStore(get_session_factory())


__all__ = ["FileStateStore", "SqlStateStore", "StateStore", "build_store"]
