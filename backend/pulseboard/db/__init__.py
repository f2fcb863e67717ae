"""Database package."""

from pulseboard.db.base import Base, TimestampMixin
from pulseboard.db.session import close_db, get_engine, get_session_factory, init_db

__all__ = ["Base", "TimestampMixin", "close_db", "get_engine", "get_session_factory", "init_db"]
