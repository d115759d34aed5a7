"""Database helpers."""

from .errors import is_unique_violation
from .session import async_engine, async_session_maker, get_session, init_db

__all__ = ["async_engine", "async_session_maker", "get_session", "init_db", "is_unique_violation"]
