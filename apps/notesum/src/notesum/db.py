from functools import lru_cache
from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import DeclarativeBase

from notesum.config import get_settings


class Base(DeclarativeBase):
    pass


def _ensure_sqlite_parent_dir(database_url: str) -> None:
    url = make_url(database_url)
    if url.get_backend_name() != "sqlite":
        return
    database = url.database
    if not database or database == ":memory:" or database.startswith("file:"):
        return
    Path(database).parent.mkdir(parents=True, exist_ok=True)


def create_index_engine(database_url: str, *, echo: bool = False) -> Engine:
    """Engine for the note index; file-based SQLite URLs get their directory created."""
    _ensure_sqlite_parent_dir(database_url)
    return create_engine(database_url, echo=echo, pool_pre_ping=True)


@lru_cache
def get_engine() -> Engine:
    settings = get_settings()
    return create_index_engine(settings.database_url, echo=settings.db_echo)
