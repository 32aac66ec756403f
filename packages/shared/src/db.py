"""Database engine and sessions. DATABASE_URL selects the backend (SQLite by default)."""
import os
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

from packages.shared.src import models  # noqa: F401  (registers tables on SQLModel.metadata)

_DEFAULT_DATABASE_URL = "sqlite:///./roasboard.db"
_engine: Optional[Engine] = None


def get_database_url() -> str:
    return os.environ.get("DATABASE_URL", _DEFAULT_DATABASE_URL)


def get_engine() -> Engine:
    """Process-wide engine, created on first use."""
    global _engine
    if _engine is None:
        url = get_database_url()
        connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
        _engine = create_engine(url, connect_args=connect_args)
    return _engine


def init_db(engine: Optional[Engine] = None) -> None:
    """Create missing tables."""
    SQLModel.metadata.create_all(engine or get_engine())


@contextmanager
def get_session() -> Iterator[Session]:
    with Session(get_engine()) as session:
        yield session


def get_session_fastapi() -> Iterator[Session]:
    """FastAPI dependency; tests override it with an in-memory session."""
    with Session(get_engine()) as session:
        yield session
