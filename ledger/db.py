from __future__ import annotations

import os
from typing import Iterator

from sqlmodel import Session, SQLModel, create_engine

# registers the ledger tables on SQLModel.metadata
from . import models  # noqa: F401

DATABASE_URL = os.getenv("LEDGER_DB_URL", "sqlite:///./ledger.db")
engine = create_engine(
    DATABASE_URL,
    echo=False,
    pool_pre_ping=True,
    connect_args={"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {},
)


def init_db() -> None:
    """Initialise tables (idempotent)."""
    SQLModel.metadata.create_all(engine)


def get_session() -> Iterator[Session]:
    """Request-scoped session (FastAPI dependency style)."""
    with Session(engine) as session:
        yield session
