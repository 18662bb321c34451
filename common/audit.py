"""Shared audit logging utilities.

Administrative writes (pay-config tier changes) append immutable rows to the
``audit_journal`` table so operators can reconstruct who changed fee policy
and when.
"""
from __future__ import annotations

import os
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import JSON, Column, DateTime, String, create_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import Field, SQLModel, Session

from .datetime import utcnow

__all__ = [
    "AuditJournal",
    "get_engine",
    "log_event",
]


# ---------------------------------------------------------------------------
# Database setup
# ---------------------------------------------------------------------------


AUDIT_DB_URL = os.getenv("AUDIT_DB_URL", "sqlite:///./.data/audit_journal.db")

if AUDIT_DB_URL.startswith("sqlite:///./"):
    os.makedirs(os.path.dirname(AUDIT_DB_URL[len("sqlite:///"):]), exist_ok=True)

_engine_kwargs: Dict[str, Any] = {}
if AUDIT_DB_URL.startswith("sqlite"):
    _engine_kwargs["connect_args"] = {"check_same_thread": False}
    if ":memory:" in AUDIT_DB_URL:
        # one shared connection, otherwise each thread sees an empty database
        _engine_kwargs["poolclass"] = StaticPool

engine = create_engine(AUDIT_DB_URL, echo=False, **_engine_kwargs)


class AuditJournal(SQLModel, table=True):
    """Immutable audit log for administrative changes."""

    __tablename__ = "audit_journal"

    id: Optional[int] = Field(default=None, primary_key=True)

    # UTC timestamp when the action occurred.
    ts: datetime = Field(
        default_factory=utcnow,
        sa_column=Column("ts", DateTime, nullable=False, index=True),
    )

    # Emitting component e.g. "pay_config"
    service: str = Field(sa_column=Column(String, nullable=False, index=True))

    # Authenticated admin username
    actor: Optional[str] = None

    # Action verb e.g. "PAY_CONFIG_CREATED"
    action: str = Field(sa_column=Column(String, nullable=False))

    details: Dict[str, Any] = Field(
        default_factory=dict, sa_column=Column(JSON, nullable=False, default={})
    )


# Idempotent table creation for local dev and during tests.
AuditJournal.__table__.create(engine, checkfirst=True)


def get_engine():
    """Return the shared audit engine."""

    return engine


def log_event(
    *,
    service: str,
    action: str,
    actor: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
) -> None:
    """Insert a new audit record and commit immediately.

    Uses its own session on the audit engine so the journal row never shares
    a transaction with the business write it describes.
    """

    entry = AuditJournal(
        service=service,
        action=action,
        actor=actor,
        details=details or {},
    )
    with Session(engine) as audit_sess:
        audit_sess.add(entry)
        audit_sess.commit()
