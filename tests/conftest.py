import os

# Configure in-memory databases BEFORE any service module is imported
os.environ.setdefault("AUDIT_DB_URL", "sqlite:///:memory:")
os.environ.setdefault("LEDGER_DB_URL", "sqlite:///:memory:")
os.environ.setdefault("LOG_FORMAT", "text")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import Session, SQLModel, create_engine  # noqa: E402

from common import secrets as secrets_module  # noqa: E402


# ---------------------------------------------------------------------------
# Default auth tokens for API tests
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _secrets() -> None:
    """Provide default secrets for tests via the secrets manager."""

    secrets_module.secrets.set_override(
        {
            "API_TOKENS": {
                "alice": "alice-token",
                "bob": "bob-token",
                "root": "admin-token",
            },
            "ADMIN_USERS": ["root"],
            "JWT_SECRET": "testsecret",
        }
    )
    yield
    secrets_module.secrets.set_override({})

# ---------------------------------------------------------------------------
# Isolated ledger database per test
# ---------------------------------------------------------------------------

@pytest.fixture()
def engine():
    eng = create_engine(
        "sqlite:///:memory:",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(eng)
    yield eng
    eng.dispose()

@pytest.fixture()
def session(engine):
    with Session(engine) as s:
        yield s

@pytest.fixture()
def client(engine):
    from ledger.api import create_app
    from ledger.db import get_session

    def _get_session():
        with Session(engine) as s:
            yield s

    app = create_app()
    app.dependency_overrides[get_session] = _get_session
    return TestClient(app)

