"""ASGI entrypoint: ``uvicorn ledger.main:app``."""
from .api import create_app
from .db import init_db

init_db()
app = create_app()
