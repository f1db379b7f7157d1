"""Shared fixtures for HTTP-level tests against a temporary SQLite document store."""
import json
import sqlite3
from contextlib import contextmanager

import pytest
from fastapi.testclient import TestClient

from bizintake.config import Settings
from bizintake.db.connection import run_migrations
from bizintake.main import create_app

WEBHOOK_KEY = "test-shared-secret"


def _settings(db_path: str, **overrides) -> Settings:
    values = dict(
        DB_PATH=db_path,
        LOG_LEVEL="debug",
        ENRICHMENT_WEBHOOK_URL="https://hook.example.test/enrich",
        MAKE_WEBHOOK_API_KEY=WEBHOOK_KEY,
        RESEND_API_KEY="re_test_key",
        EMAIL_FROM_ADDRESS="Outreach <outreach@example.com>",
    )
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def webhook_key():
    return WEBHOOK_KEY


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "intake.db")


@pytest.fixture
def make_client(db_path):
    """Build a TestClient with selected settings overridden (e.g. a missing secret)."""

    @contextmanager
    def _make(**overrides):
        app = create_app(_settings(db_path, **overrides))
        with TestClient(app, raise_server_exceptions=False) as c:
            yield c

    return _make


@pytest.fixture
def client(make_client):
    with make_client() as c:
        yield c


@pytest.fixture
def seed(db_path):
    """Write a raw document the way the external automation service does."""

    def _seed(collection: str, doc_id: str, document: dict) -> None:
        run_migrations(db_path)
        conn = sqlite3.connect(db_path)
        conn.execute(
            "INSERT INTO documents (collection, id, data) VALUES (?, ?, ?)",
            (collection, doc_id, json.dumps(document)),
        )
        conn.commit()
        conn.close()

    return _seed


@pytest.fixture
def stored(db_path):
    """Read a raw document back, or None."""

    def _read(collection: str, doc_id: str) -> dict | None:
        conn = sqlite3.connect(db_path)
        row = conn.execute(
            "SELECT data FROM documents WHERE collection = ? AND id = ?", (collection, doc_id)
        ).fetchone()
        conn.close()
        return json.loads(row[0]) if row else None

    return _read


@pytest.fixture
def count(db_path):
    def _count(collection: str) -> int:
        conn = sqlite3.connect(db_path)
        row = conn.execute(
            "SELECT COUNT(*) FROM documents WHERE collection = ?", (collection,)
        ).fetchone()
        conn.close()
        return row[0]

    return _count
