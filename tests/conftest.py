"""
tests/conftest.py -- Shared test fixtures for AssetVerse integration tests.

This module provides:
  - FakeVerifier: identity verifier stand-in; accepts tokens "valid:<email>"
  - make_test_store(): isolated named shared-memory DocumentStore
  - _patch_lifespan(): wires a test store and verifier into app.state,
    bypassing real startup (no database file, no Firebase)
  - api_client: module-scoped TestClient against the real app
  - bearer(): Authorization header helper

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs sync route handlers in a thread pool. Plain :memory:
DBs are per-connection and would present a blank schema to each worker
thread. The named URI format (file:name?mode=memory&cache=shared&uri=true)
shares one in-memory instance across all connections in the same process.

The DEBUG env var must be set before any api/ import so get_settings() does
not refuse to start without FB_SERVICE_KEY.
"""

from __future__ import annotations

import os
from collections.abc import Callable, Generator
from contextlib import asynccontextmanager

# CRITICAL: Set DEBUG before any api/core import so get_settings() accepts a
# missing FB_SERVICE_KEY instead of raising ValueError.
os.environ.setdefault("DEBUG", "true")

import pytest
from fastapi.testclient import TestClient

from api.limiter import limiter
from api.main import app
from docstore.store import DocumentStore

# ---------------------------------------------------------------------------
# Identity verifier stand-in
# ---------------------------------------------------------------------------


class FakeVerifier:
    """Accepts any token of the form "valid:<email>" and returns the email."""

    PREFIX = "valid:"

    def __init__(self) -> None:
        self.seen: list[str] = []
        self.closed = False

    def verify_id_token(self, token: str) -> str | None:
        self.seen.append(token)
        if token.startswith(self.PREFIX) and len(token) > len(self.PREFIX):
            return token[len(self.PREFIX) :]
        return None

    def close(self) -> None:
        self.closed = True


def bearer(email: str) -> dict[str, str]:
    """Authorization header carrying a token FakeVerifier accepts for email."""
    return {"Authorization": f"Bearer {FakeVerifier.PREFIX}{email}"}


# ---------------------------------------------------------------------------
# Store helpers
# ---------------------------------------------------------------------------


def make_test_store(db_suffix: str) -> DocumentStore:
    """Create an isolated named shared-memory SQLite document store.

    Args:
        db_suffix: Unique string appended to the DB name so test modules
                   don't share state.
    """
    return DocumentStore(f"sqlite:///file:test_docstore_{db_suffix}?mode=memory&cache=shared&uri=true")


def _patch_lifespan(store: DocumentStore, verifier: FakeVerifier):
    """Return an async context manager that replaces the real lifespan."""

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.store = store
        app.state.verifier = verifier
        yield

    return test_lifespan


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(scope="module")
def api_client(request) -> Generator[tuple[TestClient, DocumentStore], None, None]:
    """Yield (client, store) for API integration tests.

    The TestClient uses the real FastAPI app with a patched lifespan so
    tests hit real route handlers, middleware, and exception handlers but
    use an isolated in-memory store. The store is returned too so tests can
    seed and inspect documents directly.
    """
    store = make_test_store(request.module.__name__.rsplit(".", 1)[-1])
    app.router.lifespan_context = _patch_lifespan(store, FakeVerifier())
    # Rate-limit counters are process-global; start each module from zero.
    limiter.reset()

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client, store

    store.close()


@pytest.fixture
def store_factory() -> Generator[Callable[[str], DocumentStore], None, None]:
    """Yield a factory for extra shared-memory stores; closes them on teardown."""
    created: list[DocumentStore] = []

    def _factory(db_suffix: str) -> DocumentStore:
        store = make_test_store(db_suffix)
        created.append(store)
        return store

    yield _factory

    for store in created:
        store.close()
