"""Shared fixtures for imagehost tests."""

from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from imagehost.config import Settings
from imagehost.main import create_app

AUTH_KEY = "test-secret-key"


def png_bytes(size: int = 128) -> bytes:
    """PNG signature followed by padding up to ``size`` bytes."""
    signature = b"\x89PNG\r\n\x1a\n"
    return signature + b"\x00" * max(0, size - len(signature))


@pytest.fixture
def serve_dir(tmp_path: Path) -> Path:
    return tmp_path / "public"


@pytest.fixture
def make_client(serve_dir: Path):
    """Build a started TestClient around an app with the given settings overrides."""
    clients: list[TestClient] = []

    def _make(**overrides) -> TestClient:
        values = {
            "serve_dir": serve_dir,
            "require_auth": False,
            "auth_key": AUTH_KEY,
            "exit_on_error": False,
        }
        values.update(overrides)
        client = TestClient(create_app(Settings(**values)))
        client.__enter__()
        clients.append(client)
        return client

    yield _make

    for client in clients:
        client.__exit__(None, None, None)


@pytest.fixture
def client(make_client) -> TestClient:
    """Client with auth disabled."""
    return make_client()


@pytest.fixture
def auth_client(make_client) -> TestClient:
    """Client with the shared-secret gate enabled."""
    return make_client(require_auth=True)


def stored_names(serve_dir: Path) -> list[str]:
    """Every entry in the serve directory, temporary files included."""
    return sorted(p.name for p in serve_dir.iterdir())
