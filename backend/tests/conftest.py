from __future__ import annotations

"""
Shared pytest configuration.

This file ensures the backend directory is on sys.path so that
`import chat_relay` works without installing the package, and provides
reusable fixtures for tests.
"""

import sys
from pathlib import Path

# Ensure project root is importable for test modules.
# This MUST be done before importing chat_relay modules.
BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

import pytest
from fastapi.testclient import TestClient

from chat_relay.deps import get_http_client
from chat_relay.routes import create_app
from tests.utils import RecordingUpstream, make_settings


@pytest.fixture()
def log_dir(tmp_path: Path) -> Path:
    return tmp_path / "logs"


@pytest.fixture()
def settings_factory(log_dir: Path):
    def _factory(**overrides):
        return make_settings(str(log_dir), **overrides)

    return _factory


@pytest.fixture()
def upstream() -> RecordingUpstream:
    return RecordingUpstream()


@pytest.fixture()
def client_factory(upstream: RecordingUpstream):
    """
    Build a TestClient for the given settings with all outbound HTTP routed
    to the recording upstream.
    """
    opened: list[TestClient] = []

    def _factory(settings) -> TestClient:
        fastapi_app = create_app(settings)
        async def _client():
            async with upstream.client() as c:
                yield c

        fastapi_app.dependency_overrides[get_http_client] = _client
        test_client = TestClient(fastapi_app)
        test_client.__enter__()
        opened.append(test_client)
        return test_client

    try:
        yield _factory
    finally:
        for test_client in opened:
            test_client.__exit__(None, None, None)
