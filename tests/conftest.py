# ============================================================================
# FireSink - Test Configuration and Fixtures
#
# Purpose: Shared pytest fixtures for testing
# Inputs: None
# Outputs: Fixtures for use in tests
# Dependencies: pytest, unittest.mock, requests
# Usage: pytest tests/ (fixtures are automatically available)
#
# Changelog:
#   2026-09-05: Initial fixtures (output config factory, fake client, mock session)
# ============================================================================

import json
import os
from typing import Any, Optional
from unittest.mock import MagicMock

import pytest
import requests

from FireSink.client import FirebaseClient
from FireSink.config import FirebaseOutputConfig


def make_response(status_code: int = 200, body: Any = None, reason: str = "OK") -> MagicMock:
    """Build a mock requests.Response carrying a JSON body."""
    response = MagicMock(spec=requests.Response)
    response.status_code = status_code
    response.reason = reason
    if body is None:
        response.content = b""
        response.text = ""
        response.json.side_effect = ValueError("No JSON body")
    else:
        text = json.dumps(body)
        response.content = text.encode("utf-8")
        response.text = text
        response.json.return_value = body
    return response


def make_session(response: Optional[MagicMock] = None) -> MagicMock:
    """Mock requests.Session whose request() answers with ``response``."""
    session = MagicMock(spec=requests.Session)
    session.request.return_value = response if response is not None else make_response(200, {"ok": True})
    return session


@pytest.fixture(autouse=True)
def _clean_firesink_env(monkeypatch):
    """Keep FIRESINK_* variables from the developer's shell out of the tests."""
    for key in list(os.environ):
        if key.startswith("FIRESINK_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def make_config():
    """Factory for FirebaseOutputConfig with test defaults."""

    def _make(**overrides: Any) -> FirebaseOutputConfig:
        values = {"url": "https://x.io", "path": "/a/b", "verb": "put"}
        values.update(overrides)
        return FirebaseOutputConfig(**values)

    return _make


@pytest.fixture
def fake_client():
    """FirebaseClient stand-in that records write() calls without any I/O."""
    return MagicMock(spec=FirebaseClient)


@pytest.fixture
def mock_session():
    return make_session()
