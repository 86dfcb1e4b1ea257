import json
from typing import Any

import pytest

from assetsearch_server.core.config import FOFA, HUNTER, ServerConfig
from assetsearch_server.models.schema import AUTH_API_KEY, AUTH_EMAIL_KEY, BackendDescriptor

_ENV_KEYS = (
    "FOFA_EMAIL",
    "FOFA_KEY",
    "FOFA_BASE_URL",
    "HUNTER_API_KEY",
    "HUNTER_BASE_URL",
    "ASSET_SEARCH_HTTP_TIMEOUT",
)


class FakeResponse:
    """Stand-in for requests.Response with just what the retrievers read."""

    def __init__(self, status_code: int = 200, body: Any = None, raw: bytes = None):
        self.status_code = status_code
        if raw is None:
            raw = json.dumps(body, ensure_ascii=False).encode("utf-8")
        self.content = raw
        self.text = raw.decode("utf-8", errors="replace")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def fofa_descriptor() -> BackendDescriptor:
    return BackendDescriptor(
        id=FOFA,
        base_url="https://fofa.info/api/v1",
        auth_scheme=AUTH_EMAIL_KEY,
        credentials={"email": "analyst@example.com", "key": "fofa-secret"},
    )


@pytest.fixture
def hunter_descriptor() -> BackendDescriptor:
    return BackendDescriptor(
        id=HUNTER,
        base_url="https://hunter.qianxin.com/openApi/search",
        auth_scheme=AUTH_API_KEY,
        credentials={"api_key": "hunter-secret"},
    )


@pytest.fixture
def server_config(fofa_descriptor, hunter_descriptor) -> ServerConfig:
    return ServerConfig(backends={FOFA: fofa_descriptor, HUNTER: hunter_descriptor}, http_timeout=5.0)


@pytest.fixture
def make_response():
    return FakeResponse
