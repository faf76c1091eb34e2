import sys
from pathlib import Path

import pytest

# Ensure the `brand_equity` package is importable when running pytest from the repo root.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from brand_equity.core import config  # noqa: E402


@pytest.fixture(autouse=True)
def clear_settings_cache():
    config.get_settings.cache_clear()
    yield
    config.get_settings.cache_clear()


@pytest.fixture
def use_settings(monkeypatch):
    """Patch ``get_settings`` in a handler module with explicit field values."""

    def _apply(module, **fields):
        settings = config.Settings(**fields)
        monkeypatch.setattr(module, "get_settings", lambda: settings)
        return settings

    return _apply


# Stands in for a literal JSON `null` body; a payload of None means "no JSON body".
JSON_NULL = object()


class DummyResponse:
    def __init__(self, status_code=200, payload=None, text=None):
        self.status_code = status_code
        self._payload = payload
        self.text = text if text is not None else ""

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        if self._payload is None:
            raise ValueError("no JSON body")
        if self._payload is JSON_NULL:
            return None
        return self._payload


class DummySession:
    def __init__(self, responses=None):
        self.calls = []
        self.responses = list(responses or [])

    def _next(self, method, url, kwargs):
        self.calls.append((method, url, kwargs))
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, Exception):
            raise response
        return response

    def get(self, url, **kwargs):
        return self._next("GET", url, kwargs)

    def post(self, url, **kwargs):
        return self._next("POST", url, kwargs)

    def request(self, method, url, **kwargs):
        return self._next(method, url, kwargs)


@pytest.fixture
def dummy_session(monkeypatch):
    """Install a ``DummySession`` as ``_SESSION`` on a vendor module."""

    def _install(module, *responses):
        session = DummySession(responses)
        monkeypatch.setattr(module, "_SESSION", session)
        return session

    return _install
