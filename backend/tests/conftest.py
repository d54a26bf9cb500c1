"""
Pytest configuration & fixtures for WalkerRx backend tests.

Key design decisions:
  - No test touches the network: the app is built with a MagicMock
    standing in for the shared requests.Session.
  - Token exchanges go through ``session.post``; pricing API calls go
    through ``session.request``. Tests set return values / side effects.
  - Time is controlled by FakeClock so token expiry is deterministic.
"""

import os
import sys
from unittest import mock

import pytest

# ── 1. Ensure backend package is importable ──
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

# ── 2. Set test environment BEFORE anything else ──
os.environ["APP_ENV"] = "testing"
os.environ["AMERICAS_PHARMACY_CLIENT_ID"] = "test-client-id"
os.environ["AMERICAS_PHARMACY_CLIENT_SECRET"] = "test-client-secret"
os.environ["NEXT_PUBLIC_USE_MOCK_DATA"] = "false"
os.environ["NEXT_PUBLIC_FALLBACK_TO_MOCK"] = "true"
os.environ["LOG_LEVEL"] = "WARNING"

# ── 3. NOW safe to import application modules ──
from walkerrx.config import Config
from walkerrx.main import create_app


class UnitTestConfig(Config):
    APP_ENV = "testing"
    API_BASE_URL = "https://pricing.test/v1"
    AUTH_URL = "https://auth.test/oauth2/v1/token"
    CLIENT_ID = "test-client-id"
    CLIENT_SECRET = "test-client-secret"
    HQ_MAPPING_NAME = "walkerrx"
    USE_MOCK_DATA = False
    MOCK_FEATURES = {}
    FALLBACK_TO_MOCK = True
    API_DEBUG_KEY = "debug-key"
    RATELIMIT_ENABLED = False
    LOG_LEVEL = "WARNING"


class MockModeConfig(UnitTestConfig):
    USE_MOCK_DATA = True


class NoFallbackConfig(UnitTestConfig):
    FALLBACK_TO_MOCK = False


# ═══════════════════════════════════════════
# FAKES
# ═══════════════════════════════════════════

class FakeResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, status_code=200, payload=None, text=None):
        self.status_code = status_code
        self._payload = payload
        self.text = text if text is not None else ("" if payload is None else str(payload))

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON body")
        return self._payload


class FakeClock:
    def __init__(self, now=1_700_000_000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


def token_response(access_token="tok-1", expires_in=3600, token_type="Bearer"):
    return FakeResponse(200, {
        "access_token": access_token,
        "expires_in": expires_in,
        "token_type": token_type,
    })


# ═══════════════════════════════════════════
# FIXTURES
# ═══════════════════════════════════════════

@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def session():
    """Fake requests.Session: token exchange succeeds, API returns []."""
    fake = mock.MagicMock()
    fake.post.return_value = token_response()
    fake.request.return_value = FakeResponse(200, [])
    return fake


@pytest.fixture
def make_app(session, clock):
    def _make(config=UnitTestConfig):
        application = create_app(config, session=session, clock=clock)
        application.config["TESTING"] = True
        return application
    return _make


@pytest.fixture
def app(make_app):
    """Create application for testing."""
    return make_app()


@pytest.fixture
def client(app):
    with app.test_client() as c:
        yield c


@pytest.fixture
def mock_client(make_app):
    """Client for an app with mock data forced on for every feature."""
    with make_app(MockModeConfig).test_client() as c:
        yield c


@pytest.fixture
def no_fallback_client(make_app):
    with make_app(NoFallbackConfig).test_client() as c:
        yield c


def upstream_calls(session, path_suffix):
    """Pricing API calls whose URL ends with ``path_suffix``."""
    return [c for c in session.request.call_args_list if c.args[1].endswith(path_suffix)]
