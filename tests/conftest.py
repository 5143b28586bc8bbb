"""
Shared pytest fixtures for all test modules.

IMPORTANT: TESTING must be set before the app is imported so the lifespan
skips the asyncio background cleanup task.
"""

import io
import os

os.environ["TESTING"] = "true"

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from tests.mocks.firebase_mock import MockFirestore
from tests.mocks.redis_mock import MockRedis
from tests.mocks.score_provider_mock import FixedScoreProvider

# App import happens AFTER os.environ["TESTING"] is set above.
from fakefinder.main import app  # noqa: E402

ADMIN_KEY = "test-admin-key"
USER_ID = "user-001"

HUMAN_TEXT = (
    "Yesterday my grandmother taught me how to bake her famous lemon bread. "
    "We spent the whole afternoon in her tiny kitchen, laughing about old family "
    "stories while flour covered every surface. The loaf came out slightly burnt "
    "on top, but honestly it tasted wonderful anyway."
)


# ---------------------------------------------------------------------------
# Core infrastructure fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def isolated_state(monkeypatch):
    """Every test starts without Redis/Firestore and with empty in-process stores."""
    from fakefinder.core.dependencies import coordinator
    from fakefinder.core.rate_limiter import reset_rate_limits
    from fakefinder.integrations import firebase as fb
    from fakefinder.integrations import redis_client as rc
    from fakefinder.services.model_store import reset_memory_states

    monkeypatch.setattr(fb, "db", None)
    monkeypatch.setattr(rc, "client", None)
    reset_memory_states()
    reset_rate_limits()
    coordinator.submissions.clear()
    yield
    coordinator.submissions.clear()


@pytest.fixture
def mock_firebase(monkeypatch):
    """Replace firebase.db with an in-memory MockFirestore."""
    from fakefinder.integrations import firebase as fb

    mock_db = MockFirestore()
    monkeypatch.setattr(fb, "db", mock_db)
    return mock_db


@pytest.fixture
def mock_redis(monkeypatch):
    """Replace redis_client.client with an in-memory MockRedis."""
    from fakefinder.integrations import redis_client as rc

    mock_rc = MockRedis()
    monkeypatch.setattr(rc, "client", mock_rc)
    return mock_rc


@pytest.fixture
def fast_engine(monkeypatch):
    """
    Shrink every simulated duration so a full submission takes milliseconds,
    and pin the shared coordinator's randomness to the low end of each range.
    """
    from fakefinder.config import settings
    from fakefinder.core.dependencies import coordinator

    provider = FixedScoreProvider(position=0.0)
    monkeypatch.setattr(settings, "method_duration_scale", 0.001)
    monkeypatch.setattr(settings, "training_duration_sec", 0)
    monkeypatch.setattr(settings, "testing_duration_sec", 0)
    monkeypatch.setattr(coordinator.runner, "tick_ms", 1)
    monkeypatch.setattr(coordinator.runner, "provider", provider)
    monkeypatch.setattr(coordinator, "sample_ms", 1)
    return provider


@pytest.fixture
def admin_key(monkeypatch):
    from fakefinder.config import settings

    monkeypatch.setattr(settings, "admin_api_key", ADMIN_KEY)
    return ADMIN_KEY


@pytest.fixture
def client(mock_firebase, mock_redis):
    """
    FastAPI TestClient with mocked Firebase and Redis.

    initialize() calls are patched to no-ops so they can't overwrite our mocks
    or attempt real network connections during the lifespan startup.
    """
    with (
        patch("fakefinder.integrations.firebase.initialize"),
        patch("fakefinder.integrations.redis_client.initialize"),
    ):
        with TestClient(app, raise_server_exceptions=False) as c:
            yield c


# ---------------------------------------------------------------------------
# Shared test-data helpers
# ---------------------------------------------------------------------------


def make_tiny_jpeg(size=(10, 10)) -> bytes:
    """Create a minimal JPEG in memory — fast and valid."""
    buf = io.BytesIO()
    Image.new("RGB", size, color=(128, 128, 128)).save(buf, format="JPEG")
    return buf.getvalue()
