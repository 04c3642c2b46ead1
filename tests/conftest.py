"""
Shared pytest fixtures for all test modules.

Provider credentials are cleared before the app is imported, and the Gemini
and Redis initializers are patched so no test ever opens a real connection.
"""

import io
import os

# Keep provider selection deterministic: no credentials means the heuristic
# visual strategy and no transcription.
os.environ.pop("GEMINI_API_KEY", None)
os.environ.pop("TRANSCRIPTION_API_URL", None)

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from tests.mocks.redis_mock import MockRedis

# App import happens AFTER the environment is prepared above.
from clipguard.main import app  # noqa: E402
from clipguard.schemas.moderation import ModerationRequest  # noqa: E402


# ---------------------------------------------------------------------------
# Core infrastructure fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_redis(monkeypatch):
    """Replace redis_client.client with an in-memory MockRedis."""
    from clipguard.integrations import redis_client as rc

    mock_rc = MockRedis()
    monkeypatch.setattr(rc, "client", mock_rc)
    return mock_rc


@pytest.fixture
def client(mock_redis):
    """
    FastAPI TestClient with mocked Redis and no Gemini credentials.

    initialize() calls are patched to no-ops so they can't overwrite our mocks
    or attempt real network connections during the lifespan startup.
    """
    with (
        patch("clipguard.integrations.gemini.client.initialize"),
        patch("clipguard.integrations.redis_client.initialize"),
    ):
        with TestClient(app, raise_server_exceptions=False) as c:
            yield c


@pytest.fixture
def scratch_root(tmp_path, monkeypatch):
    """Point per-run scratch directories at a temp root the test can inspect."""
    from clipguard.config import settings

    root = tmp_path / "scratch"
    root.mkdir()
    monkeypatch.setattr(settings, "scratch_dir", str(root))
    return root


# ---------------------------------------------------------------------------
# Shared test-data helpers
# ---------------------------------------------------------------------------


def make_tiny_jpeg() -> bytes:
    """Create a minimal 10×10 JPEG in memory."""
    buf = io.BytesIO()
    Image.new("RGB", (10, 10), color=(128, 128, 128)).save(buf, format="JPEG")
    return buf.getvalue()


def write_frames(directory, count: int) -> list:
    """Write `count` tiny JPEG frames named like ffmpeg output and return their paths."""
    os.makedirs(directory, exist_ok=True)
    paths = []
    for i in range(1, count + 1):
        p = os.path.join(directory, f"frame_{i:03d}.jpg")
        with open(p, "wb") as f:
            f.write(make_tiny_jpeg())
        paths.append(p)
    return paths


@pytest.fixture
def tiny_jpg(tmp_path) -> str:
    """Write a tiny JPEG to a temp file and return the path."""
    p = tmp_path / "test.jpg"
    p.write_bytes(make_tiny_jpeg())
    return str(p)


@pytest.fixture
def clean_request(tmp_path) -> ModerationRequest:
    video = tmp_path / "piano.mp4"
    video.write_bytes(b"not-really-a-video")
    return ModerationRequest(
        media_path=str(video),
        title="Relaxing piano music",
        description="Calm evening playlist",
        tags=("piano", "calm"),
    )
