"""
Tests for POST /moderate and POST /moderate/quick.

The pipeline is an AsyncMock for upload tests; upload decoding (OpenCV) is
patched out. Rate limiting runs for real against MockRedis.
"""

import os
from contextlib import ExitStack
from unittest.mock import AsyncMock, MagicMock, PropertyMock, patch

from clipguard.core.dependencies import ModerationGate, security_manager
from clipguard.moderation.decision import fail_safe_result, fuse
from clipguard.schemas.moderation import ModerationDetails

VIDEO = ("clip.mp4", b"\x00\x00\x00\x18ftypmp42fake-video-bytes", "video/mp4")


def _patches(result=None):
    """Return an ExitStack with the pipeline and decode check patched."""
    if result is None:
        result = fuse([], ModerationDetails(), 7)
    stack = ExitStack()
    mock_moderate = stack.enter_context(
        patch("clipguard.api.moderation.moderate", new_callable=AsyncMock, return_value=result)
    )
    capture = MagicMock()
    capture.isOpened.return_value = True
    capture.read.return_value = (True, None)
    stack.enter_context(patch("clipguard.core.file_validator.cv2.VideoCapture", return_value=capture))
    return stack, mock_moderate


# ---------------------------------------------------------------------------
# POST /moderate
# ---------------------------------------------------------------------------


def test_moderate_returns_verdict(client):
    stack, mock_moderate = _patches()
    with stack:
        response = client.post(
            "/moderate",
            files={"file": VIDEO},
            data={"title": "Piano", "description": "Calm", "tags": "piano, calm,, ", "category": "music"},
        )

    assert response.status_code == 200
    body = response.json()
    assert body["approved"] is True
    assert body["categories"] == ["safe"]
    assert body["confidence"] == 0.95

    request = mock_moderate.call_args.args[0]
    assert request.title == "Piano"
    assert request.tags == ("piano", "calm")
    assert request.category == "music"
    assert request.media_path.endswith(".mp4")
    assert not os.path.exists(request.media_path)


def test_moderate_failed_analysis_is_200_rejection(client):
    stack, _ = _patches(result=fail_safe_result("boom", 3))
    with stack:
        response = client.post("/moderate", files={"file": VIDEO}, data={"title": "x"})

    assert response.status_code == 200
    body = response.json()
    assert body["approved"] is False
    assert body["categories"] == ["questionable"]


def test_moderate_unsupported_format(client):
    stack, mock_moderate = _patches()
    with stack:
        response = client.post(
            "/moderate",
            files={"file": ("notes.txt", b"hello", "text/plain")},
            data={"title": "x"},
        )
    assert response.status_code == 415
    mock_moderate.assert_not_called()


def test_moderate_too_large(client, monkeypatch):
    from clipguard.config import settings

    monkeypatch.setattr(settings, "max_video_upload_mb", 0)
    stack, _ = _patches()
    with stack:
        response = client.post("/moderate", files={"file": VIDEO}, data={"title": "x"})
    assert response.status_code == 413


def test_moderate_empty_upload(client):
    stack, _ = _patches()
    with stack:
        response = client.post(
            "/moderate", files={"file": ("clip.mp4", b"", "video/mp4")}, data={"title": "x"}
        )
    assert response.status_code == 400


def test_moderate_missing_title(client):
    stack, _ = _patches()
    with stack:
        response = client.post("/moderate", files={"file": VIDEO})
    assert response.status_code == 422


def test_moderate_rejects_when_saturated(client):
    stack, mock_moderate = _patches()
    with stack, patch.object(ModerationGate, "saturated", new_callable=PropertyMock, return_value=True):
        response = client.post("/moderate", files={"file": VIDEO}, data={"title": "x"})

    assert response.status_code == 503
    assert response.headers["retry-after"] == "5"
    mock_moderate.assert_not_called()


def test_moderate_rate_limited(client):
    from clipguard.config import settings

    stack, _ = _patches()
    with stack:
        for _ in range(settings.rate_limit_max_requests):
            assert client.post("/moderate", files={"file": VIDEO}, data={"title": "x"}).status_code == 200
        response = client.post("/moderate", files={"file": VIDEO}, data={"title": "x"})

    assert response.status_code == 429


# ---------------------------------------------------------------------------
# POST /moderate/quick
# ---------------------------------------------------------------------------


def test_quick_check_clean(client):
    response = client.post("/moderate/quick", json={"title": "Relaxing piano music"})
    assert response.status_code == 200
    assert response.json() == {"approved": True, "reason": None}


def test_quick_check_toxic(client):
    response = client.post(
        "/moderate/quick", json={"title": "kill murder", "description": "shoot stab", "tags": []}
    )
    assert response.status_code == 200
    body = response.json()
    assert body["approved"] is False
    assert body["reason"].startswith("High toxicity detected")


def test_quick_check_uses_rate_limit(client):
    with patch.object(security_manager, "check_rate_limit") as mock_limit:
        client.post("/moderate/quick", json={"title": "hi"}, headers={"X-Forwarded-For": "203.0.113.9, 10.0.0.1"})
    mock_limit.assert_called_once_with("203.0.113.9")


# ---------------------------------------------------------------------------
# get_client_ip
# ---------------------------------------------------------------------------


def test_cloudflare_header_wins(client):
    with patch.object(security_manager, "check_rate_limit") as mock_limit:
        client.post(
            "/moderate/quick",
            json={"title": "hi"},
            headers={"CF-Connecting-IP": "198.51.100.7", "X-Forwarded-For": "203.0.113.9"},
        )
    mock_limit.assert_called_once_with("198.51.100.7")
