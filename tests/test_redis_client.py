"""Unit tests for clipguard/integrations/redis_client.py. The Upstash client class is patched."""

from unittest.mock import patch

from clipguard.integrations import redis_client as rc


def _clear_env(monkeypatch):
    for name in ("UPSTASH_REDIS_REST_URL", "UPSTASH_REDIS_REST_TOKEN", "UPSTASH_REDIS_HOST", "UPSTASH_REDIS_PASSWORD"):
        monkeypatch.delenv(name, raising=False)


def test_keys_are_namespaced():
    assert rc.namespaced("moderate_rate:1.2.3.4") == "clipguard:moderate_rate:1.2.3.4"


def test_initialize_without_credentials(monkeypatch):
    _clear_env(monkeypatch)
    monkeypatch.setattr(rc, "client", None)
    with patch("clipguard.integrations.redis_client.Redis") as mock_redis:
        rc.initialize()
    mock_redis.assert_not_called()
    assert rc.client is None


def test_initialize_prefers_rest_credentials(monkeypatch):
    _clear_env(monkeypatch)
    monkeypatch.setattr(rc, "client", None)
    monkeypatch.setenv("UPSTASH_REDIS_REST_URL", "https://eu1.upstash.io")
    monkeypatch.setenv("UPSTASH_REDIS_REST_TOKEN", "tok")
    monkeypatch.setenv("UPSTASH_REDIS_HOST", "https://legacy.upstash.io")
    with patch("clipguard.integrations.redis_client.Redis") as mock_redis:
        rc.initialize()
    mock_redis.assert_called_once_with(url="https://eu1.upstash.io", token="tok")
    assert rc.client is mock_redis.return_value


def test_initialize_failure_leaves_client_unset(monkeypatch):
    _clear_env(monkeypatch)
    monkeypatch.setattr(rc, "client", None)
    monkeypatch.setenv("UPSTASH_REDIS_HOST", "https://legacy.upstash.io")
    monkeypatch.setenv("UPSTASH_REDIS_PASSWORD", "pw")
    with patch("clipguard.integrations.redis_client.Redis", side_effect=ValueError("bad url")):
        rc.initialize()
    assert rc.client is None
