from __future__ import annotations

import pytest
from redis.exceptions import RedisError

from medfinder import dependencies
from tests.utils.auth import anon_headers

URL = "/v1/pharmacies/search"


def test_rate_limit_ip(client, monkeypatch):
    monkeypatch.setattr(dependencies.settings, "rate_limit_ip_per_min", 30)
    for _ in range(30):
        # fresh session each time so only the IP counter grows
        headers = anon_headers() | {"X-Forwarded-For": "1.1.1.1"}
        assert client.get(URL, headers=headers).status_code == 200
    resp = client.get(URL, headers=anon_headers() | {"X-Forwarded-For": "1.1.1.1"})
    assert resp.status_code == 429
    assert resp.json() == {"code": "TOO_MANY_REQUESTS", "message": "Rate limit exceeded"}


def test_rate_limit_identity(client, monkeypatch):
    monkeypatch.setattr(dependencies.settings, "rate_limit_identity_per_min", 40)
    headers = anon_headers()
    for i in range(40):
        headers["X-Forwarded-For"] = f"10.0.0.{i // 10}"
        assert client.get(URL, headers=headers).status_code == 200
    headers["X-Forwarded-For"] = "10.0.0.9"
    assert client.get(URL, headers=headers).status_code == 429


def test_rate_limit_redis_unavailable(client, monkeypatch):
    class _RedisFail:
        def pipeline(self):
            raise RedisError

    monkeypatch.setattr(dependencies, "redis_client", _RedisFail())
    resp = client.get(URL, headers=anon_headers())
    assert resp.status_code == 503
    assert resp.json()["code"] == "SERVICE_UNAVAILABLE"


def test_rate_limit_untrusted_proxy(client, monkeypatch):
    monkeypatch.setattr(dependencies.settings, "trusted_proxies", ["127.0.0.1"])
    monkeypatch.setattr(dependencies.settings, "rate_limit_ip_per_min", 20)
    for i in range(20):
        headers = anon_headers() | {"X-Forwarded-For": f"1.1.1.{i}"}
        assert client.get(URL, headers=headers).status_code == 200
    headers = anon_headers() | {"X-Forwarded-For": "1.1.1.30"}
    assert client.get(URL, headers=headers).status_code == 429


@pytest.mark.parametrize("xff", ["", "   "])
def test_rate_limit_empty_x_forwarded_for(client, monkeypatch, xff):
    monkeypatch.setattr(dependencies.settings, "rate_limit_ip_per_min", 10)
    for _ in range(10):
        headers = anon_headers() | {"X-Forwarded-For": xff}
        assert client.get(URL, headers=headers).status_code == 200
    resp = client.get(URL, headers=anon_headers() | {"X-Forwarded-For": xff})
    assert resp.status_code == 429


def test_detail_endpoints_are_not_throttled(client, monkeypatch):
    monkeypatch.setattr(dependencies.settings, "rate_limit_ip_per_min", 1)
    for _ in range(3):
        assert client.get("/v1/pharmacies/missing").status_code == 404
