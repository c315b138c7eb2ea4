import asyncio
from types import SimpleNamespace

import pytest
from starlette.requests import Request

import server
from engine.errors import ApiError


def _request_for_ip(ip: str, limiter: server.RateLimiter) -> Request:
    scope = {
        "type": "http",
        "http_version": "1.1",
        "method": "GET",
        "path": "/api/search",
        "raw_path": b"/api/search",
        "query_string": b"",
        "headers": [],
        "client": (ip, 12345),
        "server": ("testserver", 80),
        "scheme": "http",
        "app": SimpleNamespace(state=SimpleNamespace(rate_limiter=limiter)),
    }
    return Request(scope)


def test_expired_buckets_are_dropped_on_next_request(monkeypatch) -> None:
    now = 1_700_000_000.0
    limiter = server.RateLimiter(window_seconds=60, max_requests=5)
    limiter._store["10.0.0.7"] = [now - 61]
    limiter._store["10.0.0.8"] = [now - 3600, now - 120]
    limiter._store["10.0.0.9"] = [now - 30]

    monkeypatch.setattr("time.time", lambda: now)

    asyncio.run(server.check_rate_limit(_request_for_ip("192.168.1.50", limiter)))

    assert "10.0.0.7" not in limiter
    assert "10.0.0.8" not in limiter
    assert "10.0.0.9" in limiter
    assert "192.168.1.50" in limiter


def test_rate_limit_budget_is_per_ip(monkeypatch) -> None:
    now = 2_000_000.0
    monkeypatch.setattr("time.time", lambda: now)
    limiter = server.RateLimiter(window_seconds=900, max_requests=1)

    asyncio.run(server.check_rate_limit(_request_for_ip("203.0.113.20", limiter)))
    # Same budget size, different IP: still allowed.
    asyncio.run(server.check_rate_limit(_request_for_ip("203.0.113.21", limiter)))

    with pytest.raises(ApiError) as excinfo:
        asyncio.run(server.check_rate_limit(_request_for_ip("203.0.113.20", limiter)))
    assert excinfo.value.status_code == 429
    assert excinfo.value.code == "RATE_LIMITED"


def test_window_slides() -> None:
    limiter = server.RateLimiter(window_seconds=60, max_requests=2)

    assert limiter.allow("ip", now=0)
    assert limiter.allow("ip", now=30)
    assert not limiter.allow("ip", now=59)
    assert limiter.allow("ip", now=61)
