import pytest
from fastapi.testclient import TestClient

import server
from engine.config import Settings
from engine.errors import UpstreamError
from engine.status import build_result


class FakeDomainsApi:
    def __init__(self, error: Exception | None = None):
        self.error = error
        self.calls = []

    async def check_status(self, domain: str):
        self.calls.append(domain)
        if self.error is not None:
            raise self.error
        return build_result(domain, "inactive", availability="available")


def _client(fake: FakeDomainsApi | None = None, **overrides) -> TestClient:
    settings = Settings(environment="test", search_tlds=["com", "net", "io"], **overrides)
    app = server.create_app(settings, client=fake or FakeDomainsApi())
    return TestClient(app)


def test_health() -> None:
    resp = _client().get("/health")

    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "ok"
    assert body["service"] == "domaincheck"
    assert body["environment"] == "test"
    assert body["uptime"] >= 0


def test_search_returns_suggestions() -> None:
    resp = _client().get("/api/search", params={"query": "My Shop"})

    assert resp.status_code == 200
    results = resp.json()["results"]
    assert [r["domain"] for r in results] == ["myshop.com", "myshop.net", "myshop.io"]
    assert results[0] == {"domain": "myshop.com", "zone": "com", "path": "/domains/myshop.com", "subdomain": ""}


def test_search_validation_errors() -> None:
    client = _client()

    resp = client.get("/api/search")
    assert resp.status_code == 400
    assert resp.json()["code"] == "MISSING_QUERY"

    resp = client.get("/api/search", params={"query": "a"})
    assert resp.status_code == 400
    assert resp.json() == {"error": "Query must be at least 2 characters", "code": "QUERY_TOO_SHORT"}


def test_status_is_cached() -> None:
    fake = FakeDomainsApi()
    client = _client(fake)

    first = client.get("/api/status", params={"domain": "Example.com"})
    second = client.get("/api/status", params={"domain": "example.com"})

    assert first.status_code == 200
    assert first.json() == {"status": [{
        "domain": "example.com",
        "zone": "com",
        "status": "inactive",
        "summary": "available",
        "availability": "available",
    }]}
    assert second.json() == first.json()
    assert fake.calls == ["example.com"]

    stats = client.get("/api/cache").json()
    assert stats["hits"] == 1
    assert stats["size"] == 1


def test_status_rejects_invalid_domain() -> None:
    fake = FakeDomainsApi()
    resp = _client(fake).get("/api/status", params={"domain": "not a domain"})

    assert resp.status_code == 400
    assert resp.json()["code"] == "INVALID_DOMAIN"
    assert fake.calls == []


@pytest.mark.parametrize(
    "error, expected_status, expected_code",
    [
        (UpstreamError("bad key", status_code=401), 503, "API_AUTH_ERROR"),
        (UpstreamError("You are not subscribed to this API.", status_code=403), 403, "API_NOT_SUBSCRIBED"),
        (UpstreamError("slow down", status_code=429), 429, "API_RATE_LIMIT"),
        (UpstreamError("Request timed out after 10s"), 504, "API_TIMEOUT"),
        (UpstreamError("boom", status_code=500), 502, "API_ERROR"),
        (RuntimeError("unexpected"), 500, "INTERNAL_ERROR"),
    ],
)
def test_upstream_errors_are_classified(error, expected_status, expected_code) -> None:
    resp = _client(FakeDomainsApi(error)).get("/api/status", params={"domain": "example.com"})

    assert resp.status_code == expected_status
    assert resp.json()["code"] == expected_code


def test_failed_lookups_are_not_cached() -> None:
    fake = FakeDomainsApi(UpstreamError("boom", status_code=500))
    client = _client(fake)

    client.get("/api/status", params={"domain": "example.com"})
    client.get("/api/status", params={"domain": "example.com"})

    assert fake.calls == ["example.com", "example.com"]


def test_unknown_route_shape() -> None:
    resp = _client().get("/nope")

    assert resp.status_code == 404
    assert resp.json() == {"error": "Route not found", "code": "NOT_FOUND", "path": "/nope"}


def test_security_headers_present() -> None:
    resp = _client().get("/health")

    assert resp.headers["X-Content-Type-Options"] == "nosniff"
    assert resp.headers["X-Frame-Options"] == "SAMEORIGIN"


def test_rate_limit_returns_429() -> None:
    client = _client(rate_limit_max=1)

    assert client.get("/api/search", params={"query": "shop"}).status_code == 200
    resp = client.get("/api/search", params={"query": "shop"})
    assert resp.status_code == 429
    assert resp.json()["code"] == "RATE_LIMITED"
    # Health checks are not rate limited.
    assert client.get("/health").status_code == 200


def test_create_app_requires_api_key() -> None:
    with pytest.raises(RuntimeError):
        server.create_app(Settings(rapidapi_key=""))
