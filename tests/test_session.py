import asyncio

import pytest

from engine.candidates import suggest_domains
from engine.errors import InvalidQueryError
from engine.orchestrator import StatusOrchestrator
from engine.session import SearchSession
from engine.status import build_result
from store.cache import ResultCache


class CountingBackend:
    def __init__(self):
        self.searches = []
        self.lookups = []

    async def search(self, query: str):
        self.searches.append(query)
        return suggest_domains(query, ["com"])

    async def check_status(self, domain: str):
        self.lookups.append(domain)
        return build_result(domain, "inactive" if domain.endswith(".net") else "active")


def _session(backend: CountingBackend) -> SearchSession:
    orchestrator = StatusOrchestrator(
        backend.check_status, backend.search, tlds=["com", "net"], delay=0
    )
    return SearchSession(orchestrator, ResultCache(capacity=10, ttl=60))


def test_repeated_search_is_served_from_cache() -> None:
    backend = CountingBackend()
    session = _session(backend)

    first = asyncio.run(session.search("shop"))
    second = asyncio.run(session.search(" shop "))

    assert [r.domain for r in first] == ["shop.com"]
    assert second == first
    assert backend.searches == ["shop"]
    assert backend.lookups == ["shop.com"]
    assert session.cache.stats()["hits"] == 1


def test_expand_twice_is_idempotent() -> None:
    backend = CountingBackend()
    session = _session(backend)

    asyncio.run(session.search("shop"))
    expanded = asyncio.run(session.expand())
    lookups = len(backend.lookups)
    again = asyncio.run(session.expand())

    assert [r.domain for r in expanded] == ["shop.com", "shop.net"]
    assert again == expanded
    assert session.expanded
    assert len(backend.lookups) == lookups


def test_new_search_resets_expansion() -> None:
    session = _session(CountingBackend())

    asyncio.run(session.search("shop"))
    asyncio.run(session.expand())
    asyncio.run(session.search("store"))

    assert session.query == "store"
    assert not session.expanded
    assert [r.domain for r in session.results] == ["store.com"]


def test_expand_without_query_is_rejected() -> None:
    session = _session(CountingBackend())

    with pytest.raises(InvalidQueryError):
        asyncio.run(session.expand())
    with pytest.raises(InvalidQueryError):
        asyncio.run(session.search(""))


def test_clear_keeps_cache() -> None:
    backend = CountingBackend()
    session = _session(backend)

    asyncio.run(session.search("shop"))
    session.clear()
    assert session.results == []

    asyncio.run(session.search("shop"))
    assert backend.searches == ["shop"]
