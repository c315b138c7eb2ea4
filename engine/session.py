"""Presentation-side search session.

Holds what one user is looking at (current query, results, whether the
results were expanded) and memoizes searches in an injected cache.
"""

import logging
from typing import Optional

from store.cache import MISS, ResultCache

from .candidates import merge_results
from .errors import InvalidQueryError
from .models import DomainResult
from .orchestrator import StatusOrchestrator

logger = logging.getLogger("domaincheck.session")


class SearchSession:
    def __init__(self, orchestrator: StatusOrchestrator, cache: ResultCache):
        self._orchestrator = orchestrator
        self._cache = cache
        self.query: str = ""
        self.results: list[DomainResult] = []
        self.expanded: bool = False

    @property
    def cache(self) -> ResultCache:
        return self._cache

    def _key(self, query: str, expanded: bool = False) -> str:
        params = {"query": query}
        if expanded:
            params["expanded"] = "1"
        return self._cache.generate_key("search", params)

    async def search(self, query: str) -> list[DomainResult]:
        """Search a query, serving repeated queries from the cache."""
        query = (query or "").strip()
        if not query:
            raise InvalidQueryError("Query is empty")

        self.query = query
        self.expanded = False

        key = self._key(query)
        cached = self._cache.get(key)
        if cached is not MISS:
            logger.debug("Cache hit for %s", key)
            self.results = list(cached)
            return self.results

        self.results = []
        results = await self._orchestrator.search(query)
        self._cache.set(key, list(results))
        self.results = results
        return self.results

    async def expand(self, query: Optional[str] = None) -> list[DomainResult]:
        """Expand the current query across the TLD list and merge.

        Existing results stay as the prefix; only new domains are appended.
        """
        query = (query or self.query or "").strip()
        if not query:
            raise InvalidQueryError("Nothing to expand: search first")

        if query != self.query:
            self.query = query
            self.results = []

        key = self._key(query, expanded=True)
        cached = self._cache.get(key)
        if cached is not MISS:
            logger.debug("Cache hit for %s", key)
            self.results = merge_results(self.results, cached)
        else:
            self.results = await self._orchestrator.expand(query, existing=self.results)
            self._cache.set(key, list(self.results))

        self.expanded = True
        return self.results

    def clear(self) -> None:
        self.query = ""
        self.results = []
        self.expanded = False
