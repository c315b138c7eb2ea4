"""Multi-domain status check orchestration.

Two strategies, one per calling context:

- sequential: lookups one at a time in input order with a fixed delay in
  between, to stay under the backend's rate limit. A failed lookup becomes a
  placeholder result carrying the error, so the output is index-aligned
  with the input.
- parallel: every lookup issued at once and settled individually. Failed
  lookups yield nothing and are left out of the output.

Neither strategy lets one failing domain abort the batch. The only error
raised to callers is InvalidQueryError, checked before any lookup starts.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Literal, Optional

from .candidates import build_candidates, dedupe_by_domain, merge_results
from .errors import InvalidQueryError
from .models import DomainResult, DomainSuggestion, LookupOutcome
from .status import placeholder

logger = logging.getLogger("domaincheck.orchestrator")

StatusFn = Callable[[str], Awaitable[DomainResult]]
SearchFn = Callable[[str], Awaitable[list[DomainSuggestion]]]
Strategy = Literal["sequential", "parallel"]

DEFAULT_CHECK_DELAY = 1.2


def _error_message(exc: BaseException) -> str:
    return str(exc) or exc.__class__.__name__


async def settle_all(items: list[str], fn: Callable[[str], Awaitable]) -> list[LookupOutcome]:
    """Run fn over every item concurrently and capture each outcome.

    Never raises for a failing item: the returned list is index-aligned with
    items and every entry is either a value or an error message.
    """
    settled = await asyncio.gather(*(fn(item) for item in items), return_exceptions=True)

    outcomes = []
    for item, value in zip(items, settled):
        if isinstance(value, BaseException):
            if not isinstance(value, Exception):
                raise value  # cancellation and interpreter exits propagate
            logger.warning("Lookup failed for %s: %s", item, value)
            outcomes.append(LookupOutcome(item=item, error=_error_message(value)))
        else:
            outcomes.append(LookupOutcome(item=item, value=value))
    return outcomes


class StatusOrchestrator:
    """Resolve registration status for candidate domains.

    Args:
        status_fn: async callable(domain) -> DomainResult. Raises on failure.
        search_fn: async callable(query) -> list[DomainSuggestion].
        tlds: TLDs used to expand a query into candidates.
        strategy: how search() and expand() check statuses.
        delay: seconds between consecutive sequential lookups.
        sleep: awaitable sleep, replaceable in tests.
    """

    def __init__(
        self,
        status_fn: StatusFn,
        search_fn: Optional[SearchFn] = None,
        *,
        tlds: Optional[list[str]] = None,
        strategy: Strategy = "sequential",
        delay: float = DEFAULT_CHECK_DELAY,
        sleep: Callable[[float], Awaitable] = asyncio.sleep,
    ):
        if strategy not in ("sequential", "parallel"):
            raise ValueError(f"Unknown strategy: {strategy}")
        self._status_fn = status_fn
        self._search_fn = search_fn
        self._tlds = list(tlds or [])
        self._strategy = strategy
        self._delay = delay
        self._sleep = sleep

    @property
    def strategy(self) -> str:
        return self._strategy

    async def check_sequential(
        self,
        domains: list[str],
        progress_callback: Optional[Callable[[DomainResult], None]] = None,
    ) -> list[DomainResult]:
        """Check domains one by one, in order, pausing between lookups.

        Returns one result per input domain, in input order. Failed lookups
        are placeholders with an empty status and the error message.
        """
        results: list[DomainResult] = []
        total = len(domains)

        for index, domain in enumerate(domains):
            try:
                result = await self._status_fn(domain)
            except Exception as e:
                logger.warning("Status check failed for %s: %s", domain, e)
                result = placeholder(domain, _error_message(e))

            results.append(result)
            if progress_callback:
                progress_callback(result)

            if index < total - 1 and self._delay > 0:
                await self._sleep(self._delay)

        return results

    async def check_parallel(
        self,
        domains: list[str],
        progress_callback: Optional[Callable[[DomainResult], None]] = None,
    ) -> list[DomainResult]:
        """Check all domains concurrently; failed lookups are dropped.

        Successful results come back in input order, one per distinct domain.
        """
        outcomes = await settle_all(domains, self._status_fn)
        succeeded = [o.value for o in outcomes if o.ok]
        results = dedupe_by_domain(succeeded)
        if progress_callback:
            for result in results:
                progress_callback(result)
        failed = len(outcomes) - len(succeeded)
        if failed:
            logger.info("Parallel check: %d of %d lookups failed", failed, len(outcomes))
        return results

    async def check(
        self,
        domains: list[str],
        progress_callback: Optional[Callable[[DomainResult], None]] = None,
    ) -> list[DomainResult]:
        """Check domains with the configured strategy."""
        if self._strategy == "parallel":
            return await self.check_parallel(domains, progress_callback)
        return await self.check_sequential(domains, progress_callback)

    async def search_parallel(self, queries: list[str]) -> list[DomainSuggestion]:
        """Run one search per query concurrently and flatten the suggestions.

        Failed searches contribute nothing. Suggestions are de-duplicated by
        domain, first seen wins, in query order.
        """
        if self._search_fn is None:
            raise RuntimeError("No search function configured")

        outcomes = await settle_all(queries, self._search_fn)
        suggestions: list[DomainSuggestion] = []
        for outcome in outcomes:
            if outcome.ok and outcome.value:
                suggestions.extend(outcome.value)
        return dedupe_by_domain(suggestions)

    async def resolve(self, suggestions: list[DomainSuggestion]) -> list[DomainResult]:
        """Attach a status to each suggestion, keeping the suggestion's zone."""
        if not suggestions:
            return []

        by_domain = {s.domain: s for s in suggestions}
        checked = await self.check([s.domain for s in suggestions])

        combined = []
        for result in checked:
            suggestion = by_domain.get(result.domain)
            if suggestion is not None and suggestion.zone:
                result = result.model_copy(update={"zone": suggestion.zone})
            combined.append(result)
        return combined

    async def search(self, query: str) -> list[DomainResult]:
        """Search one query and check the status of every suggestion.

        Raises InvalidQueryError for an empty query. A failing search is
        not an item failure and propagates to the caller.
        """
        query = (query or "").strip()
        if not query:
            raise InvalidQueryError("Query is empty")
        if self._search_fn is None:
            raise RuntimeError("No search function configured")

        suggestions = dedupe_by_domain(await self._search_fn(query))
        logger.debug("Search %r returned %d suggestions", query, len(suggestions))
        return await self.resolve(suggestions)

    async def expand(
        self,
        query: str,
        existing: Optional[list[DomainResult]] = None,
    ) -> list[DomainResult]:
        """Expand a query across the TLD list and merge into existing results.

        Candidates are searched in parallel (failed searches dropped), their
        suggestions de-duplicated and checked, and new domains appended after
        the existing results.
        """
        existing = list(existing or [])
        candidates = build_candidates(query, self._tlds)

        suggestions = await self.search_parallel(candidates)
        known = {r.domain for r in existing}
        fresh = [s for s in suggestions if s.domain not in known]
        logger.info(
            "Expanding %r: %d candidates, %d suggestions, %d new",
            query, len(candidates), len(suggestions), len(fresh),
        )

        new_results = await self.resolve(fresh)
        return merge_results(existing, new_results)
