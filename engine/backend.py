"""Client for the Domain Checker backend proxy (server.py).

Used by the CLI in its default mode. Every failed call raises
UpstreamError with a user-facing message derived from the proxy's status
code and error body.
"""

import logging
from typing import Any, Optional

from .errors import LookupFailed, UpstreamError, user_message
from .models import DomainResult, DomainSuggestion
from .status import build_result
from .upstream import RequestFn, aiohttp_request

logger = logging.getLogger("domaincheck.backend")

SEARCH_PATH = "/api/search"
STATUS_PATH = "/api/status"
HEALTH_PATH = "/health"


class BackendClient:
    """Async client for the proxy's /api/search, /api/status and /health."""

    def __init__(
        self,
        base_url: str = "http://localhost:5000",
        *,
        timeout_seconds: float = 10.0,
        request_fn: Optional[RequestFn] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._timeout_seconds = timeout_seconds
        self._request_fn = request_fn or aiohttp_request

    async def _get(self, path: str, params: Optional[dict[str, str]] = None) -> Any:
        try:
            status, payload = await self._request_fn(
                "GET",
                f"{self._base_url}{path}",
                headers={"Content-Type": "application/json"},
                params=params,
                timeout=self._timeout_seconds,
            )
        except UpstreamError as e:
            logger.error("No response from backend for %s: %s", path, e)
            raise UpstreamError(user_message(None), code=e.code or "NETWORK_ERROR") from e

        if not (200 <= status < 300):
            body = payload if isinstance(payload, dict) else {}
            logger.error("Backend returned %s for %s: %s", status, path, body.get("error", ""))
            raise UpstreamError(user_message(status, body), status_code=status, code=body.get("code", ""))
        return payload

    async def search(self, query: str) -> list[DomainSuggestion]:
        payload = await self._get(SEARCH_PATH, {"query": query})
        records = payload.get("results") if isinstance(payload, dict) else None
        return [DomainSuggestion(**record) for record in (records or []) if record.get("domain")]

    async def check_status(self, domain: str) -> DomainResult:
        """Status of one domain. An empty status list counts as a failed lookup."""
        payload = await self._get(STATUS_PATH, {"domain": domain})
        records = payload.get("status") if isinstance(payload, dict) else None
        if not records:
            raise LookupFailed(f"No status returned for {domain}")

        record = records[0]
        return build_result(
            record.get("domain") or domain,
            record.get("status"),
            zone=record.get("zone") or "",
            availability=record.get("availability"),
        )

    async def health(self) -> dict:
        return await self._get(HEALTH_PATH)
