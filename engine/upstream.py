"""Client for the RapidAPI Domains API (the upstream provider).

Used by the backend proxy and by the CLI's direct mode. The provider has no
search endpoint, so search suggestions are generated locally; status lookups
go to GET /domains/{domain}.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

import aiohttp

from .candidates import suggest_domains
from .config import RAPIDAPI_HOST, SEARCH_TLDS
from .errors import UpstreamError
from .models import DomainResult, DomainSuggestion
from .status import build_result, status_from_availability, zone_of
from .syntax import validate_domain

logger = logging.getLogger("domaincheck.upstream")

# async (method, url, headers, params, timeout) -> (status_code, payload)
RequestFn = Callable[..., Awaitable[tuple[int, Any]]]


async def aiohttp_request(
    method: str,
    url: str,
    *,
    headers: Optional[dict[str, str]] = None,
    params: Optional[dict[str, str]] = None,
    timeout: float = 10.0,
) -> tuple[int, Any]:
    """Perform one HTTP request and return (status, decoded JSON or None).

    Transport failures and timeouts raise UpstreamError with no status code.
    """
    try:
        async with aiohttp.ClientSession() as session:
            async with session.request(
                method,
                url,
                headers=headers,
                params=params,
                timeout=aiohttp.ClientTimeout(total=timeout),
            ) as resp:
                try:
                    payload = await resp.json(content_type=None)
                except ValueError:
                    payload = None
                return resp.status, payload
    except asyncio.TimeoutError:
        raise UpstreamError(f"Request timed out after {timeout:g}s", code="API_TIMEOUT") from None
    except aiohttp.ClientError as e:
        raise UpstreamError(f"Connection error: {e}", code="API_UNREACHABLE") from e


def _payload_message(payload: Any) -> str:
    if isinstance(payload, dict):
        return str(payload.get("message") or payload.get("error") or "")
    return ""


class DomainsApiClient:
    """Minimal async client for domains-api.p.rapidapi.com."""

    def __init__(
        self,
        api_key: str,
        *,
        host: str = RAPIDAPI_HOST,
        timeout_seconds: float = 10.0,
        search_tlds: Optional[list[str]] = None,
        request_fn: Optional[RequestFn] = None,
    ):
        self._base_url = f"https://{host}"
        self._timeout_seconds = timeout_seconds
        self._search_tlds = list(search_tlds or SEARCH_TLDS)
        self._request_fn = request_fn or aiohttp_request
        self._headers = {
            "X-RapidAPI-Key": api_key,
            "X-RapidAPI-Host": host,
        }

    async def _get(self, path: str) -> Any:
        status, payload = await self._request_fn(
            "GET",
            f"{self._base_url}{path}",
            headers=dict(self._headers),
            params=None,
            timeout=self._timeout_seconds,
        )
        if not (200 <= status < 300):
            # Never include headers (api key) in error messages.
            message = _payload_message(payload) or f"HTTP {status}"
            logger.error("Upstream error %s for %s: %s", status, path, message)
            raise UpstreamError(message, status_code=status)
        return payload

    async def search(self, query: str) -> list[DomainSuggestion]:
        """Suggestions for a query (generated locally, no network call)."""
        return suggest_domains(query, self._search_tlds)

    async def check_status(self, domain: str) -> DomainResult:
        """Look up the registration status of one domain."""
        check = validate_domain(domain)
        if not check.is_valid:
            raise UpstreamError(check.reason, status_code=400, code=check.code)
        domain = check.normalized

        payload = await self._get(f"/domains/{domain}")
        if not isinstance(payload, dict):
            raise UpstreamError(f"Malformed response for {domain}", status_code=502, code="API_ERROR")

        availability = payload.get("availability")
        logger.debug("Status for %s: availability=%s", domain, availability)
        return build_result(
            domain,
            status_from_availability(availability),
            zone=str(payload.get("tld") or zone_of(domain)).lstrip("."),
            availability=availability,
        )
