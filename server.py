"""Domain Checker HTTP API: a thin proxy in front of the RapidAPI Domains API.

Endpoints:
  GET  /health                    Health check
  GET  /api/search?query=...      Domain suggestions for a query
  GET  /api/status?domain=...     Registration status of one domain
  GET  /api/cache                 Status cache statistics

/api routes are rate limited per client IP. Status lookups are memoized in
an in-memory LRU cache owned by the app.

Run with:  domaincheck serve   (or: uvicorn server:create_app --factory)
"""

import logging
import time
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from engine.candidates import suggest_domains
from engine.config import Settings
from engine.errors import ApiError, classify_upstream_error
from engine.syntax import validate_domain, validate_query
from engine.upstream import DomainsApiClient
from store.cache import MISS, ResultCache

logger = logging.getLogger("domaincheck.server")

SERVICE_NAME = "domaincheck"
VERSION = "0.1.0"

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Resource-Policy": "same-origin",
}


# --- Rate limiting ---

class RateLimiter:
    """Sliding-window request limiter keyed by client identity (IP)."""

    def __init__(self, window_seconds: int, max_requests: int):
        self.window_seconds = window_seconds
        self.max_requests = max_requests
        self._store: dict[str, list[float]] = {}

    def _prune(self, now: float) -> None:
        """Remove stale timestamps and drop empty identity buckets."""
        stale: list[str] = []
        for identity, timestamps in self._store.items():
            fresh = [t for t in timestamps if now - t < self.window_seconds]
            if fresh:
                self._store[identity] = fresh
            else:
                stale.append(identity)
        for identity in stale:
            self._store.pop(identity, None)

    def allow(self, identity: str, now: Optional[float] = None) -> bool:
        now = time.time() if now is None else now
        self._prune(now)
        bucket = self._store.setdefault(identity, [])
        if len(bucket) >= self.max_requests:
            return False
        bucket.append(now)
        return True

    def clear(self) -> None:
        self._store.clear()

    def __contains__(self, identity: str) -> bool:
        return identity in self._store


def _client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


async def check_rate_limit(request: Request):
    """Reject the request with 429 when the caller's IP is over budget."""
    limiter: RateLimiter = request.app.state.rate_limiter
    ip = _client_ip(request)
    if not limiter.allow(ip):
        logger.warning("Rate limit exceeded for IP: %s", ip)
        raise ApiError(429, "Too many requests from this IP, please try again later.", "RATE_LIMITED")


# --- Endpoints ---

router = APIRouter(prefix="/api", dependencies=[Depends(check_rate_limit)])


@router.get("/search")
async def search(request: Request, query: Optional[str] = None):
    """Domain suggestions for a query, one per configured search TLD."""
    check = validate_query(query)
    if not check.is_valid:
        raise ApiError(400, check.reason, check.code)

    settings: Settings = request.app.state.settings
    suggestions = suggest_domains(check.normalized, settings.search_tlds)
    logger.debug("Generated %d suggestions for query: %s", len(suggestions), check.normalized)
    return {"results": [s.model_dump() for s in suggestions]}


@router.get("/status")
async def status(request: Request, domain: Optional[str] = None):
    """Registration status of one domain, in a one-element status list."""
    check = validate_domain(domain)
    if not check.is_valid:
        raise ApiError(400, check.reason, check.code)
    domain = check.normalized

    cache: ResultCache = request.app.state.cache
    key = cache.generate_key("status", {"domain": domain})
    cached = cache.get(key)
    if cached is not MISS:
        logger.debug("Status cache hit for %s", domain)
        return {"status": [cached]}

    client: DomainsApiClient = request.app.state.client
    try:
        result = await client.check_status(domain)
    except Exception as e:
        error = classify_upstream_error(e)
        logger.error("Status check failed for %s: %s (%s)", domain, e, error.code)
        raise error from e

    record = result.to_status_record()
    cache.set(key, record)
    return {"status": [record]}


@router.get("/cache")
async def cache_stats(request: Request):
    """Status cache statistics."""
    return request.app.state.cache.stats()


# --- App factory ---

def create_app(
    settings: Optional[Settings] = None,
    *,
    client: Optional[DomainsApiClient] = None,
    cache: Optional[ResultCache] = None,
) -> FastAPI:
    """Build the API. Collaborators not passed in are built from settings.

    Raises RuntimeError when no upstream client is given and no RapidAPI
    key is configured.
    """
    settings = settings or Settings.from_env()

    if client is None:
        if not settings.rapidapi_key:
            raise RuntimeError(
                "RAPIDAPI_KEY is not defined. Create a .env file with your RapidAPI key."
            )
        client = DomainsApiClient(
            settings.rapidapi_key,
            host=settings.rapidapi_host,
            timeout_seconds=settings.api_timeout,
            search_tlds=settings.search_tlds,
        )

    app = FastAPI(
        title="Domain Checker",
        description="Domain availability lookup proxy",
        version=VERSION,
    )
    app.state.settings = settings
    app.state.client = client
    if cache is None:
        cache = ResultCache(
            capacity=settings.cache_max_size,
            ttl=settings.cache_ttl,
            enabled=settings.cache_enabled,
        )
    app.state.cache = cache
    app.state.rate_limiter = RateLimiter(settings.rate_limit_window, settings.rate_limit_max)
    app.state.started_at = time.monotonic()

    if settings.is_dev:
        app.add_middleware(
            CORSMiddleware,
            allow_origin_regex=".*",
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
    else:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.client_urls,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.middleware("http")
    async def request_logging_middleware(request: Request, call_next):
        logger.info(
            "%s %s ip=%s query=%s",
            request.method, request.url.path, _client_ip(request), dict(request.query_params),
        )
        response = await call_next(request)
        for header, value in SECURITY_HEADERS.items():
            response.headers.setdefault(header, value)
        return response

    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_body())

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            return JSONResponse(
                status_code=404,
                content={"error": "Route not found", "code": "NOT_FOUND", "path": request.url.path},
            )
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail), "code": "HTTP_ERROR"},
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s", request.url.path)
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error", "code": "INTERNAL_ERROR"},
        )

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {
            "status": "ok",
            "service": SERVICE_NAME,
            "version": VERSION,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "uptime": round(time.monotonic() - app.state.started_at, 3),
            "environment": settings.environment,
        }

    app.include_router(router)
    logger.info("App created (environment=%s, cache=%s)", settings.environment, app.state.cache)
    return app
