"""Error taxonomy and upstream error classification.

Lookup failures are per-item: the orchestrator only needs to know that a
lookup failed. The HTTP-facing layers additionally classify upstream
rejections into a small fixed set of codes (server side) and user-facing
messages (client side).
"""

from typing import Any, Optional

from .config import SUBSCRIPTION_URL


class LookupFailed(Exception):
    """A single search or status lookup failed."""


class UpstreamError(LookupFailed):
    """The upstream rejected a request, or no response reached us.

    status_code is None when the request never got an HTTP response
    (connection error or timeout).
    """

    def __init__(self, message: str, status_code: Optional[int] = None, code: str = ""):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code


class InvalidQueryError(ValueError):
    """Input is unusable (empty query, empty candidate list)."""


class ApiError(Exception):
    """Error returned to HTTP clients as {"error": ..., "code": ...}."""

    def __init__(self, status_code: int, error: str, code: str, extra: Optional[dict[str, Any]] = None):
        super().__init__(error)
        self.status_code = status_code
        self.error = error
        self.code = code
        self.extra = extra or {}

    def to_body(self) -> dict:
        body = {"error": self.error, "code": self.code}
        body.update(self.extra)
        return body


def classify_upstream_error(exc: Exception) -> ApiError:
    """Map an upstream failure to the error the backend proxy returns.

    - 401 -> 503 API_AUTH_ERROR
    - 403 "not subscribed" -> 403 API_NOT_SUBSCRIBED
    - other 403 -> 503 API_FORBIDDEN
    - 429 -> 429 API_RATE_LIMIT
    - 404 -> 404 NOT_FOUND
    - other HTTP status -> 502 API_ERROR
    - no response -> 504 API_TIMEOUT
    - anything else -> 500 INTERNAL_ERROR
    """
    if not isinstance(exc, UpstreamError):
        return ApiError(500, "Internal server error", "INTERNAL_ERROR")

    status = exc.status_code
    if status is None:
        return ApiError(504, "External service timeout", "API_TIMEOUT")
    if status == 401:
        return ApiError(503, "API authentication failed. Please check your API key.", "API_AUTH_ERROR")
    if status == 403:
        if "not subscribed" in (exc.message or "").lower():
            return ApiError(
                403,
                "You are not subscribed to this API. Subscribe to a plan "
                f"(free options are available) at {SUBSCRIPTION_URL}",
                "API_NOT_SUBSCRIBED",
                {"subscriptionUrl": SUBSCRIPTION_URL},
            )
        return ApiError(503, "Access forbidden. Please check your API credentials.", "API_FORBIDDEN")
    if status == 429:
        return ApiError(429, "Too many requests to external service", "API_RATE_LIMIT")
    if status == 404:
        return ApiError(404, "Resource not found", "NOT_FOUND")
    return ApiError(502, "External service error", "API_ERROR")


def user_message(status_code: Optional[int], body: Optional[dict] = None) -> str:
    """User-facing message for a failed call to the backend proxy."""
    body = body if isinstance(body, dict) else {}
    server_message = body.get("error")

    if status_code is None:
        return "Could not connect to the server. Check your connection."
    if status_code == 400:
        return server_message or "Invalid request"
    if status_code == 403:
        if body.get("code") == "API_NOT_SUBSCRIBED":
            return server_message or "You are not subscribed to the domains API."
        return server_message or "Access denied"
    if status_code == 429:
        return "Too many requests. Please wait a moment."
    if status_code in (500, 502, 503, 504):
        return "Server error. Please try again."
    return server_message or "Unknown error"
