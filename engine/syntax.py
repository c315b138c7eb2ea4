"""Input sanitization and syntax validation for queries and domain names."""

import re

from .models import SyntaxResult

MIN_QUERY_LENGTH = 2
MAX_QUERY_LENGTH = 100

# Hostname: dot-separated labels of alphanumerics and hyphens,
# no leading/trailing hyphen, at most 63 characters per label
_DOMAIN_RE = re.compile(
    r"^[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*$"
)

_ANGLE_BRACKETS_RE = re.compile(r"[<>]")


def sanitize_input(value) -> str:
    """Trim a raw parameter and strip angle brackets. Non-strings become ""."""
    if not isinstance(value, str):
        return ""
    return _ANGLE_BRACKETS_RE.sub("", value.strip())


def validate_query(raw) -> SyntaxResult:
    """Validate a free-text search query.

    Checks, on the sanitized value:
    - Present and non-empty
    - At least MIN_QUERY_LENGTH characters
    - Less than MAX_QUERY_LENGTH characters
    """
    query = sanitize_input(raw)

    if not query:
        return SyntaxResult(is_valid=False, code="MISSING_QUERY", reason="Query parameter is required")
    if len(query) < MIN_QUERY_LENGTH:
        return SyntaxResult(
            is_valid=False,
            code="QUERY_TOO_SHORT",
            reason=f"Query must be at least {MIN_QUERY_LENGTH} characters",
        )
    if len(query) > MAX_QUERY_LENGTH:
        return SyntaxResult(
            is_valid=False,
            code="QUERY_TOO_LONG",
            reason=f"Query must be less than {MAX_QUERY_LENGTH} characters",
        )

    return SyntaxResult(is_valid=True, normalized=query)


def validate_domain(raw) -> SyntaxResult:
    """Validate a fully-qualified domain name (labels may include subdomains)."""
    domain = sanitize_input(raw)

    if not domain:
        return SyntaxResult(is_valid=False, code="MISSING_DOMAIN", reason="Domain parameter is required")
    if len(domain) > 253 or not _DOMAIN_RE.match(domain):
        return SyntaxResult(is_valid=False, code="INVALID_DOMAIN", reason="Invalid domain format")

    return SyntaxResult(is_valid=True, normalized=domain.lower())


def is_valid_domain(raw) -> bool:
    return validate_domain(raw).is_valid
