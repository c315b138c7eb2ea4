"""Candidate generation: query x TLD list.

build_candidates() feeds the expand flow on the client side;
suggest_domains() is what the backend proxy returns for /api/search, since
the upstream has no search endpoint of its own.
"""

import re

from .errors import InvalidQueryError
from .models import DomainResult, DomainSuggestion

_WHITESPACE_RE = re.compile(r"\s+")


def normalize_query(query: str) -> str:
    """Trim a free-text query and drop all internal whitespace."""
    return _WHITESPACE_RE.sub("", query or "")


def build_candidates(query: str, tlds: list[str]) -> list[str]:
    """One candidate per TLD, in configured order, then the bare base query.

    >>> build_candidates("my site", ["com", "net"])
    ['mysite.com', 'mysite.net', 'mysite']
    """
    base = normalize_query(query)
    if not base:
        raise InvalidQueryError("Query is empty")
    if not tlds:
        raise InvalidQueryError("TLD list is empty")
    return [f"{base}.{tld}" for tld in tlds] + [base]


def suggest_domains(query: str, tlds: list[str]) -> list[DomainSuggestion]:
    """Domain suggestions for a search query, one per TLD.

    A dotted query ("example.com") is itself the first suggestion and its
    first label is used for the TLD variants.
    """
    base = normalize_query(query).lower()
    if not base:
        raise InvalidQueryError("Query is empty")

    suggestions: list[DomainSuggestion] = []
    seen: set[str] = set()

    def _add(domain: str) -> None:
        if domain in seen:
            return
        seen.add(domain)
        suggestions.append(
            DomainSuggestion(
                domain=domain,
                path=f"/domains/{domain}",
                subdomain="",
                zone=domain.rsplit(".", 1)[-1],
            )
        )

    label = base
    if "." in base:
        _add(base)
        label = base.split(".", 1)[0]

    for tld in tlds:
        _add(f"{label}.{tld}")

    return suggestions


def merge_results(existing: list[DomainResult], incoming: list[DomainResult]) -> list[DomainResult]:
    """Append incoming results whose domain is not already present.

    The existing list is kept as the prefix, in its order. Incoming items are
    appended in batch order; duplicates (against existing or earlier incoming
    items) are dropped, first seen wins.
    """
    seen = {r.domain for r in existing}
    merged = list(existing)
    for result in incoming:
        if result.domain in seen:
            continue
        seen.add(result.domain)
        merged.append(result)
    return merged


def dedupe_by_domain(items: list) -> list:
    """Drop records whose .domain was already seen, keeping first occurrences."""
    seen: set[str] = set()
    unique = []
    for item in items:
        if item.domain in seen:
            continue
        seen.add(item.domain)
        unique.append(item)
    return unique
