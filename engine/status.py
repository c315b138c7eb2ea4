"""Raw upstream status classification.

The upstream reports a raw status code per domain. Only one raw value means
the name can be registered; every other non-empty value collapses to
"unavailable". An empty or missing status stays "unknown" so a failed or
malformed lookup is never shown as taken.
"""

from typing import Optional

from .models import DomainResult, StatusSummary

# Raw status codes
ACTIVE = "active"
INACTIVE = "inactive"

_AVAILABLE_STATUSES = frozenset({INACTIVE})

_STATUS_LABELS: dict[StatusSummary, str] = {
    StatusSummary.available: "Available",
    StatusSummary.unavailable: "Unavailable (registered)",
    StatusSummary.unknown: "Unknown status",
}

_STATUS_ICONS: dict[StatusSummary, str] = {
    StatusSummary.available: "✓",
    StatusSummary.unavailable: "✗",
    StatusSummary.unknown: "?",
}


def classify_status(raw_status: Optional[str]) -> StatusSummary:
    """Map a raw upstream status to its summary bucket."""
    if not raw_status or not raw_status.strip():
        return StatusSummary.unknown
    if raw_status.strip().lower() in _AVAILABLE_STATUSES:
        return StatusSummary.available
    return StatusSummary.unavailable


def status_from_availability(availability: Optional[str]) -> str:
    """Translate the Domains API availability field into a raw status code.

    A missing or blank availability gives "" so the result stays unknown.
    """
    availability = (availability or "").strip().lower()
    if not availability:
        return ""
    return INACTIVE if availability == "available" else ACTIVE


def status_label(summary: StatusSummary) -> str:
    return _STATUS_LABELS.get(summary, _STATUS_LABELS[StatusSummary.unknown])


def status_icon(summary: StatusSummary) -> str:
    return _STATUS_ICONS.get(summary, "?")


def zone_of(domain: str) -> str:
    """Last label of a domain name ("" for a bare label)."""
    return domain.rsplit(".", 1)[-1].lower() if "." in domain else ""


def build_result(
    domain: str,
    raw_status: Optional[str],
    *,
    zone: str = "",
    availability: Optional[str] = None,
) -> DomainResult:
    """Build a DomainResult whose summary is derived from the raw status."""
    return DomainResult(
        domain=domain,
        zone=zone or zone_of(domain),
        status=raw_status or "",
        summary=classify_status(raw_status),
        availability=availability,
    )


def placeholder(domain: str, error: str, *, zone: str = "") -> DomainResult:
    """Synthetic result for a domain whose lookup failed."""
    return DomainResult(
        domain=domain,
        zone=zone or zone_of(domain),
        status="",
        summary=StatusSummary.unknown,
        error=error or "lookup failed",
    )


def count_by_summary(results: list[DomainResult]) -> dict[str, int]:
    counts = {summary.value: 0 for summary in StatusSummary}
    for r in results:
        counts[r.summary.value] += 1
    return counts
