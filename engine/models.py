"""Data models for the Domain Checker engine."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel


class StatusSummary(str, Enum):
    """Coarse availability bucket derived from a raw upstream status."""
    available = "available"
    unavailable = "unavailable"
    unknown = "unknown"


class DomainSuggestion(BaseModel):
    """A domain-shaped record returned by a search."""
    domain: str
    zone: str = ""
    path: str = ""
    subdomain: str = ""


class DomainResult(BaseModel):
    """Registration status of a single candidate domain."""
    domain: str
    zone: str = ""
    status: str = ""                    # raw upstream code, e.g. "active", "inactive"
    summary: StatusSummary = StatusSummary.unknown
    availability: Optional[str] = None  # raw upstream availability string
    error: Optional[str] = None         # set on placeholders

    @property
    def is_available(self) -> bool:
        return self.summary == StatusSummary.available

    @property
    def is_placeholder(self) -> bool:
        return self.error is not None

    def to_status_record(self) -> dict:
        """Wire shape used by the backend /api/status endpoint."""
        return {
            "domain": self.domain,
            "zone": self.zone,
            "status": self.status,
            "summary": self.summary.value,
            "availability": self.availability,
        }


@dataclass
class LookupOutcome:
    """Result-or-error of one lookup inside a batch.

    Exactly one of value/error is meaningful: ok is True when the lookup
    returned, False when it raised.
    """
    item: str
    value: Any = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class SyntaxResult(BaseModel):
    """Result of query or domain syntax validation."""
    is_valid: bool = True
    code: str = ""          # machine-readable reason, e.g. "QUERY_TOO_SHORT"
    reason: str = ""
    normalized: str = ""
