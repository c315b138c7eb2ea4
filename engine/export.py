"""Flat-file exports of a result list (TXT, CSV, JSON) and purchase links.

All functions are read-only over the results they are given.
"""

import csv
import io
import json
import re
from datetime import datetime
from typing import Optional
from urllib.parse import quote_plus

from .models import DomainResult
from .status import status_label

EXPORT_FORMATS = ("txt", "csv", "json")

_SEARCH_ENGINES = {
    "google": "https://www.google.com/search?q={q}",
    "bing": "https://www.bing.com/search?q={q}",
    "duckduckgo": "https://duckduckgo.com/?q={q}",
    "brave": "https://search.brave.com/search?q={q}",
}


def to_txt(results: list[DomainResult], query: str, now: Optional[datetime] = None) -> str:
    now = now or datetime.now()
    lines = [
        "DOMAIN SEARCH RESULTS",
        "=====================",
        "",
        f"Query: {query}",
        f"Date: {now.strftime('%Y-%m-%d %H:%M:%S')}",
        "",
        "DOMAINS:",
    ]
    for r in results:
        lines.append("")
        lines.append(f"- {r.domain}")
        lines.append(f"  Status: {status_label(r.summary)}")
    return "\n".join(lines) + "\n"


def to_csv(results: list[DomainResult]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(["Domain", "Status", "Zone"])
    for r in results:
        writer.writerow([r.domain, status_label(r.summary), r.zone])
    return buf.getvalue()


def to_json(results: list[DomainResult]) -> str:
    return json.dumps([r.model_dump(mode="json") for r in results], indent=2)


def render(results: list[DomainResult], fmt: str, query: str = "", now: Optional[datetime] = None) -> str:
    """Render results in one of EXPORT_FORMATS."""
    if fmt == "txt":
        return to_txt(results, query, now)
    if fmt == "csv":
        return to_csv(results)
    if fmt == "json":
        return to_json(results)
    raise ValueError(f"Unsupported export format: {fmt}")


def export_filename(query: str, fmt: str, today: Optional[datetime] = None) -> str:
    """domains-<query with whitespace runs as dashes>-<YYYY-MM-DD>.<fmt>"""
    today = today or datetime.now()
    slug = re.sub(r"\s+", "-", query.strip())
    return f"domains-{slug}-{today.strftime('%Y-%m-%d')}.{fmt}"


def purchase_links(domain: str) -> dict[str, str]:
    """Search-engine links for buying a domain, keyed by engine name."""
    q = quote_plus(f"buy domain {domain}")
    return {engine: template.format(q=q) for engine, template in _SEARCH_ENGINES.items()}
