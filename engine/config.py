"""Configuration for Domain Checker.

Every constant the engine needs (TLD lists, cache bounds, timeouts, the
sequential check delay, rate limits) is read once from the environment and
handed to components at construction. A local .env file is loaded first.
"""

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

load_dotenv()

# TLDs used to expand a search into candidate domains (client side)
COMMON_TLDS = ["com", "net", "org", "io", "co", "app", "dev", "tech", "ai", "shop", "store"]

# TLDs the backend proxy generates suggestions for
SEARCH_TLDS = ["com", "net", "org", "io", "co", "app", "dev", "ai", "me", "tech", "online"]

RAPIDAPI_HOST = "domains-api.p.rapidapi.com"
SUBSCRIPTION_URL = "https://rapidapi.com/layered-layered-default/api/domains-api"


def _env_list(name: str, default: list[str]) -> list[str]:
    raw = os.environ.get(name, "")
    items = [item.strip().lower().lstrip(".") for item in raw.split(",")]
    items = [item for item in items if item]
    return items or list(default)


def _env_bool(name: str, default: bool) -> bool:
    return os.environ.get(name, str(default)).lower() in ("1", "true", "yes", "on")


@dataclass
class Settings:
    """Runtime settings. Build with Settings.from_env() or directly in tests."""
    rapidapi_key: str = ""
    rapidapi_host: str = RAPIDAPI_HOST
    api_url: str = "http://localhost:5000"
    environment: str = "development"
    port: int = 5000
    client_urls: list[str] = field(default_factory=lambda: ["http://localhost:3000"])
    api_timeout: float = 10.0
    check_delay: float = 1.2
    cache_enabled: bool = True
    cache_ttl: float = 300.0
    cache_max_size: int = 100
    tlds: list[str] = field(default_factory=lambda: list(COMMON_TLDS))
    search_tlds: list[str] = field(default_factory=lambda: list(SEARCH_TLDS))
    rate_limit_window: int = 900
    rate_limit_max: int = 100

    @property
    def is_dev(self) -> bool:
        return self.environment == "development"

    @property
    def is_prod(self) -> bool:
        return self.environment == "production"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            rapidapi_key=os.environ.get(
                "DOMAINCHECK_RAPIDAPI_KEY", os.environ.get("RAPIDAPI_KEY", "")
            ),
            rapidapi_host=os.environ.get("DOMAINCHECK_RAPIDAPI_HOST", RAPIDAPI_HOST),
            api_url=os.environ.get("DOMAINCHECK_API_URL", "http://localhost:5000").rstrip("/"),
            environment=os.environ.get("DOMAINCHECK_ENV", "development").lower(),
            port=int(os.environ.get("DOMAINCHECK_PORT", "5000")),
            client_urls=[
                url.strip()
                for url in os.environ.get("DOMAINCHECK_CLIENT_URL", "http://localhost:3000").split(",")
                if url.strip()
            ],
            api_timeout=float(os.environ.get("DOMAINCHECK_API_TIMEOUT", "10")),
            check_delay=float(os.environ.get("DOMAINCHECK_CHECK_DELAY", "1.2")),
            cache_enabled=_env_bool("DOMAINCHECK_CACHE_ENABLED", True),
            cache_ttl=float(os.environ.get("DOMAINCHECK_CACHE_TTL_SECONDS", "300")),
            cache_max_size=int(os.environ.get("DOMAINCHECK_CACHE_MAX_SIZE", "100")),
            tlds=_env_list("DOMAINCHECK_TLDS", COMMON_TLDS),
            search_tlds=_env_list("DOMAINCHECK_SEARCH_TLDS", SEARCH_TLDS),
            rate_limit_window=int(os.environ.get("DOMAINCHECK_RATE_LIMIT_WINDOW", "900")),
            rate_limit_max=int(os.environ.get("DOMAINCHECK_RATE_LIMIT_MAX", "100")),
        )
