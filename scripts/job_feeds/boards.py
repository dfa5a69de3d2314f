from __future__ import annotations

from typing import Dict, List, Optional

from . import config
from .utils import dedupe_keep_order

ADZUNA_SUPPORTED_COUNTRIES = [
    "au",
    "at",
    "be",
    "br",
    "ca",
    "fr",
    "de",
    "in",
    "it",
    "mx",
    "nl",
    "nz",
    "pl",
    "sg",
    "za",
    "es",
    "ch",
    "ae",
    "gb",
    "us",
]

DEFAULT_ADZUNA_COUNTRIES = (
    dedupe_keep_order([slug for slug in config.ADZUNA_COUNTRY_LIST if slug in ADZUNA_SUPPORTED_COUNTRIES])
    or list(ADZUNA_SUPPORTED_COUNTRIES)
)

FALLBACK_ADZUNA_COUNTRY = (
    config.ADZUNA_COUNTRY if config.ADZUNA_COUNTRY in ADZUNA_SUPPORTED_COUNTRIES else "us"
)

# Several RSS feeds returned 404 upstream, so they ship disabled.
FEED_SOURCES: Dict[str, Dict[str, object]] = {
    "reliefweb": {
        "type": "json",
        "url": config.RELIEFWEB_URL,
        "enabled": True,
        "max_jobs": config.RELIEFWEB_MAX_JOBS,
    },
    "adzuna": {
        "type": "regional_json",
        "url": config.ADZUNA_BASE_URL,
        "enabled": True,
        "max_jobs": config.ADZUNA_MAX_JOBS,
    },
    "unjobs": {
        "type": "rss",
        "url": "https://www.unjobnet.org/feed",
        "enabled": False,
        "max_jobs": config.FEED_MAX_JOBS,
        "title_rule": "colon",
    },
    "impactpool": {
        "type": "rss",
        "url": "https://www.impactpool.org/feed",
        "enabled": False,
        "max_jobs": config.FEED_MAX_JOBS,
        "title_rule": "colon_location",
    },
    "idealist": {
        "type": "rss",
        "url": "https://www.idealist.org/en/jobs.rss",
        "enabled": False,
        "max_jobs": config.FEED_MAX_JOBS,
    },
    "eurobrussels": {
        "type": "rss",
        "url": "https://www.eurobrussels.com/rss/all_jobs.xml",
        "enabled": False,
        "max_jobs": config.FEED_MAX_JOBS,
    },
}


def is_enabled(name: str, source: Dict[str, object]) -> bool:
    if config.ENABLED_SOURCES:
        return name in config.ENABLED_SOURCES
    if name in config.DISABLED_SOURCES:
        return False
    return bool(source.get("enabled"))


def enabled_sources(sources: Optional[Dict[str, Dict[str, object]]] = None) -> List[str]:
    registry = FEED_SOURCES if sources is None else sources
    return [name for name, source in registry.items() if is_enabled(name, source)]


def source_max_jobs(source: Dict[str, object], default: int = 50) -> int:
    value = source.get("max_jobs")
    if value is None:
        return default
    try:
        return max(0, int(value))
    except (TypeError, ValueError):
        return default
