from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Tuple, Union

import feedparser
import requests

from . import config
from .boards import (
    ADZUNA_SUPPORTED_COUNTRIES,
    DEFAULT_ADZUNA_COUNTRIES,
    FALLBACK_ADZUNA_COUNTRY,
    source_max_jobs,
)
from .errors import ConfigurationError, FeedError
from .extractors import extract_feed_fields
from .models import FeedItem, JobRecord
from .records import build_job, has_title
from .utils import clean_link, dedupe_keep_order, html_to_text, to_iso

logger = logging.getLogger(__name__)

ADZUNA_PAGE_SIZE_CAP = 50


def _names(values: object, key: str = "name") -> List[str]:
    """Names from a list whose entries may be dicts or plain strings."""
    if isinstance(values, dict):
        values = [values]
    if not isinstance(values, list):
        return []
    names = []
    for value in values:
        if isinstance(value, dict):
            value = value.get(key)
        if value:
            names.append(str(value).strip())
    return [name for name in names if name]


def _first(values: object) -> object:
    if isinstance(values, list) and values:
        return values[0]
    return None


# ---- ReliefWeb (structured JSON) ------------------------------------------


def _reliefweb_organization(fields: Dict) -> Optional[str]:
    source = fields.get("source")
    if isinstance(source, list):
        head = _first(source)
        return head.get("name") if isinstance(head, dict) else head
    if isinstance(source, dict):
        return source.get("name") or source.get("shortname")
    return None


def _reliefweb_location(fields: Dict) -> Optional[str]:
    countries = ", ".join(_names(fields.get("country")))
    if countries:
        return countries
    location = _first(fields.get("location"))
    if isinstance(location, dict) and location.get("name"):
        return location["name"]
    city = _first(fields.get("city"))
    if isinstance(city, dict):
        return city.get("name")
    return city or None


def map_reliefweb_item(item: Dict) -> JobRecord:
    fields = item.get("fields") or {}
    job_id = item.get("id")
    dates = fields.get("date") or {}
    return build_job(
        "reliefweb",
        job_id,
        title=fields.get("title"),
        organization=_reliefweb_organization(fields),
        location=_reliefweb_location(fields),
        link=fields.get("url") or fields.get("url_alias") or f"https://reliefweb.int/job/{job_id}",
        description=fields.get("body") or fields.get("description") or fields.get("how_to_apply"),
        date_posted=dates.get("created") or dates.get("closing") or fields.get("closing_date"),
        tags=_names(fields.get("theme")) or _names(fields.get("career_categories")),
        salary=fields.get("salary"),
    )


def reliefweb_search(session: requests.Session, source: Dict[str, object]) -> List[JobRecord]:
    url = str(source.get("url") or config.RELIEFWEB_URL)
    logger.info("Fetching ReliefWeb from %s", url)
    resp = session.get(url, timeout=config.REQUEST_TIMEOUT_SECONDS)
    resp.raise_for_status()
    data = resp.json()

    items = data.get("data") if isinstance(data, dict) else None
    if not isinstance(items, list):
        logger.warning("ReliefWeb: no data array in response")
        return []

    jobs: List[JobRecord] = []
    for item in items:
        job = map_reliefweb_item(item or {})
        if not has_title(job):
            logger.info("Skipping ReliefWeb job %s with no title", (item or {}).get("id"))
            continue
        jobs.append(job)

    limited = jobs[: source_max_jobs(source, config.RELIEFWEB_MAX_JOBS)]
    logger.info("ReliefWeb: fetched %d jobs, returning %d", len(jobs), len(limited))
    return limited


# ---- Adzuna (one request per country) -------------------------------------


def normalize_adzuna_countries(requested: Union[str, Iterable[str], None]) -> List[str]:
    """Map requested codes (a comma list or a sequence of them) to supported Adzuna regions."""
    if isinstance(requested, str):
        requested = [requested]
    entries = [
        part.strip().lower()
        for entry in (requested or [])
        for part in str(entry).split(",")
        if part.strip()
    ]
    if not entries:
        return [FALLBACK_ADZUNA_COUNTRY]
    if "all" in entries:
        return list(DEFAULT_ADZUNA_COUNTRIES)
    supported = dedupe_keep_order([slug for slug in entries if slug in ADZUNA_SUPPORTED_COUNTRIES])
    return supported or [FALLBACK_ADZUNA_COUNTRY]


def adzuna_job_key(item: Dict) -> object:
    return item.get("id") or item.get("adref") or item.get("created") or item.get("redirect_url")


def adzuna_salary(item: Dict) -> str:
    low, high = item.get("salary_min"), item.get("salary_max")
    if low and high:
        return f"{low} - {high}"
    if low:
        return f"{low}"
    if high:
        return f"{high}"
    return ""


def map_adzuna_item(item: Dict, country: str) -> JobRecord:
    category = (item.get("category") or {}).get("label")
    location = item.get("location") or {}
    area = location.get("area")

    tags: List[str] = []
    if category:
        tags.append(category)
    if isinstance(item.get("tags"), list):
        tags.extend(tag.strip() for tag in item["tags"] if isinstance(tag, str))
    tags.append(country.upper())

    return build_job(
        "adzuna",
        f"{country}_{adzuna_job_key(item)}",
        title=item.get("title"),
        organization=(item.get("company") or {}).get("display_name") or category,
        location=location.get("display_name") or (", ".join(area) if isinstance(area, list) else None),
        link=item.get("redirect_url"),
        description=item.get("description"),
        date_posted=item.get("created"),
        tags=tags,
        salary=adzuna_salary(item),
        country_slug=country,
    )


def _adzuna_error_message(exc: Exception) -> str:
    response = getattr(exc, "response", None)
    if response is not None:
        return f"{response.status_code}"
    return str(exc)


def adzuna_country_search(
    session: requests.Session,
    source: Dict[str, object],
    country: str,
) -> List[JobRecord]:
    base_url = str(source.get("url") or config.ADZUNA_BASE_URL).rstrip("/")
    params: Dict[str, object] = {
        "app_id": config.ADZUNA_APP_ID,
        "app_key": config.ADZUNA_APP_KEY,
        "results_per_page": max(1, min(source_max_jobs(source, config.ADZUNA_MAX_JOBS), ADZUNA_PAGE_SIZE_CAP)),
    }
    if config.ADZUNA_WHAT:
        params["what"] = config.ADZUNA_WHAT

    jobs: List[JobRecord] = []
    for page in range(1, config.ADZUNA_PAGES + 1):
        resp = session.get(
            f"{base_url}/{country}/search/{page}",
            params=params,
            headers={"Accept": "application/json"},
            timeout=config.REQUEST_TIMEOUT_SECONDS,
        )
        resp.raise_for_status()
        results = (resp.json() or {}).get("results") or []
        for item in results:
            if not adzuna_job_key(item) or not item.get("redirect_url") or not item.get("title"):
                continue
            jobs.append(map_adzuna_item(item, country))
        if not results:
            break
    return jobs


def adzuna_search(
    session: requests.Session,
    source: Dict[str, object],
    countries: Iterable[str],
) -> Tuple[List[JobRecord], Dict[str, str]]:
    if not config.ADZUNA_APP_ID or not config.ADZUNA_APP_KEY:
        raise ConfigurationError("Adzuna credentials not configured. Set ADZUNA_APP_ID and ADZUNA_APP_KEY.")

    jobs: List[JobRecord] = []
    errors: Dict[str, str] = {}
    for country in countries:
        try:
            country_jobs = adzuna_country_search(session, source, country)
        except Exception as exc:  # noqa: BLE001
            logger.error("Adzuna fetch error for %s: %s", country, exc)
            errors[country] = _adzuna_error_message(exc)
            continue
        logger.info("Adzuna %s: %d jobs", country, len(country_jobs))
        jobs.extend(country_jobs)
    return jobs, errors


# ---- RSS / Atom feeds -----------------------------------------------------


def fetch_feed_entries(session: requests.Session, url: str, max_bytes: Optional[int] = None) -> List[Dict]:
    limit = max_bytes or config.FEED_MAX_BYTES
    with session.get(url, timeout=config.REQUEST_TIMEOUT_SECONDS, stream=True) as resp:
        resp.raise_for_status()
        body = bytearray()
        for chunk in resp.iter_content(chunk_size=65536):
            body.extend(chunk)
            if len(body) > limit:
                raise FeedError(f"Feed {url} exceeds {limit} bytes")

    feed = feedparser.parse(bytes(body))
    if feed.bozo and not feed.entries:
        raise FeedError(f"Could not parse feed {url}: {feed.get('bozo_exception')}")
    return list(feed.entries)


def feed_item_from_entry(entry: Dict) -> FeedItem:
    content = ""
    if entry.get("content"):
        content = entry["content"][0].get("value", "")
    summary = entry.get("summary", "") or entry.get("description", "")
    return FeedItem(
        title=entry.get("title", "") or "",
        link=clean_link(entry.get("link", "") or ""),
        guid=entry.get("id", "") or "",
        snippet=html_to_text(summary),
        content=html_to_text(content),
        summary=summary,
        byline=entry.get("author", "") or "",
        categories=[tag.get("term", "") for tag in entry.get("tags", []) if tag.get("term")],
        published=to_iso(entry.get("published_parsed") or entry.get("updated_parsed"))
        or to_iso(entry.get("published") or entry.get("updated"))
        or "",
    )


def map_feed_item(source_name: str, item: FeedItem, index: int, title_rule: Optional[str] = None) -> JobRecord:
    fields = extract_feed_fields(item, title_rule)
    return build_job(
        source_name,
        item.guid or item.link or str(index),
        title=fields["title"],
        organization=fields["organization"],
        location=fields["location"],
        link=item.link,
        description=item.snippet or item.content or item.summary,
        date_posted=item.published,
        tags=item.categories,
    )


def rss_search(session: requests.Session, source_name: str, source: Dict[str, object]) -> List[JobRecord]:
    url = str(source.get("url") or "")
    logger.info("Fetching %s RSS from %s", source_name, url)
    entries = fetch_feed_entries(session, url)
    if not entries:
        logger.warning("%s: no items in feed", source_name)

    title_rule = source.get("title_rule")
    jobs: List[JobRecord] = []
    for index, entry in enumerate(entries):
        job = map_feed_item(source_name, feed_item_from_entry(entry), index, title_rule)
        if not job.link or not has_title(job):
            logger.debug("%s: skipping item %d without title or link", source_name, index)
            continue
        jobs.append(job)

    limited = jobs[: source_max_jobs(source, config.FEED_MAX_JOBS)]
    logger.info("%s: fetched %d jobs, returning %d", source_name, len(jobs), len(limited))
    return limited
