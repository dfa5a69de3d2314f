from __future__ import annotations

import argparse
import json
import logging
from typing import Dict, Iterable, List, Optional, Tuple, Union

import requests

from . import config
from .boards import FEED_SOURCES, enabled_sources
from .errors import StoreUnavailableError
from .firestore import init_firestore_client, store_jobs
from .models import JobRecord, SyncRun
from .sources import adzuna_search, normalize_adzuna_countries, reliefweb_search, rss_search
from .utils import now_iso

logger = logging.getLogger(__name__)

COUNTRIES_PARAM = "adzunaCountries"


def build_session() -> requests.Session:
    session = requests.Session()
    session.headers.update({"User-Agent": config.USER_AGENT})
    return session


def _split_countries(value: object) -> List[str]:
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    if isinstance(value, (list, tuple)):
        parts: List[str] = []
        for entry in value:
            if isinstance(entry, str):
                parts.extend(_split_countries(entry))
        return parts
    return []


def parse_requested_countries(body: Optional[Dict] = None, query: Optional[Dict] = None) -> List[str]:
    """Read ``adzunaCountries`` from the request body, falling back to the query string."""
    for params in (body, query):
        if not isinstance(params, dict):
            continue
        requested = _split_countries(params.get(COUNTRIES_PARAM))
        if requested:
            return requested
    return []


def fetch_source(
    session: requests.Session,
    name: str,
    source: Dict[str, object],
    countries: Iterable[str],
) -> Tuple[List[JobRecord], Dict[str, str]]:
    kind = source.get("type")
    if kind == "json":
        return reliefweb_search(session, source), {}
    if kind == "regional_json":
        return adzuna_search(session, source, countries)
    if kind == "rss":
        return rss_search(session, name, source), {}
    raise ValueError(f"Unknown source type for {name}: {kind}")


def collect_jobs(
    session: requests.Session,
    sources: Dict[str, Dict[str, object]],
    countries: List[str],
) -> SyncRun:
    run = SyncRun(timestamp=now_iso())
    for name in enabled_sources(sources):
        source = sources[name]
        if source.get("type") == "regional_json":
            run.countries_used = list(countries)
        try:
            jobs, region_errors = fetch_source(session, name, source, countries)
        except Exception as exc:  # noqa: BLE001
            logger.error("%s error: %s", name, exc)
            run.by_source[name] = 0
            run.errors[name] = str(exc) or type(exc).__name__
            continue

        run.jobs.extend(jobs)
        run.by_source[name] = len(jobs)
        if region_errors:
            run.errors[name] = "; ".join(f"{region}: {message}" for region, message in region_errors.items())

    run.total_fetched = len(run.jobs)
    return run


def sync_job_feeds(
    client,
    session: Optional[requests.Session] = None,
    requested_countries: Union[str, Iterable[str], None] = None,
    sources: Optional[Dict[str, Dict[str, object]]] = None,
) -> SyncRun:
    """Run one sync pass: fetch every enabled source, upsert, trim.

    Source failures are recorded on the returned run. Only a missing store
    client raises.
    """
    if client is None:
        raise StoreUnavailableError("Firestore not initialized. Check Firebase Admin configuration.")

    registry = FEED_SOURCES if sources is None else sources
    countries = normalize_adzuna_countries(requested_countries)
    owned = session is None
    session = session or build_session()
    try:
        run = collect_jobs(session, registry, countries)
    finally:
        if owned:
            session.close()
    run.storage = store_jobs(client, run.jobs)
    run.timestamp = now_iso()
    logger.info("Sync complete: %d fetched, storage %s", run.total_fetched, run.storage)
    return run


def error_response(message: str) -> Dict[str, object]:
    return {"success": False, "error": message, "timestamp": now_iso()}


def run_smoke_test(
    session: Optional[requests.Session] = None,
    sources: Optional[Dict[str, Dict[str, object]]] = None,
    countries: Optional[Iterable[str]] = None,
) -> Dict[str, Dict[str, object]]:
    """Fetch every registered source, enabled or not, and report what came back."""
    owned = session is None
    session = session or build_session()
    registry = FEED_SOURCES if sources is None else sources
    regions = normalize_adzuna_countries(countries)
    try:
        return _probe_sources(session, registry, regions)
    finally:
        if owned:
            session.close()


def _probe_sources(
    session: requests.Session,
    registry: Dict[str, Dict[str, object]],
    regions: List[str],
) -> Dict[str, Dict[str, object]]:
    results: Dict[str, Dict[str, object]] = {}
    for name, source in registry.items():
        try:
            jobs, region_errors = fetch_source(session, name, source, regions)
        except Exception as exc:  # noqa: BLE001
            results[name] = {"ok": False, "count": 0, "error": str(exc) or type(exc).__name__}
            continue
        results[name] = {
            "ok": not region_errors,
            "count": len(jobs),
            "error": "; ".join(f"{region}: {message}" for region, message in region_errors.items()),
        }
    return results


def cli() -> None:
    parser = argparse.ArgumentParser(description="Sync external job feeds into Firestore")
    parser.add_argument("--countries", default="", help="Adzuna country codes, comma separated, or 'all'")
    parser.add_argument("--dry-run", action="store_true", help="Fetch and normalize without writing to Firestore")
    parser.add_argument("--smoke-test", action="store_true", help="Probe every registered source and print counts")
    args = parser.parse_args()

    logging.basicConfig(level=config.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    countries = parse_requested_countries(query={COUNTRIES_PARAM: args.countries})

    if args.smoke_test:
        for name, stat in run_smoke_test(countries=countries).items():
            print(f"{name}: ok={stat['ok']} count={stat['count']} error={stat['error']}")
        return

    if args.dry_run:
        with build_session() as session:
            run = collect_jobs(session, FEED_SOURCES, normalize_adzuna_countries(countries))
        print(json.dumps(run.to_response(dry_run=True), indent=2))
        return

    try:
        run = sync_job_feeds(init_firestore_client(), requested_countries=countries)
    except StoreUnavailableError as exc:
        print(json.dumps(error_response(str(exc)), indent=2))
        raise SystemExit(1)
    print(json.dumps(run.to_response(), indent=2))


if __name__ == "__main__":
    cli()
