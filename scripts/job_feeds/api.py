"""
HTTP trigger for the feed sync.

``GET`` or ``POST /sync-job-feeds`` runs one pass and returns the run
summary. ``adzunaCountries`` may come from the JSON body or the query
string.
"""
from __future__ import annotations

import json
import logging
from typing import Dict, Iterator, Optional

import requests
from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from .boards import FEED_SOURCES
from .errors import StoreUnavailableError
from .firestore import init_firestore_client
from .runner import COUNTRIES_PARAM, build_session, error_response, parse_requested_countries, sync_job_feeds

logger = logging.getLogger(__name__)

app = FastAPI(title="Job feed sync")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)


def get_firestore_client():
    if getattr(app.state, "firestore_client", None) is None:
        app.state.firestore_client = init_firestore_client()
    return app.state.firestore_client


def get_http_session() -> Iterator[requests.Session]:
    session = build_session()
    try:
        yield session
    finally:
        session.close()


def get_sources() -> Dict[str, Dict[str, object]]:
    return FEED_SOURCES


async def _read_body(request: Request) -> Optional[Dict]:
    if request.method != "POST":
        return None
    raw = await request.body()
    if not raw:
        return None
    try:
        body = json.loads(raw)
    except ValueError:
        logger.warning("Ignoring request body that is not valid JSON")
        return None
    return body if isinstance(body, dict) else None


@app.api_route("/", methods=["GET", "POST"])
@app.api_route("/sync-job-feeds", methods=["GET", "POST"])
async def sync_job_feeds_endpoint(
    request: Request,
    client=Depends(get_firestore_client),
    session: requests.Session = Depends(get_http_session),
    sources: Dict[str, Dict[str, object]] = Depends(get_sources),
):
    body = await _read_body(request)
    query = {COUNTRIES_PARAM: request.query_params.getlist(COUNTRIES_PARAM)}
    countries = parse_requested_countries(body, query)

    try:
        run = await run_in_threadpool(
            sync_job_feeds,
            client,
            session=session,
            requested_countries=countries,
            sources=sources,
        )
    except StoreUnavailableError as exc:
        logger.error("Sync error: %s", exc)
        return JSONResponse(status_code=500, content=error_response(str(exc)))
    except Exception as exc:  # noqa: BLE001
        logger.exception("Sync error")
        return JSONResponse(status_code=500, content=error_response(str(exc)))

    return JSONResponse(status_code=200, content=run.to_response())
