from __future__ import annotations

import re
from typing import Iterable, List, Optional

from .models import DEFAULT_LOCATION, DEFAULT_ORGANIZATION, DEFAULT_TITLE, JobRecord
from .utils import dedupe_keep_order, now_iso, to_iso

JOB_ID_UNSAFE = re.compile(r"[^a-zA-Z0-9_]")


def make_job_id(source: str, source_id: object) -> str:
    """Deterministic document id for an upstream item.

    Punctuation is folded to ``_`` so ids that differ only there collide;
    that is accepted.
    """
    clean_id = JOB_ID_UNSAFE.sub("_", str(source_id))
    return f"{source}_{clean_id}"


def clean_tags(tags: Iterable[object]) -> List[str]:
    cleaned = []
    for tag in tags or []:
        text = str(tag).strip() if tag is not None else ""
        if text:
            cleaned.append(text)
    return dedupe_keep_order(cleaned)


def text_or(value: object, default: str) -> str:
    if value is None:
        return default
    text = str(value).strip()
    return text or default


def build_job(
    source: str,
    source_id: object,
    *,
    title: Optional[str] = None,
    organization: Optional[str] = None,
    location: Optional[str] = None,
    link: Optional[str] = None,
    description: Optional[str] = None,
    date_posted: object = None,
    tags: Iterable[object] = (),
    salary: Optional[str] = None,
    country_slug: str = "",
    added_at: Optional[str] = None,
) -> JobRecord:
    added = added_at or now_iso()
    return JobRecord(
        id=make_job_id(source, source_id),
        source=source,
        source_id=str(source_id),
        title=text_or(title, DEFAULT_TITLE),
        organization=text_or(organization, DEFAULT_ORGANIZATION),
        location=text_or(location, DEFAULT_LOCATION),
        link=text_or(link, ""),
        description=text_or(description, ""),
        date_posted=to_iso(date_posted) or added,
        date_added=added,
        tags=clean_tags(tags),
        salary=text_or(salary, ""),
        country_slug=country_slug,
    )


def has_title(job: JobRecord) -> bool:
    return bool(job.title) and job.title != DEFAULT_TITLE


def collapse_duplicates(jobs: Iterable[JobRecord]) -> List[JobRecord]:
    """Keep one record per id; a later record replaces an earlier one in place."""
    by_id = {}
    for job in jobs:
        by_id[job.id] = job
    return list(by_id.values())
