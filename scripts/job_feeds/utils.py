from __future__ import annotations

import re
import time
from datetime import datetime, timezone
from typing import Iterable, List, Optional
from urllib.parse import urlparse

from bs4 import BeautifulSoup
from dateutil import parser as date_parser


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def now_iso() -> str:
    return now_utc().isoformat()


def normalize_text(text: str) -> str:
    return re.sub(r"\s+", " ", (text or "").strip())


def normalize_block(text: str) -> str:
    """Collapse whitespace inside each line and drop blank lines, keeping line breaks."""
    lines = [re.sub(r"[ \t\r\f\v\u00a0]+", " ", line).strip() for line in (text or "").split("\n")]
    return "\n".join(line for line in lines if line)


def html_to_text(value: str) -> str:
    if not value:
        return ""
    if "<" not in value:
        return normalize_block(value)
    soup = BeautifulSoup(value, "html.parser")
    return normalize_block(soup.get_text("\n"))


def clean_link(url: str) -> str:
    if not url:
        return ""
    try:
        parsed = urlparse(url.strip())
        return parsed._replace(fragment="").geturl()
    except ValueError:
        return url.strip()


def dedupe_keep_order(items: Iterable[str]) -> List[str]:
    seen: set[str] = set()
    deduped: List[str] = []
    for item in items:
        if item in seen:
            continue
        seen.add(item)
        deduped.append(item)
    return deduped


def to_iso(value: object) -> Optional[str]:
    """Render an upstream date (ISO string, RFC 822 string or struct_time) as ISO-8601 UTC."""
    if not value:
        return None
    if isinstance(value, time.struct_time):
        return datetime(*value[:6], tzinfo=timezone.utc).isoformat()
    if isinstance(value, datetime):
        dt = value
    else:
        try:
            dt = date_parser.parse(str(value))
        except (ValueError, OverflowError):
            return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    else:
        dt = dt.astimezone(timezone.utc)
    return dt.isoformat()
