"""
Best-effort field recovery for feed items.

RSS entries carry a title, a free-text body and sometimes categories, but no
structured organization or location. Each extractor below looks at one
signal and returns a value or ``None``; ``first_match`` walks a chain and
stops at the first hit. The chains per title rule are the precedence policy
for each feed family.
"""
from __future__ import annotations

import re
from typing import Callable, Dict, Iterable, List, Optional, Pattern, Tuple

from .models import FeedItem
from .utils import normalize_text

Extractor = Callable[[FeedItem], Optional[str]]

LOCATION_PATTERNS = [
    re.compile(r"\b(?:duty station|location)\s*[:\-]?\s*([^<,\n;|]+)", re.IGNORECASE),
]
ORGANIZATION_PATTERNS = [
    re.compile(r"\b(?:organi[sz]ation|agency|employer)\s*[:\-]?\s*([^<,\n;|]+)", re.IGNORECASE),
]

MAX_FIELD_LENGTH = 100
TITLE_PREFIX_MAX = 80
TRAILING_LOCATION_MAX = 40

TITLE_RULES = ("colon", "colon_location")


def _clean_capture(value: str) -> Optional[str]:
    cleaned = normalize_text(value).strip(" :-–.")
    if not cleaned or len(cleaned) > MAX_FIELD_LENGTH:
        return None
    return cleaned


def search_blocks(patterns: Iterable[Pattern[str]], blocks: Iterable[str]) -> Optional[str]:
    for block in blocks:
        for pattern in patterns:
            match = pattern.search(block)
            if not match:
                continue
            value = _clean_capture(match.group(1))
            if value:
                return value
    return None


def location_from_text(item: FeedItem) -> Optional[str]:
    return search_blocks(LOCATION_PATTERNS, item.text_blocks())


def organization_from_text(item: FeedItem) -> Optional[str]:
    return search_blocks(ORGANIZATION_PATTERNS, item.text_blocks())


def organization_from_byline(item: FeedItem) -> Optional[str]:
    return _clean_capture(item.byline) if item.byline else None


def organization_from_categories(item: FeedItem) -> Optional[str]:
    if not item.categories:
        return None
    return _clean_capture(item.categories[0])


def location_from_categories(item: FeedItem) -> Optional[str]:
    # a single category is read as the organization, never the place
    if len(item.categories) < 2:
        return None
    return _clean_capture(item.categories[-1])


def fixed(value: Optional[str]) -> Extractor:
    return lambda _item: value or None


def first_match(extractors: Iterable[Extractor], item: FeedItem) -> Optional[str]:
    for extractor in extractors:
        value = extractor(item)
        if value:
            return value
    return None


def split_title_on_colon(title: str) -> Optional[Tuple[str, str]]:
    if ":" not in title:
        return None
    prefix, remainder = (part.strip() for part in title.split(":", 1))
    if not prefix or not remainder or len(prefix) > TITLE_PREFIX_MAX:
        return None
    return prefix, remainder


def split_trailing_location(text: str) -> Optional[Tuple[str, str]]:
    if "," not in text:
        return None
    head, tail = (part.strip() for part in text.rsplit(",", 1))
    if not head or not tail or len(tail) > TRAILING_LOCATION_MAX:
        return None
    return head, tail


def extract_feed_fields(item: FeedItem, title_rule: Optional[str] = None) -> Dict[str, Optional[str]]:
    """Return ``title``, ``organization`` and ``location`` for one feed item.

    ``organization``/``location`` are ``None`` when nothing matched so the
    normalizer can apply its defaults.
    """
    title = normalize_text(item.title)
    prefix: Optional[str] = None
    trailing: Optional[str] = None

    if title_rule in TITLE_RULES:
        split = split_title_on_colon(title)
        if split:
            prefix, title = split
    if title_rule == "colon_location":
        split = split_trailing_location(title)
        if split:
            title, trailing = split

    organization_chain: List[Extractor]
    location_chain: List[Extractor]
    if title_rule == "colon":
        organization_chain = [
            organization_from_text,
            organization_from_categories,
            fixed(prefix),
            organization_from_byline,
        ]
        location_chain = [location_from_text]
    elif title_rule == "colon_location":
        organization_chain = [
            organization_from_text,
            fixed(prefix),
            organization_from_byline,
            organization_from_categories,
        ]
        location_chain = [location_from_text, fixed(trailing), location_from_categories]
    else:
        organization_chain = [organization_from_text, organization_from_byline]
        location_chain = [location_from_text]

    return {
        "title": title,
        "organization": first_match(organization_chain, item),
        "location": first_match(location_chain, item),
    }
