from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List

DEFAULT_TITLE = "No title"
DEFAULT_ORGANIZATION = "Unknown"
DEFAULT_LOCATION = "Location not specified"


@dataclass
class JobRecord:
    id: str
    source: str
    source_id: str
    title: str = DEFAULT_TITLE
    organization: str = DEFAULT_ORGANIZATION
    location: str = DEFAULT_LOCATION
    link: str = ""
    description: str = ""
    date_posted: str = ""
    date_added: str = ""
    last_updated: str = ""
    tags: List[str] = field(default_factory=list)
    salary: str = ""
    country_slug: str = ""

    def to_document(self) -> Dict[str, object]:
        data: Dict[str, object] = {
            "id": self.id,
            "title": self.title,
            "organization": self.organization,
            "location": self.location,
            "link": self.link,
            "description": self.description,
            "datePosted": self.date_posted,
            "dateAdded": self.date_added,
            "source": self.source,
            "sourceId": self.source_id,
            "tags": list(self.tags),
            "salary": self.salary,
        }
        if self.last_updated:
            data["lastUpdated"] = self.last_updated
        if self.country_slug:
            data["countrySlug"] = self.country_slug
        return data


@dataclass
class FeedItem:
    title: str = ""
    link: str = ""
    guid: str = ""
    snippet: str = ""
    content: str = ""
    summary: str = ""
    byline: str = ""
    categories: List[str] = field(default_factory=list)
    published: str = ""

    def text_blocks(self) -> List[str]:
        return [block for block in (self.snippet, self.content, self.summary) if block]


@dataclass
class SyncRun:
    timestamp: str
    total_fetched: int = 0
    by_source: Dict[str, int] = field(default_factory=dict)
    storage: Dict[str, int] = field(default_factory=lambda: {"stored": 0, "updated": 0, "skipped": 0})
    errors: Dict[str, str] = field(default_factory=dict)
    countries_used: List[str] = field(default_factory=list)
    jobs: List[JobRecord] = field(default_factory=list)

    def to_response(self, dry_run: bool = False) -> Dict[str, object]:
        """Response payload; a dry run carries ``dryRun`` instead of ``storage``."""
        payload: Dict[str, object] = {
            "success": True,
            "totalFetched": self.total_fetched,
            "bySource": dict(self.by_source),
            "adzunaCountriesUsed": list(self.countries_used),
            "timestamp": self.timestamp,
        }
        if dry_run:
            payload["dryRun"] = True
        else:
            payload["storage"] = dict(self.storage)
        if self.errors:
            payload["errors"] = dict(self.errors)
        return payload
