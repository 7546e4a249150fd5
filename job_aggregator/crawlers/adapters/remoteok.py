from __future__ import annotations
from typing import Any

from job_aggregator.crawlers.adapters.common import (
    clean_text,
    epoch_to_iso,
    matches_query,
    optional_text,
    salary_range,
)
from job_aggregator.crawlers.base import AdapterError, JobListing, SourceAdapter
from job_aggregator.crawlers.http_helpers import HttpSession, html_to_text

API_URL = "https://remoteok.com/api"


def _build_listings(items: list[Any], query: str = "", limit: int | None = None) -> list[JobListing]:
    listings: list[JobListing] = []
    for item in items:
        # The feed opens with a legal notice object that has no position.
        if not isinstance(item, dict) or not item.get("position"):
            continue

        title = clean_text(item.get("position"))
        company = clean_text(item.get("company"))
        url = clean_text(item.get("url"))
        if not url and item.get("slug"):
            url = f"https://remoteok.com/remote-jobs/{item['slug']}"
        if not url:
            continue

        tags = [clean_text(t) for t in item.get("tags") or []]
        if not matches_query(query, title, company, " ".join(tags)):
            continue

        listings.append(
            JobListing(
                title=title,
                company=company,
                url=url,
                source="remoteok",
                location=clean_text(item.get("location")) or "Remote",
                description=html_to_text(item.get("description")),
                salary=salary_range(item.get("salary_min"), item.get("salary_max")),
                logo=optional_text(item.get("company_logo") or item.get("logo")),
                posted_date_raw=optional_text(item.get("date")) or epoch_to_iso(item.get("epoch")),
            )
        )
        if limit is not None and len(listings) >= limit:
            break
    return listings


class RemoteOKAdapter(SourceAdapter):
    name = "remoteok"

    def __init__(self, session: HttpSession, page_size: int = 50):
        self.session = session
        self.page_size = page_size

    def fetch_listings(self, query: str, location: str = "", page_count: int = 1) -> list[JobListing]:
        payload = self.session.get_json(API_URL)
        if not isinstance(payload, list):
            raise AdapterError(f"unexpected remoteok payload: {type(payload).__name__}")
        return _build_listings(payload, query=query, limit=self.page_size * max(page_count, 1))
