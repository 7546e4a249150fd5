from __future__ import annotations
from typing import Any

from job_aggregator.crawlers.adapters.common import clean_text, optional_text
from job_aggregator.crawlers.base import AdapterError, JobListing, SourceAdapter
from job_aggregator.crawlers.http_helpers import HttpSession, html_to_text

API_URL = "https://remotive.com/api/remote-jobs"
PAGE_SIZE = 50


def _build_listings(items: list[dict[str, Any]]) -> list[JobListing]:
    listings: list[JobListing] = []
    for item in items:
        title = clean_text(item.get("title"))
        company = clean_text(item.get("company_name"))
        url = clean_text(item.get("url"))
        if not title or not url:
            continue

        listings.append(
            JobListing(
                title=title,
                company=company,
                url=url,
                source="remotive",
                location=clean_text(item.get("candidate_required_location")) or "Remote",
                description=html_to_text(item.get("description")),
                salary=optional_text(item.get("salary")),
                job_type=optional_text(item.get("job_type")),
                logo=optional_text(item.get("company_logo")),
                posted_date_raw=optional_text(item.get("publication_date")),
            )
        )
    return listings


class RemotiveAdapter(SourceAdapter):
    name = "remotive"

    def __init__(self, session: HttpSession):
        self.session = session

    def fetch_listings(self, query: str, location: str = "", page_count: int = 1) -> list[JobListing]:
        # The API has no paging; a larger limit stands in for more pages.
        # Search happens server side, which also matches descriptions.
        params = {"limit": PAGE_SIZE * max(page_count, 1)}
        if query:
            params["search"] = query
        payload = self.session.get_json(API_URL, params=params)
        if not isinstance(payload, dict):
            raise AdapterError(f"unexpected remotive payload: {type(payload).__name__}")
        return _build_listings(payload.get("jobs") or [])
