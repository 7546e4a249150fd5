from __future__ import annotations
from typing import Any

from job_aggregator.crawlers.adapters.common import clean_text, epoch_to_iso, matches_query, optional_text
from job_aggregator.crawlers.base import AdapterError, JobListing, SourceAdapter
from job_aggregator.crawlers.http_helpers import HttpSession, html_to_text

API_URL = "https://www.arbeitnow.com/api/job-board-api"


def _build_listings(items: list[dict[str, Any]], query: str = "", location: str = "") -> list[JobListing]:
    listings: list[JobListing] = []
    wanted_location = clean_text(location).lower()
    for item in items:
        title = clean_text(item.get("title"))
        company = clean_text(item.get("company_name"))
        url = clean_text(item.get("url"))
        if not title or not url:
            continue

        tags = " ".join(clean_text(t) for t in item.get("tags") or [])
        if not matches_query(query, title, company, tags):
            continue

        job_location = clean_text(item.get("location"))
        remote = bool(item.get("remote"))
        if wanted_location and wanted_location not in job_location.lower():
            if not (remote and wanted_location == "remote"):
                continue

        job_types = [clean_text(t) for t in item.get("job_types") or [] if clean_text(t)]
        created_at = item.get("created_at")
        posted = epoch_to_iso(created_at) if not isinstance(created_at, str) else optional_text(created_at)

        listings.append(
            JobListing(
                title=title,
                company=company,
                url=url,
                source="arbeitnow",
                location=job_location or ("Remote" if remote else ""),
                description=html_to_text(item.get("description")),
                job_type=", ".join(job_types) or None,
                posted_date_raw=posted,
            )
        )
    return listings


class ArbeitnowAdapter(SourceAdapter):
    name = "arbeitnow"

    def __init__(self, session: HttpSession):
        self.session = session

    def fetch_listings(self, query: str, location: str = "", page_count: int = 1) -> list[JobListing]:
        listings: list[JobListing] = []
        for page in range(1, max(page_count, 1) + 1):
            payload = self.session.get_json(API_URL, params={"page": page})
            if not isinstance(payload, dict):
                raise AdapterError(f"unexpected arbeitnow payload: {type(payload).__name__}")
            items = payload.get("data") or []
            if not items:
                break
            listings.extend(_build_listings(items, query=query, location=location))
        return listings
