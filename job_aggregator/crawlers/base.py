from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class JobListing:
    title: str
    company: str
    url: str
    source: str
    location: str = ""
    description: str = ""
    salary: str | None = None
    job_type: str | None = None
    experience_level: str | None = None
    logo: str | None = None
    posted_date_raw: str | None = None
    posted_date_canonical: datetime | None = None

    def is_valid(self) -> bool:
        return all((value or "").strip() for value in (self.title, self.company, self.url))


@dataclass
class AdapterResult:
    source: str
    listings: list[JobListing] = field(default_factory=list)
    status: str = "success"
    attempts: int = 0
    error: str = ""
    started_at: datetime | None = None
    finished_at: datetime | None = None


class AdapterError(Exception):
    pass


class SourceAdapter:
    name: str

    def fetch_listings(self, query: str, location: str = "", page_count: int = 1) -> list[JobListing]:
        raise NotImplementedError
