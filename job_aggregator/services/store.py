from __future__ import annotations
import logging
from collections.abc import Iterable
from datetime import datetime, timezone
from pathlib import Path

from sqlalchemy import desc
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from job_aggregator.crawlers.base import AdapterResult, JobListing
from job_aggregator.models.crawl_run import CrawlRun
from job_aggregator.models.job import Job
from job_aggregator.services.batch_file import load_batch
from job_aggregator.services.stats import AggregateStats, job_stats

logger = logging.getLogger(__name__)

OPTIONAL_FIELDS = ("salary", "job_type", "experience_level", "logo", "posted_date_raw")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _text(value) -> str:
    return str(value).strip() if value is not None else ""


def _optional(value) -> str | None:
    return _text(value) or None


def _naive_utc(value) -> datetime | None:
    if not isinstance(value, datetime):
        return None
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def clean_listing(listing: JobListing) -> dict:
    values = {
        "title": _text(listing.title),
        "company": _text(listing.company),
        "location": _text(listing.location),
        "description": _text(listing.description),
        "url": _text(listing.url),
        "source": _text(listing.source),
        "posted_at": _naive_utc(listing.posted_date_canonical),
    }
    for name in OPTIONAL_FIELDS:
        values[name] = _optional(getattr(listing, name))
    return values


class UpsertStore:

    def __init__(self, db: Session):
        self.db = db

    def _upsert(self, values: dict) -> Job:
        now = _utcnow()
        row = self.db.query(Job).filter(Job.url == values["url"]).first()
        if row is None:
            row = Job(**values, first_seen_at=now, last_seen_at=now)
            self.db.add(row)
        else:
            for key, value in values.items():
                setattr(row, key, value)
            row.last_seen_at = now
        self.db.commit()
        return row

    def upsert_all(self, listings: Iterable[JobListing]) -> int:
        stored = 0
        for listing in listings:
            if not listing.is_valid():
                continue
            try:
                self._upsert(clean_listing(listing))
            except Exception as exc:  # noqa: BLE001
                self.db.rollback()
                logger.error("Failed to store %s: %s", listing.url, exc)
                continue
            stored += 1
        return stored

    def import_file(self, path: str | Path) -> int:
        listings = load_batch(path)
        stored = self.upsert_all(listings)
        logger.info("Imported %d of %d jobs from %s", stored, len(listings), path)
        return stored

    def record_run(
        self, result: AdapterResult, query: str = "", location: str = "", stored_count: int = 0
    ) -> CrawlRun | None:
        run = CrawlRun(
            source=result.source,
            query=query,
            location=location,
            started_at=_naive_utc(result.started_at),
            finished_at=_naive_utc(result.finished_at),
            fetched_count=len(result.listings),
            stored_count=stored_count,
            attempts=result.attempts,
            status=result.status,
            error_summary=(result.error or "")[:2000],
        )
        try:
            self.db.add(run)
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("Failed to record crawl run for %s: %s", result.source, exc)
            return None
        self.db.refresh(run)
        return run

    def list_runs(self, limit: int = 100) -> list[CrawlRun]:
        return self.db.query(CrawlRun).order_by(desc(CrawlRun.id)).limit(limit).all()

    def count(self) -> int:
        return self.db.query(Job).count()

    def stats(self) -> AggregateStats:
        rows = self.db.query(Job.source, Job.company, Job.location).all()
        return job_stats(rows)
