from __future__ import annotations
import logging
import time
from collections.abc import Callable, Iterable, Mapping
from dataclasses import replace
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from job_aggregator.core.config import settings
from job_aggregator.crawlers.base import AdapterResult, JobListing, SourceAdapter
from job_aggregator.crawlers.http_helpers import HttpSession
from job_aggregator.crawlers.registry import build_registry
from job_aggregator.services.batch_file import save_batch
from job_aggregator.services.dates import parse_posted_date
from job_aggregator.services.retry import RetryingOrchestrator
from job_aggregator.services.stats import AggregateStats, job_stats
from job_aggregator.services.store import UpsertStore

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def normalize_listings(listings: Iterable[JobListing], reference: datetime) -> list[JobListing]:
    normalized: list[JobListing] = []
    dropped = 0
    for listing in listings:
        if not listing.is_valid():
            dropped += 1
            continue
        canonical = parse_posted_date(listing.posted_date_raw, reference)
        normalized.append(replace(listing, posted_date_canonical=canonical))
    if dropped:
        logger.debug("Dropped %d listings missing title, company or url", dropped)
    return normalized


class AggregationPipeline:
    def __init__(
        self,
        registry: Mapping[str, SourceAdapter],
        orchestrator: RetryingOrchestrator | None = None,
        source_delay: float | None = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.registry = registry
        self.orchestrator = orchestrator or RetryingOrchestrator(sleep=sleep)
        self.source_delay = source_delay if source_delay is not None else settings.source_delay
        self.sleep = sleep
        self.clock = clock

    def collect(
        self, sources: Iterable[str], query: str, location: str = "", page_count: int = 1
    ) -> list[AdapterResult]:
        captured_at = self.clock()
        results: list[AdapterResult] = []
        ran_any = False

        for name in sources:
            key = name.strip().lower()
            adapter = self.registry.get(key)
            if adapter is None:
                logger.warning("No adapter found for source: %s", name)
                results.append(AdapterResult(source=key, status="skipped", error="unknown source"))
                continue

            if ran_any:
                # politeness delay between sources, whatever the last one did
                self.sleep(self.source_delay)
            ran_any = True

            result = AdapterResult(source=key, started_at=self.clock())
            logger.info("Starting to scrape %s...", key)
            try:
                raw = self.orchestrator.run(adapter, query, location, page_count)
            except Exception as exc:  # noqa: BLE001
                result.status = "failed"
                result.error = f"{type(exc).__name__}: {exc}"
                logger.error("Failed to scrape %s: %s", key, exc)
            else:
                result.listings = normalize_listings(raw, captured_at)
                logger.info("Successfully scraped %d jobs from %s", len(result.listings), key)
            result.attempts = self.orchestrator.last_attempts
            result.finished_at = self.clock()
            results.append(result)

        return results

    def scrape(self, sources: Iterable[str], query: str, location: str = "", page_count: int = 1) -> list[JobListing]:
        results = self.collect(sources, query, location, page_count)
        return [listing for result in results for listing in result.listings]

    @staticmethod
    def stats(listings: Iterable[JobListing]) -> AggregateStats:
        return job_stats(listings)


def run_crawl(
    db: Session,
    sources: list[str] | None = None,
    query: str = "developer",
    location: str = "",
    page_count: int = 1,
    batch_filename: str | None = None,
    write_batch: bool = True,
    pipeline: AggregationPipeline | None = None,
) -> dict:
    sources = sources or list(settings.default_sources)
    store = UpsertStore(db)
    session: HttpSession | None = None

    try:
        if pipeline is None:
            session = HttpSession().open()
            pipeline = AggregationPipeline(build_registry(session))
        results = pipeline.collect(sources, query, location, page_count)
    finally:
        if session is not None:
            session.close()

    source_stats: list[dict] = []
    listings: list[JobListing] = []
    total_stored = 0
    for result in results:
        stored = store.upsert_all(result.listings) if result.listings else 0
        total_stored += stored
        listings.extend(result.listings)
        if result.status != "skipped":
            store.record_run(result, query=query, location=location, stored_count=stored)
        source_stats.append(
            {
                "source": result.source,
                "status": result.status,
                "fetched": len(result.listings),
                "stored": stored,
                "attempts": result.attempts,
                "error": result.error,
            }
        )

    digest = {
        "total": len(listings),
        "stored": total_stored,
        "sources": source_stats,
        "stats": pipeline.stats(listings).to_dict(),
        "batch_file": None,
    }
    if write_batch:
        digest["batch_file"] = str(save_batch(listings, filename=batch_filename))

    logger.info("Crawl complete: %d jobs from %d source(s), %d stored", len(listings), len(results), total_stored)
    return digest
