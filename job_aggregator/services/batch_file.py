from __future__ import annotations
import json
import logging
from collections.abc import Iterable
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path

from pydantic import ValidationError

from job_aggregator.core.config import settings
from job_aggregator.crawlers.base import JobListing
from job_aggregator.schemas.job import ListingRecord
from job_aggregator.services.dates import parse_absolute, to_iso

logger = logging.getLogger(__name__)


def listing_to_dict(listing: JobListing) -> dict:
    data = asdict(listing)
    canonical = listing.posted_date_canonical
    data["posted_date_canonical"] = to_iso(canonical) if canonical is not None else None
    return data


def default_filename(now: datetime | None = None) -> str:
    stamp = (now or datetime.now(timezone.utc)).strftime("%Y-%m-%dT%H-%M-%S-%fZ")
    return f"jobs_{stamp}.json"


def save_batch(
    listings: Iterable[JobListing],
    filename: str | None = None,
    output_dir: str | Path | None = None,
) -> Path:
    directory = Path(output_dir or settings.output_dir)
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / (filename or default_filename())

    records = [listing_to_dict(listing) for listing in listings]
    path.write_text(json.dumps(records, indent=2, ensure_ascii=False), encoding="utf-8")
    logger.info("Saved %d jobs to %s", len(records), path)
    return path


def record_to_listing(record: ListingRecord) -> JobListing:
    # Only an absolute raw date can be trusted here: the capture instant of a
    # relative phrase is unknown once it has been written to disk.
    canonical = parse_absolute(record.posted_date_canonical) or parse_absolute(record.posted_date_raw)
    return JobListing(
        title=record.title,
        company=record.company,
        url=record.url,
        source=record.source,
        location=record.location,
        description=record.description,
        salary=record.salary,
        job_type=record.job_type,
        experience_level=record.experience_level,
        logo=record.logo,
        posted_date_raw=record.posted_date_raw,
        posted_date_canonical=canonical,
    )


def load_batch(path: str | Path) -> list[JobListing]:
    path = Path(path)
    payload = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(payload, list):
        raise ValueError(f"{path} does not contain a JSON array of jobs")

    listings: list[JobListing] = []
    for index, item in enumerate(payload):
        try:
            record = ListingRecord.model_validate(item)
        except ValidationError as exc:
            logger.warning("Skipping record %d in %s: %s", index, path, exc.errors()[0].get("msg", exc))
            continue
        listings.append(record_to_listing(record))
    return listings
