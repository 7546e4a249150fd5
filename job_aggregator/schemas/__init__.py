from __future__ import annotations
from job_aggregator.schemas.job import JobOut, ListingRecord
from job_aggregator.schemas.run import CrawlRunOut
from job_aggregator.schemas.crawl import CrawlTriggerRequest, CrawlTriggerResponse, SourceReport
from job_aggregator.schemas.stats import StatsOut

__all__ = [
    "JobOut",
    "ListingRecord",
    "CrawlRunOut",
    "CrawlTriggerRequest",
    "CrawlTriggerResponse",
    "SourceReport",
    "StatsOut",
]
