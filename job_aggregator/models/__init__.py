from __future__ import annotations
from job_aggregator.models.crawl_run import CrawlRun
from job_aggregator.models.job import Job

__all__ = ["CrawlRun", "Job"]
