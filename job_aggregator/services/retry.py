from __future__ import annotations
import logging
import time
from collections.abc import Callable

from job_aggregator.core.config import settings
from job_aggregator.crawlers.base import JobListing, SourceAdapter

logger = logging.getLogger(__name__)


class RetryingOrchestrator:
    def __init__(
        self,
        max_retries: int | None = None,
        backoff: float | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.max_retries = max_retries if max_retries is not None else settings.max_retries
        self.backoff = backoff if backoff is not None else settings.retry_backoff
        self.sleep = sleep
        self.last_attempts = 0

    def run(
        self,
        adapter: SourceAdapter,
        query: str,
        location: str = "",
        page_count: int = 1,
        max_retries: int | None = None,
    ) -> list[JobListing]:
        retries = max_retries if max_retries is not None else self.max_retries
        if retries < 1:
            raise ValueError(f"max_retries must be at least 1, got {retries}")

        self.last_attempts = 0
        for attempt in range(1, retries + 1):
            self.last_attempts = attempt
            try:
                return list(adapter.fetch_listings(query, location, page_count))
            except Exception as exc:  # noqa: BLE001
                logger.warning("[%s] attempt %d/%d failed: %s", adapter.name, attempt, retries, exc)
                if attempt == retries:
                    raise
                # linear backoff: attempt i waits backoff * i
                self.sleep(self.backoff * attempt)
        raise RuntimeError(f"[{adapter.name}] all retry attempts failed")
