from __future__ import annotations
import pytest

from job_aggregator.crawlers.base import JobListing
from job_aggregator.services.retry import RetryingOrchestrator


def _listing(n: int) -> JobListing:
    return JobListing(title=f"Engineer {n}", company="Acme", url=f"https://example.com/jobs/{n}", source="flaky")


class FlakyAdapter:
    name = "flaky"

    def __init__(self, failures: int):
        self.failures = failures
        self.calls = 0

    def fetch_listings(self, query, location="", page_count=1):
        self.calls += 1
        if self.calls <= self.failures:
            raise TimeoutError(f"timeout on call {self.calls}")
        return [_listing(self.calls)]


def test_succeeds_on_third_attempt_with_linear_backoff():
    sleeps: list[float] = []
    adapter = FlakyAdapter(failures=2)
    orchestrator = RetryingOrchestrator(max_retries=3, backoff=2.0, sleep=sleeps.append)

    listings = orchestrator.run(adapter, "python", "", 1)

    assert adapter.calls == 3
    assert [l.url for l in listings] == ["https://example.com/jobs/3"]
    assert sleeps == [2.0, 4.0]
    assert sum(sleeps) == 6.0
    assert orchestrator.last_attempts == 3


def test_final_failure_propagates_without_trailing_sleep():
    sleeps: list[float] = []
    adapter = FlakyAdapter(failures=10)
    orchestrator = RetryingOrchestrator(max_retries=3, backoff=2.0, sleep=sleeps.append)

    with pytest.raises(TimeoutError, match="call 3"):
        orchestrator.run(adapter, "python")

    assert adapter.calls == 3
    assert sleeps == [2.0, 4.0]


def test_first_success_does_not_sleep():
    sleeps: list[float] = []
    orchestrator = RetryingOrchestrator(max_retries=3, backoff=2.0, sleep=sleeps.append)

    assert len(orchestrator.run(FlakyAdapter(failures=0), "python")) == 1
    assert sleeps == []


def test_per_call_max_retries_overrides_default():
    sleeps: list[float] = []
    adapter = FlakyAdapter(failures=10)
    orchestrator = RetryingOrchestrator(max_retries=3, backoff=1.5, sleep=sleeps.append)

    with pytest.raises(TimeoutError):
        orchestrator.run(adapter, "python", max_retries=5)

    assert adapter.calls == 5
    assert sleeps == [1.5, 3.0, 4.5, 6.0]


def test_rejects_non_positive_retry_count():
    with pytest.raises(ValueError):
        RetryingOrchestrator(sleep=lambda _s: None).run(FlakyAdapter(failures=0), "python", max_retries=0)
