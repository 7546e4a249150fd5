from __future__ import annotations
import itertools
import json
import logging
from datetime import datetime, timezone
from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from job_aggregator.crawlers.base import JobListing
from job_aggregator.db.database import Base
from job_aggregator.models.crawl_run import CrawlRun
from job_aggregator.models.job import Job
from job_aggregator.services.crawl_service import AggregationPipeline, run_crawl
from job_aggregator.services.retry import RetryingOrchestrator

CAPTURED_AT = datetime(2024, 1, 10, tzinfo=timezone.utc)


def _job(n: int, source: str, company: str = "Acme", location: str = "Remote", posted: str | None = None) -> JobListing:
    return JobListing(
        title=f"Engineer {n}",
        company=company,
        url=f"https://{source}.example.com/jobs/{n}",
        source=source,
        location=location,
        posted_date_raw=posted,
    )


class FakeAdapter:
    def __init__(self, name: str, listings: list[JobListing]):
        self.name = name
        self.listings = listings
        self.calls = 0

    def fetch_listings(self, query, location="", page_count=1):
        self.calls += 1
        return list(self.listings)


class BrokenAdapter:
    def __init__(self, name: str):
        self.name = name
        self.calls = 0

    def fetch_listings(self, query, location="", page_count=1):
        self.calls += 1
        raise ConnectionError("selector not found")


def _pipeline(registry: dict, sleeps: list[float]) -> AggregationPipeline:
    return AggregationPipeline(
        registry,
        orchestrator=RetryingOrchestrator(max_retries=3, backoff=2.0, sleep=sleeps.append),
        source_delay=2.0,
        sleep=sleeps.append,
        clock=lambda: CAPTURED_AT,
    )


def _session():
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    TestingSession = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    Base.metadata.create_all(bind=engine)
    return TestingSession()


def test_failing_source_is_isolated(caplog):
    sleeps: list[float] = []
    broken = BrokenAdapter("a")
    healthy = FakeAdapter("b", [_job(n, "b") for n in range(5)])
    pipeline = _pipeline({"a": broken, "b": healthy}, sleeps)

    with caplog.at_level(logging.ERROR):
        listings = pipeline.scrape(["a", "b"], "python")

    assert [l.url for l in listings] == [f"https://b.example.com/jobs/{n}" for n in range(5)]
    assert broken.calls == 3
    assert "Failed to scrape a" in caplog.text
    # two backoffs for "a", then one politeness delay before "b"
    assert sleeps == [2.0, 4.0, 2.0]


def test_unknown_sources_are_skipped(caplog):
    sleeps: list[float] = []
    pipeline = _pipeline({"b": FakeAdapter("b", [_job(1, "b")])}, sleeps)

    with caplog.at_level(logging.WARNING):
        results = pipeline.collect(["nope", "B"], "python")

    assert [(r.source, r.status) for r in results] == [("nope", "skipped"), ("b", "success")]
    assert "No adapter found for source: nope" in caplog.text
    assert sleeps == []


def test_listings_keep_source_order_and_get_canonical_dates():
    sleeps: list[float] = []
    registry = {
        "first": FakeAdapter("first", [_job(1, "first", posted="3d"), _job(2, "first", posted="whenever")]),
        "second": FakeAdapter("second", [_job(3, "second", posted=None), _job(4, "second", posted="2024-01-01")]),
    }
    listings = _pipeline(registry, sleeps).scrape(["first", "second"], "python")

    assert [l.source for l in listings] == ["first", "first", "second", "second"]
    assert [l.posted_date_canonical for l in listings] == [
        datetime(2024, 1, 7, tzinfo=timezone.utc),
        None,
        None,
        datetime(2024, 1, 1, tzinfo=timezone.utc),
    ]
    assert listings[0].posted_date_raw == "3d"


def test_invalid_listings_never_leave_the_pipeline():
    sleeps: list[float] = []
    adapter = FakeAdapter(
        "b",
        [
            _job(1, "b"),
            JobListing(title="  ", company="Acme", url="https://b.example.com/x", source="b"),
            JobListing(title="Dev", company="", url="https://b.example.com/y", source="b"),
            JobListing(title="Dev", company="Acme", url="", source="b"),
        ],
    )
    listings = _pipeline({"b": adapter}, sleeps).scrape(["b"], "python")
    assert [l.url for l in listings] == ["https://b.example.com/jobs/1"]


def test_stats_are_order_independent():
    listings = [
        _job(1, "a", company="Acme", location="Remote"),
        _job(2, "a", company="Beta", location="Berlin"),
        _job(3, "b", company="Acme", location="Remote"),
        _job(4, "c", company="Gamma", location="Remote"),
    ]
    expected = AggregationPipeline.stats(listings)

    assert expected.to_dict() == {
        "total": 4,
        "sources": {"a": 2, "b": 1, "c": 1},
        "topCompanies": {"Acme": 2, "Beta": 1, "Gamma": 1},
        "locations": {"Remote": 3, "Berlin": 1},
    }
    for permutation in itertools.permutations(listings):
        stats = AggregationPipeline.stats(permutation)
        assert stats == expected
        assert json.dumps(stats.to_dict()) == json.dumps(expected.to_dict())


def test_run_crawl_stores_dedupes_and_reports(tmp_path, monkeypatch):
    monkeypatch.setattr("job_aggregator.services.batch_file.settings.output_dir", str(tmp_path))
    db = _session()
    sleeps: list[float] = []
    registry = {
        "a": BrokenAdapter("a"),
        "b": FakeAdapter("b", [_job(1, "b", posted="2 days ago"), _job(2, "b"), _job(1, "b", company="Acme Inc")]),
    }

    digest = run_crawl(db, sources=["a", "b", "zzz"], query="python", pipeline=_pipeline(registry, sleeps))

    assert digest["total"] == 3
    assert digest["stored"] == 3
    assert [(s["source"], s["status"], s["fetched"]) for s in digest["sources"]] == [
        ("a", "failed", 0),
        ("b", "success", 3),
        ("zzz", "skipped", 0),
    ]
    assert "ConnectionError" in digest["sources"][0]["error"]
    assert db.query(Job).count() == 2
    assert db.query(Job).filter(Job.url == "https://b.example.com/jobs/1").one().company == "Acme Inc"

    runs = db.query(CrawlRun).order_by(CrawlRun.id).all()
    assert [(r.source, r.status, r.attempts) for r in runs] == [("a", "failed", 3), ("b", "success", 1)]

    batch_path = Path(digest["batch_file"])
    assert batch_path.parent == tmp_path
    written = json.loads(batch_path.read_text())
    assert len(written) == 3
    assert written[0]["posted_date_canonical"] == "2024-01-08T00:00:00.000Z"
    assert written[1]["posted_date_canonical"] is None


def test_run_crawl_survives_every_source_failing():
    db = _session()
    sleeps: list[float] = []
    registry = {"a": BrokenAdapter("a"), "b": BrokenAdapter("b")}

    digest = run_crawl(db, sources=["a", "b"], pipeline=_pipeline(registry, sleeps), write_batch=False)

    assert digest["total"] == 0
    assert digest["stats"]["total"] == 0
    assert {s["status"] for s in digest["sources"]} == {"failed"}
    assert db.query(CrawlRun).count() == 2
