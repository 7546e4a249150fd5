from __future__ import annotations
from datetime import datetime, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from job_aggregator.crawlers.base import AdapterResult, JobListing
from job_aggregator.db.database import Base
from job_aggregator.models.crawl_run import CrawlRun
from job_aggregator.models.job import Job
from job_aggregator.services.store import UpsertStore, clean_listing


def _session():
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    TestingSession = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    Base.metadata.create_all(bind=engine)
    return TestingSession()


def _listing(**overrides) -> JobListing:
    values = dict(
        title="Senior Python Engineer",
        company="Acme",
        url="https://example.com/jobs/1",
        source="remotive",
        location="Remote",
        description="Build things",
    )
    values.update(overrides)
    return JobListing(**values)


@pytest.mark.parametrize(
    "overrides",
    [{"title": ""}, {"company": ""}, {"url": ""}, {"title": "   "}, {"url": "  "}],
)
def test_listing_missing_required_field_is_not_stored(overrides):
    db = _session()
    stored = UpsertStore(db).upsert_all([_listing(**overrides)])
    assert stored == 0
    assert db.query(Job).count() == 0


def test_same_url_twice_keeps_one_row_with_last_values():
    db = _session()
    store = UpsertStore(db)

    store.upsert_all([_listing(salary="100k")])
    store.upsert_all([_listing(title="Staff Python Engineer", salary="", location="Berlin")])

    rows = db.query(Job).all()
    assert len(rows) == 1
    assert rows[0].title == "Staff Python Engineer"
    assert rows[0].location == "Berlin"
    assert rows[0].salary is None
    assert rows[0].last_seen_at >= rows[0].first_seen_at


def test_upsert_is_idempotent():
    db = _session()
    store = UpsertStore(db)
    for _ in range(3):
        store.upsert_all([_listing(), _listing(url="https://example.com/jobs/2")])
    assert db.query(Job).count() == 2


def test_fields_are_trimmed_and_empty_optionals_become_none():
    values = clean_listing(
        _listing(
            title="  Dev  ",
            company=" Acme ",
            url=" https://example.com/jobs/1 ",
            salary="  ",
            job_type="",
            logo=None,
            experience_level=" Senior ",
        )
    )
    assert values["title"] == "Dev"
    assert values["company"] == "Acme"
    assert values["url"] == "https://example.com/jobs/1"
    assert values["salary"] is None
    assert values["job_type"] is None
    assert values["logo"] is None
    assert values["experience_level"] == "Senior"


def test_missing_canonical_date_is_stored_as_null_not_now():
    db = _session()
    UpsertStore(db).upsert_all([_listing(posted_date_raw="whenever", posted_date_canonical=None)])
    assert db.query(Job).one().posted_at is None


def test_canonical_date_is_stored_as_naive_utc():
    db = _session()
    posted = datetime(2024, 1, 7, tzinfo=timezone.utc)
    UpsertStore(db).upsert_all([_listing(posted_date_canonical=posted)])
    assert db.query(Job).one().posted_at == datetime(2024, 1, 7)


def test_one_failing_record_does_not_block_the_rest(monkeypatch):
    db = _session()
    store = UpsertStore(db)
    original = store._upsert

    def flaky(values):
        if values["url"].endswith("/2"):
            raise RuntimeError("disk full")
        return original(values)

    monkeypatch.setattr(store, "_upsert", flaky)
    stored = store.upsert_all([_listing(url=f"https://example.com/jobs/{n}") for n in (1, 2, 3)])

    assert stored == 2
    assert sorted(row.url for row in db.query(Job).all()) == [
        "https://example.com/jobs/1",
        "https://example.com/jobs/3",
    ]


def test_record_run_and_stats():
    db = _session()
    store = UpsertStore(db)
    store.upsert_all(
        [
            _listing(url="https://example.com/jobs/1", company="Acme"),
            _listing(url="https://example.com/jobs/2", company="Acme", source="remoteok"),
            _listing(url="https://example.com/jobs/3", company="Beta", location="Berlin"),
        ]
    )
    result = AdapterResult(source="remotive", listings=[_listing()], attempts=2, status="success")
    store.record_run(result, query="python", stored_count=1)

    run = db.query(CrawlRun).one()
    assert (run.source, run.query, run.fetched_count, run.stored_count, run.attempts) == ("remotive", "python", 1, 1, 2)
    assert store.list_runs()[0].id == run.id

    stats = store.stats()
    assert stats.total == 3
    assert stats.sources == {"remotive": 2, "remoteok": 1}
    assert stats.top_companies == {"Acme": 2, "Beta": 1}
    assert stats.locations == {"Remote": 2, "Berlin": 1}


def test_free_text_columns_have_no_length_cap():
    for name in ("title", "company", "location", "salary", "job_type", "experience_level", "logo", "posted_date_raw"):
        assert getattr(Job.__table__.c[name].type, "length", None) is None, name


def test_long_free_text_values_are_stored_whole():
    db = _session()
    salary = "USD 120,000 - 150,000 plus equity, " * 20
    raw = "Posted a while back, reposted " * 20
    UpsertStore(db).upsert_all([_listing(salary=salary, posted_date_raw=raw, job_type="Full time " * 30)])

    row = db.query(Job).one()
    assert row.salary == salary.strip()
    assert row.posted_date_raw == raw.strip()
    assert len(row.job_type) > 128
