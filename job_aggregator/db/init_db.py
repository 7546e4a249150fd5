from __future__ import annotations
from pathlib import Path

from sqlalchemy.engine import Engine, make_url

from job_aggregator.db.database import Base, engine as default_engine
from job_aggregator.models import crawl_run, job  # noqa: F401


def _ensure_sqlite_dir(engine: Engine) -> None:
    url = make_url(str(engine.url))
    if url.get_backend_name() == "sqlite" and url.database and url.database != ":memory:":
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)


def init_db(engine: Engine | None = None) -> None:
    engine = engine or default_engine
    _ensure_sqlite_dir(engine)
    Base.metadata.create_all(bind=engine)
