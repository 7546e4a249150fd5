from __future__ import annotations
from fastapi import Depends
from sqlalchemy.orm import Session

from job_aggregator.db.database import get_db
from job_aggregator.services.store import UpsertStore


def get_store(db: Session = Depends(get_db)) -> UpsertStore:
    return UpsertStore(db)
