from __future__ import annotations
from fastapi import APIRouter, Depends, Query

from job_aggregator.api.deps import get_store
from job_aggregator.schemas.run import CrawlRunOut
from job_aggregator.services.store import UpsertStore

router = APIRouter(prefix="/runs", tags=["runs"])


@router.get("", response_model=list[CrawlRunOut])
def get_runs(
    limit: int = Query(default=100, ge=1, le=500),
    store: UpsertStore = Depends(get_store),
):
    return store.list_runs(limit)
