from __future__ import annotations
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Query

from job_aggregator.api.deps import get_store
from job_aggregator.models.job import Job
from job_aggregator.schemas.job import JobOut
from job_aggregator.schemas.stats import StatsOut
from job_aggregator.services.dates import relative_between, to_relative
from job_aggregator.services.store import UpsertStore

router = APIRouter(prefix="/jobs", tags=["jobs"])


def _job_payload(job: Job) -> dict:
    payload = JobOut.model_validate(job).model_dump()
    # display form; posted_at stays the sortable absolute value
    if job.posted_at is not None:
        payload["posted"] = relative_between(job.posted_at, datetime.now(timezone.utc))
    else:
        payload["posted"] = to_relative(job.posted_date_raw)
    return payload


@router.get("")
def list_jobs(
    q: str | None = None,
    source: str | None = None,
    limit: int = Query(default=50, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    store: UpsertStore = Depends(get_store),
):
    query = store.db.query(Job)
    if q:
        like = f"%{q}%"
        query = query.filter((Job.title.ilike(like)) | (Job.company.ilike(like)) | (Job.description.ilike(like)))
    if source:
        query = query.filter(Job.source == source)

    rows = query.order_by(Job.posted_at.desc().nulls_last(), Job.id.desc()).offset(offset).limit(limit).all()
    return [_job_payload(job) for job in rows]


@router.get("/stats", response_model=StatsOut, response_model_by_alias=True)
def job_stats(store: UpsertStore = Depends(get_store)):
    stats = store.stats()
    return StatsOut(
        total=stats.total,
        sources=stats.sources,
        top_companies=stats.top_companies,
        locations=stats.locations,
    )


@router.get("/{job_id}")
def get_job(job_id: int, store: UpsertStore = Depends(get_store)):
    job = store.db.query(Job).filter(Job.id == job_id).first()
    if not job:
        raise HTTPException(status_code=404, detail="job not found")
    return _job_payload(job)
