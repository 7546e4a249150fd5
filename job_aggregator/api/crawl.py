from __future__ import annotations
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from job_aggregator.crawlers.registry import available_sources
from job_aggregator.db.database import get_db
from job_aggregator.schemas.crawl import CrawlTriggerRequest, CrawlTriggerResponse
from job_aggregator.services.crawl_service import run_crawl

router = APIRouter(prefix="/crawl", tags=["crawl"])


@router.get("/sources")
def list_sources():
    return available_sources()


@router.post("/trigger", response_model=CrawlTriggerResponse)
def trigger(body: CrawlTriggerRequest, db: Session = Depends(get_db)):
    unknown = [name for name in body.sources or [] if name.strip().lower() not in available_sources()]
    if body.sources and len(unknown) == len(body.sources):
        raise HTTPException(status_code=400, detail=f"no known sources in {unknown}")

    digest = run_crawl(db, sources=body.sources, query=body.query, location=body.location, page_count=body.pages)
    return {
        "success": True,
        "message": "crawl completed",
        "total": digest["total"],
        "stored": digest["stored"],
        "sources": digest["sources"],
    }
