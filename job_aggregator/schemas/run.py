from __future__ import annotations
from datetime import datetime

from pydantic import BaseModel, ConfigDict


class CrawlRunOut(BaseModel):
    id: int
    source: str
    query: str
    location: str
    started_at: datetime | None
    finished_at: datetime | None
    fetched_count: int
    stored_count: int
    attempts: int
    status: str
    error_summary: str

    model_config = ConfigDict(from_attributes=True)
