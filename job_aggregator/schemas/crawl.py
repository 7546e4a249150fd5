from __future__ import annotations
from pydantic import BaseModel, Field


class CrawlTriggerRequest(BaseModel):
    sources: list[str] | None = None
    query: str = "developer"
    location: str = ""
    pages: int = Field(default=1, ge=1, le=20)


class SourceReport(BaseModel):
    source: str
    status: str
    fetched: int
    stored: int
    attempts: int
    error: str = ""


class CrawlTriggerResponse(BaseModel):
    success: bool
    message: str
    total: int
    stored: int
    sources: list[SourceReport]
