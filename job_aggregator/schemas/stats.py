from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field


class StatsOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total: int
    sources: dict[str, int]
    top_companies: dict[str, int] = Field(serialization_alias="topCompanies")
    locations: dict[str, int]
