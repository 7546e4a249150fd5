from __future__ import annotations
from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class JobOut(BaseModel):
    id: int
    url: str
    source: str
    title: str
    company: str
    location: str
    description: str
    salary: str | None
    job_type: str | None
    experience_level: str | None
    logo: str | None
    posted_date_raw: str | None
    posted_at: datetime | None
    first_seen_at: datetime
    last_seen_at: datetime

    model_config = ConfigDict(from_attributes=True)


# Batch file entry. Older exports use camelCase keys.
class ListingRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    title: str
    company: str
    url: str
    source: str = ""
    location: str = ""
    description: str = ""
    salary: str | None = None
    job_type: str | None = Field(default=None, validation_alias=AliasChoices("job_type", "jobType"))
    experience_level: str | None = Field(
        default=None, validation_alias=AliasChoices("experience_level", "experienceLevel")
    )
    logo: str | None = None
    posted_date_raw: str | None = Field(
        default=None, validation_alias=AliasChoices("posted_date_raw", "postedDateRaw", "postedDate")
    )
    posted_date_canonical: str | None = Field(
        default=None, validation_alias=AliasChoices("posted_date_canonical", "postedDateCanonical")
    )

    @field_validator("location", "description", "source", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("salary", "job_type", "experience_level", "logo", "posted_date_raw", mode="before")
    @classmethod
    def _scalar_to_str(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value
