from __future__ import annotations
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "Job Aggregator"
    env: str = "dev"
    api_prefix: str = "/api/v1"

    database_url: str = "sqlite:///./job_data/jobs.db"
    output_dir: str = "./job_data"

    request_timeout: float = 30.0
    user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    )

    max_retries: int = 3
    retry_backoff: float = 2.0
    source_delay: float = 2.0
    default_sources: list[str] = ["remotive", "remoteok", "arbeitnow"]

    log_level: str = "INFO"


settings = Settings()
