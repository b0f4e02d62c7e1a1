import os
from typing import Any, Dict

from pydantic import BaseModel, Field, field_validator

ENV_PREFIX = "NEWS_PLATFORM_"


class CrawlerSettings(BaseModel):
    """
    Runtime settings for the crawling subsystem.
    Defaults match production; every field can be overridden from the environment.
    """

    environment: str = Field(default="dev", pattern="^(dev|staging|prod)$")

    # HTTP
    user_agent: str = "Mozilla/5.0 (compatible; NewsBot/1.0)"
    request_timeout: float = Field(default=30.0, gt=0)
    http_retries: int = Field(default=2, ge=0)

    # Parsing
    streaming_threshold_bytes: int = 600_000
    selector_max_bytes: int = 550_000
    min_html_length: int = 100

    # Extraction
    fallback_content_chars: int = 2000
    max_detail_pages: int = Field(default=50, ge=1)
    detail_delay_seconds: float = Field(default=0.5, ge=0)

    # Job retries (applied by the Prefect task wrapping a crawl)
    job_retries: int = 3
    job_retry_delay_seconds: int = 60

    # Search index
    index_url: str = "http://elasticsearch:9200"
    index_name: str = "articles"

    @field_validator("selector_max_bytes")
    def selector_limit_below_threshold(cls, v, info):
        threshold = info.data.get("streaming_threshold_bytes")
        if threshold is not None and v > threshold:
            raise ValueError("selector_max_bytes must not exceed streaming_threshold_bytes")
        return v

    @field_validator("index_url")
    def strip_trailing_slash(cls, v):
        return v.rstrip("/")

    @classmethod
    def from_env(cls, environ: Dict[str, str] | None = None) -> "CrawlerSettings":
        """Build settings from `NEWS_PLATFORM_<FIELD>` variables.

        Example: NEWS_PLATFORM_REQUEST_TIMEOUT=10
        """
        environ = os.environ if environ is None else environ
        values: Dict[str, Any] = {}
        for name in cls.model_fields:
            raw = environ.get(f"{ENV_PREFIX}{name.upper()}")
            if raw is not None and raw != "":
                values[name] = raw
        return cls(**values)
