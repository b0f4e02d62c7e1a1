"""Records exchanged between crawlers, the orchestrator and storage."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from news_platform.core.exceptions import InvalidTransitionError

SUMMARY_LENGTH = 200


class SourceType(str, Enum):
    WEBSITE = "website"
    RSS = "rss"
    API = "api"


class JobStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    SUCCESS = "success"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.SUCCESS, JobStatus.FAILED)

    def can_transition_to(self, target: "JobStatus") -> bool:
        return target in _TRANSITIONS[self]


_TRANSITIONS = {
    JobStatus.PENDING: {JobStatus.IN_PROGRESS},
    JobStatus.IN_PROGRESS: {JobStatus.SUCCESS, JobStatus.FAILED},
    JobStatus.SUCCESS: set(),
    JobStatus.FAILED: set(),
}


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Source(BaseModel):
    """A configured news source.

    `source_type` is kept as a plain string: unknown types are valid records,
    they simply have no crawler willing to handle them.
    """

    id: int
    name: str
    base_url: str
    source_type: str = SourceType.WEBSITE.value
    crawl_interval_minutes: int = Field(default=60, ge=1)
    is_active: bool = True
    last_crawled_at: Optional[datetime] = None

    def is_due(self, now: Optional[datetime] = None) -> bool:
        """True when the source was never crawled or its interval elapsed."""
        if self.last_crawled_at is None:
            return True
        now = now or utcnow()
        next_crawl = self.last_crawled_at + timedelta(
            minutes=self.crawl_interval_minutes
        )
        return now >= next_crawl


class CrawlJob(BaseModel):
    id: int
    campaign_id: int
    source_id: int
    status: JobStatus = JobStatus.PENDING
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    total_articles: int = 0
    error_message: Optional[str] = None

    def advance(self, status: JobStatus, **fields: Any) -> "CrawlJob":
        """Return a copy moved to `status` with `fields` applied.

        Raises InvalidTransitionError for anything but
        pending -> in_progress -> success|failed.
        """
        status = JobStatus(status)
        if not self.status.can_transition_to(status):
            raise InvalidTransitionError(
                f"Crawl job {self.id} cannot move from {self.status.value} to {status.value}"
            )
        return self.model_copy(update={**fields, "status": status})


@dataclass(frozen=True)
class Article:
    """Normalized article produced by a crawler.

    `summary` is derived from `content` when not given explicitly.
    """

    title: str
    url: str
    content: str = ""
    author: Optional[str] = None
    published_at: Optional[datetime] = None
    summary: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if not self.summary and self.content:
            object.__setattr__(self, "summary", self.content[:SUMMARY_LENGTH])

    @property
    def is_fallback(self) -> bool:
        return bool(self.metadata.get("fallback"))


@dataclass(frozen=True)
class StoredArticle:
    """An Article once persisted, with the identifiers storage assigned."""

    id: int
    campaign_id: int
    source_id: int
    crawl_job_id: int
    article: Article
    created_at: datetime = field(default_factory=utcnow)

    def to_document(self) -> Dict[str, Any]:
        a = self.article
        return {
            "id": self.id,
            "campaign_id": self.campaign_id,
            "source_id": self.source_id,
            "crawl_job_id": self.crawl_job_id,
            "title": a.title,
            "content": a.content,
            "url": a.url,
            "author": a.author,
            "published_at": a.published_at.isoformat() if a.published_at else None,
            "summary": a.summary,
            "metadata": a.metadata,
            "created_at": self.created_at.isoformat(),
        }
