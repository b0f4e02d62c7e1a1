from __future__ import annotations

import itertools
import threading
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from news_platform.core.exceptions import PersistenceError
from news_platform.core.models import (
    Article,
    CrawlJob,
    JobStatus,
    Source,
    StoredArticle,
)


class CrawlStore(ABC):
    """Persistence boundary for sources, crawl jobs and articles.

    The orchestrator only talks to this interface; schema and transport are
    up to the implementation.
    """

    @abstractmethod
    def get_source(self, source_id: int) -> Optional[Source]:
        raise NotImplementedError()

    @abstractmethod
    def list_sources(self, active_only: bool = False) -> List[Source]:
        raise NotImplementedError()

    @abstractmethod
    def update_source_last_crawled(self, source_id: int, when: datetime) -> Source:
        raise NotImplementedError()

    @abstractmethod
    def create_crawl_job(self, campaign_id: int, source_id: int) -> CrawlJob:
        """Create a job in `pending` status."""
        raise NotImplementedError()

    @abstractmethod
    def get_crawl_job(self, job_id: int) -> Optional[CrawlJob]:
        raise NotImplementedError()

    @abstractmethod
    def update_crawl_job(self, job_id: int, status: JobStatus, **fields: Any) -> CrawlJob:
        """Move a job to `status`, applying `fields`.

        Illegal transitions raise InvalidTransitionError.
        """
        raise NotImplementedError()

    @abstractmethod
    def delete_articles_for_source(self, source_id: int) -> int:
        """Drop every stored article of a source; returns how many went."""
        raise NotImplementedError()

    @abstractmethod
    def save_article(
        self, campaign_id: int, source_id: int, crawl_job_id: int, article: Article
    ) -> StoredArticle:
        raise NotImplementedError()

    @abstractmethod
    def get_article(self, article_id: int) -> Optional[StoredArticle]:
        raise NotImplementedError()

    @abstractmethod
    def list_articles(self, source_id: Optional[int] = None) -> List[StoredArticle]:
        raise NotImplementedError()


class InMemoryCrawlStore(CrawlStore):
    """Process-local store used for local runs and tests.

    A single lock guards every mapping, so concurrent task runs for
    different sources can share one instance.
    """

    def __init__(self, sources: Iterable[Source] = ()):
        self._lock = threading.RLock()
        self._sources: Dict[int, Source] = {}
        self._jobs: Dict[int, CrawlJob] = {}
        self._articles: Dict[int, StoredArticle] = {}
        self._job_ids = itertools.count(1)
        self._article_ids = itertools.count(1)
        for source in sources:
            self.add_source(source)

    def add_source(self, source: Source) -> Source:
        with self._lock:
            self._sources[source.id] = source
        return source

    def get_source(self, source_id: int) -> Optional[Source]:
        with self._lock:
            return self._sources.get(source_id)

    def list_sources(self, active_only: bool = False) -> List[Source]:
        with self._lock:
            sources = list(self._sources.values())
        if active_only:
            sources = [s for s in sources if s.is_active]
        return sources

    def update_source_last_crawled(self, source_id: int, when: datetime) -> Source:
        with self._lock:
            source = self._require(self._sources, source_id, "source")
            updated = source.model_copy(update={"last_crawled_at": when})
            self._sources[source_id] = updated
            return updated

    def create_crawl_job(self, campaign_id: int, source_id: int) -> CrawlJob:
        with self._lock:
            job = CrawlJob(
                id=next(self._job_ids), campaign_id=campaign_id, source_id=source_id
            )
            self._jobs[job.id] = job
            return job

    def get_crawl_job(self, job_id: int) -> Optional[CrawlJob]:
        with self._lock:
            return self._jobs.get(job_id)

    def list_crawl_jobs(self, source_id: Optional[int] = None) -> List[CrawlJob]:
        with self._lock:
            jobs = list(self._jobs.values())
        if source_id is not None:
            jobs = [j for j in jobs if j.source_id == source_id]
        return jobs

    def update_crawl_job(self, job_id: int, status: JobStatus, **fields: Any) -> CrawlJob:
        with self._lock:
            job = self._require(self._jobs, job_id, "crawl job")
            updated = job.advance(status, **fields)
            self._jobs[job_id] = updated
            return updated

    def delete_articles_for_source(self, source_id: int) -> int:
        with self._lock:
            doomed = [k for k, a in self._articles.items() if a.source_id == source_id]
            for key in doomed:
                del self._articles[key]
            return len(doomed)

    def save_article(
        self, campaign_id: int, source_id: int, crawl_job_id: int, article: Article
    ) -> StoredArticle:
        with self._lock:
            stored = StoredArticle(
                id=next(self._article_ids),
                campaign_id=campaign_id,
                source_id=source_id,
                crawl_job_id=crawl_job_id,
                article=article,
            )
            self._articles[stored.id] = stored
            return stored

    def get_article(self, article_id: int) -> Optional[StoredArticle]:
        with self._lock:
            return self._articles.get(article_id)

    def list_articles(self, source_id: Optional[int] = None) -> List[StoredArticle]:
        with self._lock:
            articles = list(self._articles.values())
        if source_id is not None:
            articles = [a for a in articles if a.source_id == source_id]
        return articles

    @staticmethod
    def _require(mapping: Dict[int, Any], key: int, kind: str):
        try:
            return mapping[key]
        except KeyError:
            raise PersistenceError(f"Unknown {kind}: {key}") from None
