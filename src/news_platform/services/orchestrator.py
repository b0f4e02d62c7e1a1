"""Per-job crawl driver: resolve -> extract -> persist -> index.

One `run()` call is one CrawlJob. The job moves
pending -> in_progress -> success|failed and every unrecovered error is
re-raised after the job is marked failed, so the surrounding Prefect task
can retry. Articles of the source are replaced on every attempt, which is
what makes those retries idempotent.
"""

from __future__ import annotations

from datetime import datetime
from typing import Callable, List

from news_platform.core.exceptions import CrawlError, NewsPlatformError
from news_platform.core.logs import get_logger
from news_platform.core.models import CrawlJob, JobStatus, Source, StoredArticle, utcnow
from news_platform.crawlers.registry import CrawlerRegistry
from news_platform.services.indexing import IndexQueue
from news_platform.services.storage_backends import CrawlStore


class CrawlOrchestrator:
    def __init__(
        self,
        store: CrawlStore,
        registry: CrawlerRegistry,
        index_queue: IndexQueue,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.store = store
        self.registry = registry
        self.index_queue = index_queue
        self.clock = clock

    def run(self, campaign_id: int, source_id: int) -> CrawlJob:
        logger = get_logger(__name__)
        source = self.store.get_source(source_id)
        if source is None:
            raise CrawlError(f"Unknown source: {source_id}")

        job = self.store.create_crawl_job(campaign_id, source.id)
        job = self.store.update_crawl_job(
            job.id, JobStatus.IN_PROGRESS, started_at=self.clock()
        )
        logger.info(
            "Crawl job %s started (campaign_id=%s, source_id=%s, url=%s)",
            job.id,
            campaign_id,
            source.id,
            source.base_url,
        )

        try:
            stored = self._crawl(job, source)
            finished_at = self.clock()
            job = self.store.update_crawl_job(
                job.id,
                JobStatus.SUCCESS,
                total_articles=len(stored),
                finished_at=finished_at,
            )
            self.store.update_source_last_crawled(source.id, finished_at)
        except Exception as exc:
            self._fail(job, exc)
            raise

        logger.info("Crawl job %s completed with %d articles", job.id, len(stored))
        return job

    def _crawl(self, job: CrawlJob, source: Source) -> List[StoredArticle]:
        logger = get_logger(__name__)
        crawler = self.registry.resolve(source)
        logger.info("Using %s for source %s", crawler.name, source.id)

        removed = self.store.delete_articles_for_source(source.id)
        if removed:
            logger.info("Removed %d previous articles of source %s", removed, source.id)

        articles = crawler.extract(source)

        stored = [
            self.store.save_article(job.campaign_id, source.id, job.id, article)
            for article in articles
        ]
        for item in stored:
            self._signal_indexing(item)
        return stored

    def _signal_indexing(self, stored: StoredArticle) -> None:
        try:
            self.index_queue.enqueue(stored.id)
        except Exception as exc:
            get_logger(__name__).warning(
                "Could not queue article %s for indexing: %s", stored.id, exc
            )

    def _fail(self, job: CrawlJob, exc: BaseException) -> None:
        logger = get_logger(__name__)
        logger.error("Crawl job %s failed: %s", job.id, exc)
        try:
            self.store.update_crawl_job(
                job.id,
                JobStatus.FAILED,
                error_message=str(exc) or type(exc).__name__,
                finished_at=self.clock(),
            )
        except NewsPlatformError as store_exc:
            logger.error("Could not mark crawl job %s as failed: %s", job.id, store_exc)
