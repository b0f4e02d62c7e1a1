"""
Crawl flows.

`run_crawl_flow` crawls one source for a campaign; `schedule_crawls_flow` is
the periodic tick: it picks every active source whose crawl interval has
elapsed and submits one `crawl_source_task` per source, so sources are
crawled concurrently on Prefect's task runner while each job stays
sequential.

A crawl task that fails is retried by Prefect (`job_retries` times,
`job_retry_delay_seconds` apart). Retrying is safe because every attempt
replaces the source's articles.
"""

from __future__ import annotations

from datetime import datetime
from typing import Dict, Iterable, List, Optional

from prefect import flow, task

from news_platform.core.config import CrawlerSettings
from news_platform.core.logs import get_logger
from news_platform.core.models import Source, utcnow
from news_platform.flows.indexing_flow import index_articles_flow
from news_platform.services.runtime import build_runtime, get_runtime, set_runtime


def due_sources(sources: Iterable[Source], now: Optional[datetime] = None) -> List[Source]:
    """Active sources never crawled, or whose interval has elapsed."""
    now = now or utcnow()
    return [s for s in sources if s.is_active and s.is_due(now)]


@task(name="crawl_source", retries=3, retry_delay_seconds=60)
def crawl_source_task(campaign_id: int, source_id: int) -> dict:
    """One CrawlJob. Raises on failure so Prefect retries it."""
    job = get_runtime().orchestrator.run(campaign_id, source_id)
    return job.model_dump(mode="json")


def configured_crawl_task(settings: CrawlerSettings):
    return crawl_source_task.with_options(
        retries=settings.job_retries,
        retry_delay_seconds=settings.job_retry_delay_seconds,
    )


@flow(name="Crawl Source")
def run_crawl_flow(campaign_id: int, source_id: int, index: bool = True) -> dict:
    logger = get_logger(__name__)
    runtime = get_runtime()
    logger.info("Crawling source %s for campaign %s", source_id, campaign_id)

    job = configured_crawl_task(runtime.settings)(campaign_id, source_id)
    logger.info(
        "Crawl job %s finished: %s (%s articles)",
        job["id"],
        job["status"],
        job["total_articles"],
    )

    if index:
        index_articles_flow()
    return job


@flow(name="Schedule Crawls")
def schedule_crawls_flow(campaign_id: int, index: bool = True) -> Dict[int, str]:
    """Crawl every due source; returns `{source_id: final state name}`."""
    logger = get_logger(__name__)
    runtime = get_runtime()
    sources = due_sources(runtime.store.list_sources(active_only=True))
    if not sources:
        logger.info("No sources due for crawling")
        return {}

    crawl = configured_crawl_task(runtime.settings)
    futures = {s.id: crawl.submit(campaign_id, s.id) for s in sources}
    logger.info("Dispatched %d crawl jobs", len(futures))

    results: Dict[int, str] = {}
    for source_id, future in futures.items():
        future.wait()
        state = future.state
        results[source_id] = state.name
        if not state.is_completed():
            logger.warning("Crawl of source %s ended in state %s", source_id, state.name)

    if index:
        index_articles_flow()
    return results


# ==========================================
# LOCAL RUN (for manual testing)
# ==========================================
if __name__ == "__main__":
    sample_sources = [
        Source(id=1, name="BBC News", base_url="https://www.bbc.com/news", source_type="website"),
        Source(id=2, name="CNN", base_url="https://edition.cnn.com", source_type="website"),
        Source(
            id=3,
            name="Hacker News",
            base_url="https://hnrss.org/frontpage",
            source_type="rss",
        ),
    ]
    set_runtime(build_runtime(sources=sample_sources))
    print(schedule_crawls_flow(campaign_id=1, index=False))
