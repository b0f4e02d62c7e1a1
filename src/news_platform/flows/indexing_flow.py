"""Indexing flow: drains the index queue and pushes each article to search.

Indexing never affects crawl jobs. A failed article is retried by Prefect and
then reported; the remaining articles are still indexed.
"""

from __future__ import annotations

from typing import Dict

from prefect import flow, task

from news_platform.core.logs import get_logger
from news_platform.services.runtime import get_runtime


@task(name="index_article", retries=3, retry_delay_seconds=10)
def index_article_task(article_id: int) -> bool:
    """Index one stored article. Returns False when it no longer exists."""
    logger = get_logger(__name__)
    runtime = get_runtime()
    stored = runtime.store.get_article(article_id)
    if stored is None:
        # replaced by a newer crawl before we got to it
        logger.info("Article %s is gone, skipping", article_id)
        return False
    runtime.indexer.index_article(stored)
    return True


@flow(name="Index Articles")
def index_articles_flow() -> Dict[str, int]:
    logger = get_logger(__name__)
    article_ids = get_runtime().index_queue.drain()
    if not article_ids:
        logger.info("Nothing to index")
        return {"indexed": 0, "skipped": 0, "failed": 0}

    summary = {"indexed": 0, "skipped": 0, "failed": 0}
    for article_id in article_ids:
        state = index_article_task(article_id, return_state=True)
        if not state.is_completed():
            logger.error("Indexing article %s failed: %s", article_id, state.message)
            summary["failed"] += 1
        elif state.result():
            summary["indexed"] += 1
        else:
            summary["skipped"] += 1

    logger.info("Indexing finished: %s", summary)
    return summary
