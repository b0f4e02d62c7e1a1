from datetime import datetime, timezone

import pytest

from news_platform.core.exceptions import InvalidTransitionError, PersistenceError
from news_platform.core.models import JobStatus
from news_platform.services.storage_backends import InMemoryCrawlStore


def test_job_lifecycle_is_enforced(make_source):
    store = InMemoryCrawlStore([make_source()])
    job = store.create_crawl_job(campaign_id=1, source_id=1)
    assert job.status is JobStatus.PENDING

    store.update_crawl_job(job.id, JobStatus.IN_PROGRESS)
    store.update_crawl_job(job.id, JobStatus.FAILED, error_message="boom")

    with pytest.raises(InvalidTransitionError):
        store.update_crawl_job(job.id, JobStatus.SUCCESS)
    assert store.get_crawl_job(job.id).error_message == "boom"

    with pytest.raises(PersistenceError):
        store.update_crawl_job(12345, JobStatus.IN_PROGRESS)


def test_articles_are_scoped_by_source(make_source, sample_articles):
    store = InMemoryCrawlStore([make_source(id=1), make_source(id=2)])
    first = store.save_article(1, 1, 1, sample_articles[0])
    store.save_article(1, 2, 2, sample_articles[1])

    assert store.get_article(first.id).article.title == "First"
    assert store.delete_articles_for_source(1) == 1
    assert [a.source_id for a in store.list_articles()] == [2]


def test_sources(make_source):
    store = InMemoryCrawlStore([make_source(id=1), make_source(id=2, is_active=False)])
    when = datetime(2024, 1, 1, tzinfo=timezone.utc)

    assert [s.id for s in store.list_sources(active_only=True)] == [1]
    assert store.update_source_last_crawled(1, when).last_crawled_at == when
    assert store.get_source(1).last_crawled_at == when
    with pytest.raises(PersistenceError):
        store.update_source_last_crawled(99, when)
