"""Process-wide wiring of settings, store, registry, queue and orchestrator.

Flows call `get_runtime()`; tests and scripts install their own with
`set_runtime(build_runtime(...))`.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Iterable, Optional

from news_platform.core.config import CrawlerSettings
from news_platform.core.models import Source
from news_platform.crawlers.factory import build_default_registry
from news_platform.crawlers.registry import CrawlerRegistry
from news_platform.services.indexing import InMemoryIndexQueue, SearchIndexer
from news_platform.services.orchestrator import CrawlOrchestrator
from news_platform.services.storage_backends import CrawlStore, InMemoryCrawlStore

logger = logging.getLogger(__name__)


@dataclass
class Runtime:
    settings: CrawlerSettings
    store: CrawlStore
    registry: CrawlerRegistry
    index_queue: InMemoryIndexQueue
    indexer: SearchIndexer
    orchestrator: CrawlOrchestrator


def build_runtime(
    settings: Optional[CrawlerSettings] = None,
    store: Optional[CrawlStore] = None,
    registry: Optional[CrawlerRegistry] = None,
    sources: Iterable[Source] = (),
) -> Runtime:
    settings = settings or CrawlerSettings.from_env()
    store = store or InMemoryCrawlStore(sources)
    registry = registry or build_default_registry(settings)
    queue = InMemoryIndexQueue()
    logger.info("Crawlers registered: %s", registry.summary())
    return Runtime(
        settings=settings,
        store=store,
        registry=registry,
        index_queue=queue,
        indexer=SearchIndexer.from_settings(settings),
        orchestrator=CrawlOrchestrator(store, registry, queue),
    )


_runtime: Optional[Runtime] = None
_lock = threading.Lock()


def get_runtime() -> Runtime:
    global _runtime
    with _lock:
        if _runtime is None:
            _runtime = build_runtime()
        return _runtime


def set_runtime(runtime: Optional[Runtime]) -> None:
    """Install (or with None, reset) the process runtime."""
    global _runtime
    with _lock:
        _runtime = runtime
