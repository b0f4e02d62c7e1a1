"""Search indexing: the queue the orchestrator signals and the HTTP indexer.

The orchestrator only ever calls `IndexQueue.enqueue(article_id)`. Draining
the queue and pushing documents to the search engine happens in
`news_platform.flows.indexing_flow`.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from collections import deque
from typing import Deque, List, Optional

import requests

from news_platform.core.exceptions import PersistenceError
from news_platform.core.models import StoredArticle

logger = logging.getLogger(__name__)


class IndexQueue(ABC):
    @abstractmethod
    def enqueue(self, article_id: int) -> None:
        """Signal that a stored article needs (re)indexing."""
        raise NotImplementedError()


class InMemoryIndexQueue(IndexQueue):
    """FIFO of article ids, safe to share between task runs."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._pending: Deque[int] = deque()

    def enqueue(self, article_id: int) -> None:
        with self._lock:
            self._pending.append(article_id)

    def drain(self) -> List[int]:
        """Remove and return every pending id, oldest first."""
        with self._lock:
            ids = list(self._pending)
            self._pending.clear()
        return ids

    def __len__(self) -> int:
        with self._lock:
            return len(self._pending)


class SearchIndexer:
    """PUTs article documents to `<base_url>/<index>/_doc/<id>`."""

    def __init__(
        self,
        base_url: str,
        index: str = "articles",
        timeout: float = 10,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.index = index
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls, settings, session: Optional[requests.Session] = None):
        return cls(settings.index_url, settings.index_name, session=session)

    def document_url(self, article_id: int) -> str:
        return f"{self.base_url}/{self.index}/_doc/{article_id}"

    def index_article(self, stored: StoredArticle) -> dict:
        url = self.document_url(stored.id)
        logger.info("Indexing article %s into %s", stored.id, self.index)
        try:
            resp = self.session.put(url, json=stored.to_document(), timeout=self.timeout)
        except requests.RequestException as exc:
            raise PersistenceError(f"Failed to index article {stored.id}: {exc}") from exc

        if not 200 <= resp.status_code < 300:
            logger.error(
                "Failed to index article %s (status=%s): %s",
                stored.id,
                resp.status_code,
                resp.text[:500],
            )
            raise PersistenceError(
                f"Failed to index article {stored.id}: {resp.status_code}"
            )
        return resp.json() if resp.content else {}
