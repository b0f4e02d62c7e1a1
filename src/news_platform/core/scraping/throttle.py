"""Pacing helpers for multi-page crawls.

`BoundedWorkList` hands out at most `max_items` distinct items and asks its
`RateLimiter` to wait before each one after the first. Crawlers following
listing -> detail links iterate over it instead of looping with ad hoc sleeps.
"""

from __future__ import annotations

import time
from typing import Callable, Generic, Iterable, Iterator, List, Optional, TypeVar

T = TypeVar("T")


class RateLimiter:
    """Enforces a minimum interval between consecutive `wait()` calls."""

    def __init__(
        self,
        min_interval: float,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.min_interval = max(0.0, float(min_interval))
        self._sleep = sleep
        self._clock = clock
        self._last: Optional[float] = None

    def wait(self) -> float:
        """Block until the interval since the previous call elapsed.

        Returns the number of seconds slept.
        """
        slept = 0.0
        if self._last is not None and self.min_interval > 0:
            remaining = self.min_interval - (self._clock() - self._last)
            if remaining > 0:
                self._sleep(remaining)
                slept = remaining
        self._last = self._clock()
        return slept


class BoundedWorkList(Generic[T]):
    """Deduplicated, capped and rate-limited iteration over work items."""

    def __init__(
        self,
        items: Iterable[T],
        max_items: int,
        limiter: Optional[RateLimiter] = None,
    ) -> None:
        unique: List[T] = []
        seen = set()
        for item in items:
            if item in seen:
                continue
            seen.add(item)
            unique.append(item)
        self.total = len(unique)
        self.items = unique[: max(0, max_items)]
        self.limiter = limiter

    @property
    def dropped(self) -> int:
        return self.total - len(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[T]:
        for item in self.items:
            if self.limiter is not None:
                self.limiter.wait()
            yield item
