from __future__ import annotations

import logging
import time
import weakref
from typing import Any, Callable

from selenium.common.exceptions import WebDriverException

from selfheal.core.metadata import ElementSnapshot, PageSnapshotCacheEntry
from selfheal.core.page import AutomationPage, page_identity
from selfheal.utils.dom_extract import (
    COLLECT_CONTEXT_SCRIPT,
    COLLECT_SNAPSHOTS_SCRIPT,
    snapshots_from_payload,
)

logger = logging.getLogger(__name__)

CONTEXT_LIMIT = 5


class SnapshotProvider:
    """Enumerates visible elements per page and caches them for ``ttl`` ms.

    Entries are held in a ``WeakKeyDictionary`` so the cache never keeps a page
    alive on its own; snapshot handles point back at the driver, so stale
    entries are pruned on every read and ``dispose`` drops one eagerly.
    """

    def __init__(self, ttl: int, clock: Callable[[], float] = time.monotonic) -> None:
        self.ttl = ttl
        self.clock = clock
        self._entries: weakref.WeakKeyDictionary[Any, PageSnapshotCacheEntry] = weakref.WeakKeyDictionary()

    def list(self, page: AutomationPage) -> tuple[ElementSnapshot, ...]:
        key = page_identity(page)
        now = self._now_ms()
        self._prune(now)
        cached = self._entries.get(key)
        if cached is not None and self._is_fresh(cached, now):
            return cached.snapshots

        try:
            snapshots = snapshots_from_payload(page.evaluate(COLLECT_SNAPSHOTS_SCRIPT))
        except (WebDriverException, TypeError, AttributeError, ValueError) as exc:
            logger.warning("Element extraction failed, continuing with no candidates: %s", exc)
            return ()
        self._entries[key] = PageSnapshotCacheEntry(snapshots=snapshots, timestamp=now)
        return snapshots

    def contextual(
        self,
        page: AutomationPage,
        selector: str,
        prefix_length: int = 3,
        limit: int = CONTEXT_LIMIT,
    ) -> tuple[ElementSnapshot, ...]:
        prefix = selector.lower()[:prefix_length]
        try:
            return snapshots_from_payload(page.evaluate(COLLECT_CONTEXT_SCRIPT, prefix, limit))[:limit]
        except (WebDriverException, TypeError, AttributeError, ValueError) as exc:
            logger.warning("Context extraction failed: %s", exc)
            return ()

    def dispose(self, page: AutomationPage) -> None:
        self._entries.pop(page_identity(page), None)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def _is_fresh(self, entry: PageSnapshotCacheEntry, now: float) -> bool:
        return now - entry.timestamp < self.ttl

    def _prune(self, now: float) -> None:
        stale = [key for key, entry in list(self._entries.items()) if not self._is_fresh(entry, now)]
        for key in stale:
            self._entries.pop(key, None)

    def _now_ms(self) -> float:
        return self.clock() * 1000
