"""Time-boxed memoization of orchestration results keyed by raw query text."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from ..schemas import OrchestrationResult
from .config import AppConfig


@dataclass
class CacheEntry:
    key: str
    value: OrchestrationResult
    inserted_at: float


class ResponseCache:
    def get(self, query: str) -> Optional[OrchestrationResult]:
        raise NotImplementedError

    def set(self, query: str, result: OrchestrationResult) -> None:
        raise NotImplementedError

    def clear(self) -> None:
        return None


class MemoryResponseCache(ResponseCache):
    """Entries expire lazily: an expired entry is dropped when it is read."""

    def __init__(
        self, ttl_seconds: int, *, clock: Callable[[], float] = time.monotonic
    ) -> None:
        self._ttl_seconds = max(1, int(ttl_seconds))
        self._clock = clock
        self._items: Dict[str, CacheEntry] = {}

    def get(self, query: str) -> Optional[OrchestrationResult]:
        entry = self._items.get(query)
        if entry is None:
            return None
        if self._clock() - entry.inserted_at >= self._ttl_seconds:
            self._items.pop(query, None)
            return None
        return entry.value.model_copy(deep=True)

    def set(self, query: str, result: OrchestrationResult) -> None:
        self._items[query] = CacheEntry(
            key=query,
            value=result.model_copy(deep=True),
            inserted_at=self._clock(),
        )

    def clear(self) -> None:
        self._items.clear()

    def __len__(self) -> int:
        return len(self._items)


class NoopResponseCache(ResponseCache):
    def get(self, query: str) -> Optional[OrchestrationResult]:
        return None

    def set(self, query: str, result: OrchestrationResult) -> None:
        return None


def build_response_cache(config: AppConfig) -> ResponseCache:
    store = (config.response_cache_store or "memory").lower()
    if store in {"off", "disabled", "none"}:
        return NoopResponseCache()
    return MemoryResponseCache(ttl_seconds=config.response_cache_ttl_seconds)
