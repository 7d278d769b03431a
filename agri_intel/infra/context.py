"""Process-scoped container for the cache, record stores and HTTP clients."""

from __future__ import annotations

from typing import Optional

import httpx

from ..observability.logging_utils import log_event
from .completions import AgentStudioClient, build_completions_client
from .config import AppConfig, get_config
from .index_admin import IndexAdmin
from .record_store import FallbackRecordStore, RecordStore, build_record_store
from .response_cache import ResponseCache, build_response_cache
from .search_client import AlgoliaSearchClient


class AppContext:
    """Explicit lifecycle for shared state: call init() once, shutdown() at exit.

    `transport` lets tests route every outbound HTTP call through a mock.
    """

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.config = config or get_config()
        self._transport = transport
        self.search_client: Optional[AlgoliaSearchClient] = None
        self.completions: Optional[AgentStudioClient] = None
        self.store: Optional[RecordStore] = None
        self.fallback_store: Optional[FallbackRecordStore] = None
        self.cache: Optional[ResponseCache] = None
        self.index_admin: Optional[IndexAdmin] = None
        self._initialized = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    async def init(self) -> "AppContext":
        if self._initialized:
            return self
        cfg = self.config
        if cfg.search_configured:
            self.search_client = AlgoliaSearchClient(
                cfg.algolia_app_id,
                cfg.algolia_write_key,
                timeout=cfg.algolia_timeout_seconds,
                transport=self._transport,
            )
        self.completions = build_completions_client(cfg, transport=self._transport)
        self.fallback_store = FallbackRecordStore()
        self.store = build_record_store(cfg, self.search_client)
        self.cache = build_response_cache(cfg)
        self.index_admin = IndexAdmin(self.search_client)
        self._initialized = True
        log_event(
            "context_initialized",
            store=self.store.kind,
            live_orchestration=self.completions is not None,
        )
        return self

    async def shutdown(self) -> None:
        if self.search_client is not None:
            await self.search_client.aclose()
            self.search_client = None
        if self.completions is not None:
            await self.completions.aclose()
            self.completions = None
        if self.cache is not None:
            self.cache.clear()
        self._initialized = False
        log_event("context_shutdown")

    async def __aenter__(self) -> "AppContext":
        return await self.init()

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.shutdown()
