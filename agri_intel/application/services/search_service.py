from __future__ import annotations

import asyncio
from typing import Dict, List, Mapping, Optional

from ...domain import DATA_KEYS, DIRECT_SEARCH_PAGE_SIZE, RecordType
from ...infra.record_store import FallbackRecordStore, RecordStore
from ...observability.logging_utils import log_error, log_event, summarize_text
from ...schemas import AnyRecord, SearchAllResponse


async def _search_every_index(
    store: RecordStore, query: str, filters: Mapping[str, object]
) -> Dict[str, List[AnyRecord]]:
    record_types = list(RecordType)
    results = await asyncio.gather(
        *(
            store.search(
                record_type,
                query,
                filters,
                hits_per_page=DIRECT_SEARCH_PAGE_SIZE,
            )
            for record_type in record_types
        )
    )
    return {DATA_KEYS[rt]: records for rt, records in zip(record_types, results)}


def latest_market_update(records: List[AnyRecord]) -> Optional[int]:
    stamps = [r.last_updated for r in records if getattr(r, "last_updated", None)]
    return max(stamps) if stamps else None


async def search_all(
    store: RecordStore,
    query: str,
    filters: Optional[Mapping[str, object]] = None,
    *,
    fallback_store: Optional[RecordStore] = None,
) -> SearchAllResponse:
    """
    Query all four indices at once for the dashboard search box.

    A failing store degrades the whole request to the fallback records.
    """
    filters = dict(filters or {})
    try:
        grouped = await _search_every_index(store, query, filters)
    except Exception as exc:
        log_error("direct_search_failed", exc=exc)
        grouped = await _search_every_index(
            fallback_store or FallbackRecordStore(), query, filters
        )
    log_event(
        "direct_search",
        query=summarize_text(query, 120),
        counts={key: len(records) for key, records in grouped.items()},
    )
    return SearchAllResponse(
        **grouped, last_updated=latest_market_update(grouped["market"])
    )
