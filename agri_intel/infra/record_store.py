"""Record store adapters: hosted search index or local fallback records."""

from __future__ import annotations

import time
from typing import Callable, Dict, List, Mapping, Optional, Type

from pydantic import ValidationError

from ..domain import (
    DIRECT_SEARCH_PAGE_SIZE,
    FILTER_FIELDS,
    TOOL_SEARCH_PAGE_SIZE,
    RecordType,
    index_name,
    seed_records,
)
from ..observability.logging_utils import log_event
from ..schemas import (
    AnyRecord,
    BenchmarkRecord,
    CropRotationRecord,
    IndexRecord,
    LogisticsRecord,
    MarketPriceRecord,
)
from .config import AppConfig
from .errors import SearchServiceError
from .search_client import AlgoliaSearchClient


RECORD_MODELS: Dict[RecordType, Type[IndexRecord]] = {
    RecordType.MARKET_PRICE: MarketPriceRecord,
    RecordType.CROP_ROTATION: CropRotationRecord,
    RecordType.LOGISTICS: LogisticsRecord,
    RecordType.BENCHMARK: BenchmarkRecord,
}

FALLBACK_ID_PREFIXES: Dict[RecordType, str] = {
    RecordType.MARKET_PRICE: "mock-mp",
    RecordType.CROP_ROTATION: "mock-cr",
    RecordType.LOGISTICS: "mock-lg",
    RecordType.BENCHMARK: "mock-bm",
}


def clean_filters(
    record_type: RecordType, filters: Optional[Mapping[str, object]]
) -> Dict[str, str]:
    """Keep the non-empty filters the record type understands, in field order."""
    filters = filters or {}
    cleaned: Dict[str, str] = {}
    for field in FILTER_FIELDS[record_type]:
        value = filters.get(field)
        if value is None:
            continue
        text = str(value).strip()
        if text:
            cleaned[field] = text
    return cleaned


def _quote(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


def build_filter_expression(
    record_type: RecordType, filters: Optional[Mapping[str, object]]
) -> str:
    parts: List[str] = []
    for field, value in clean_filters(record_type, filters).items():
        quoted = _quote(value)
        if record_type is RecordType.LOGISTICS and field == "region":
            parts.append(
                f'(origin_region:"{quoted}" OR destination_market:"{quoted}")'
            )
        else:
            parts.append(f'{field}:"{quoted}"')
    return " AND ".join(parts)


def _page_size(hits_per_page: int) -> int:
    return max(1, min(int(hits_per_page), DIRECT_SEARCH_PAGE_SIZE))


class RecordStore:
    """Search records of one type by free-text query plus attribute filters."""

    kind = "abstract"

    async def search(
        self,
        record_type: RecordType,
        query: str,
        filters: Optional[Mapping[str, object]] = None,
        *,
        hits_per_page: int = TOOL_SEARCH_PAGE_SIZE,
    ) -> List[AnyRecord]:
        raise NotImplementedError


class LiveRecordStore(RecordStore):
    kind = "live"

    def __init__(self, client: AlgoliaSearchClient) -> None:
        self._client = client

    async def search(
        self,
        record_type: RecordType,
        query: str,
        filters: Optional[Mapping[str, object]] = None,
        *,
        hits_per_page: int = TOOL_SEARCH_PAGE_SIZE,
    ) -> List[AnyRecord]:
        index = index_name(record_type)
        expression = build_filter_expression(record_type, filters)
        hits = await self._client.search(
            index,
            query or "",
            filters=expression or None,
            hits_per_page=_page_size(hits_per_page),
        )
        model = RECORD_MODELS[record_type]
        records: List[AnyRecord] = []
        for position, hit in enumerate(hits):
            if not isinstance(hit, dict):
                raise SearchServiceError("search hit is not an object", index=index)
            if not hit.get("objectID"):
                hit = {**hit, "objectID": f"{index}-{position}"}
            try:
                records.append(model.model_validate(hit))
            except ValidationError as exc:
                raise SearchServiceError(
                    f"malformed {record_type.value} hit: {exc.error_count()} errors",
                    index=index,
                ) from exc
        log_event(
            "record_search",
            store=self.kind,
            index=index,
            filters=expression,
            hits=len(records),
        )
        return records


def _market_matches(row: dict, query: str, filters: Dict[str, str]) -> bool:
    region = str(row["region"]).lower()
    crop = str(row["crop"]).lower()
    return (
        query in region
        or query in crop
        or filters.get("crop") == crop
        or filters.get("region") == region
        or crop in query
        or region in query
    )


def _rotation_matches(row: dict, query: str, filters: Dict[str, str]) -> bool:
    previous_crop = str(row["previous_crop"]).lower()
    next_crop = str(row["next_crop"]).lower()
    return (
        query in previous_crop
        or query in next_crop
        or filters.get("previous_crop") == previous_crop
        or filters.get("soil_type") == str(row["soil_type"]).lower()
        or previous_crop in query
    )


def _logistics_matches(row: dict, query: str, filters: Dict[str, str]) -> bool:
    origin = str(row["origin_region"]).lower()
    destination = str(row["destination_market"]).lower()
    return (
        query in origin
        or query in destination
        or query in str(row["buyer"]).lower()
        or filters.get("region") in (origin, destination)
        or filters.get("origin_region") == origin
        or filters.get("destination_market") == destination
        or origin in query
    )


def _benchmark_matches(row: dict, query: str, filters: Dict[str, str]) -> bool:
    region = str(row["region"]).lower()
    return query in region or filters.get("region") == region or region in query


_MATCHERS: Dict[RecordType, Callable[[dict, str, Dict[str, str]], bool]] = {
    RecordType.MARKET_PRICE: _market_matches,
    RecordType.CROP_ROTATION: _rotation_matches,
    RecordType.LOGISTICS: _logistics_matches,
    RecordType.BENCHMARK: _benchmark_matches,
}


class FallbackRecordStore(RecordStore):
    """In-memory demo records searched with inclusive substring matching.

    A record is kept as soon as one condition holds (query inside a key
    field, filter equal to its field, or key field inside the query). When
    nothing matches and no filter was given, the whole set is returned the
    way an unfiltered index listing would be.
    """

    kind = "fallback"

    def __init__(
        self,
        records: Optional[Mapping[RecordType, List[dict]]] = None,
        *,
        indexed_at: Optional[int] = None,
    ) -> None:
        stamp = indexed_at if indexed_at is not None else int(time.time() * 1000)
        self._rows: Dict[RecordType, List[dict]] = {}
        for record_type in RecordType:
            if records is not None and record_type in records:
                rows = [dict(row) for row in records[record_type]]
            else:
                rows = seed_records(record_type)
            if record_type is RecordType.MARKET_PRICE:
                for row in rows:
                    row.setdefault("lastUpdated", stamp)
            self._rows[record_type] = rows

    async def search(
        self,
        record_type: RecordType,
        query: str,
        filters: Optional[Mapping[str, object]] = None,
        *,
        hits_per_page: int = TOOL_SEARCH_PAGE_SIZE,
    ) -> List[AnyRecord]:
        return self.search_sync(
            record_type, query, filters, hits_per_page=hits_per_page
        )

    def search_sync(
        self,
        record_type: RecordType,
        query: str,
        filters: Optional[Mapping[str, object]] = None,
        *,
        hits_per_page: int = TOOL_SEARCH_PAGE_SIZE,
    ) -> List[AnyRecord]:
        lowered = (query or "").lower()
        active = {
            key: value.lower()
            for key, value in clean_filters(record_type, filters).items()
        }
        rows = self._rows[record_type]
        matcher = _MATCHERS[record_type]
        matched = [row for row in rows if matcher(row, lowered, active)]
        if not matched and not active:
            matched = list(rows)
        matched = matched[: _page_size(hits_per_page)]

        model = RECORD_MODELS[record_type]
        prefix = FALLBACK_ID_PREFIXES[record_type]
        records = [
            model.model_validate({**row, "objectID": f"{prefix}-{position}"})
            for position, row in enumerate(matched)
        ]
        log_event(
            "record_search",
            store=self.kind,
            index=index_name(record_type),
            filters=active,
            hits=len(records),
        )
        return records


def build_record_store(
    config: AppConfig, client: Optional[AlgoliaSearchClient] = None
) -> RecordStore:
    """Pick the live or fallback store once, from the configured credentials."""
    if not config.search_configured:
        log_event("record_store_selected", store="fallback")
        return FallbackRecordStore()
    if client is None:
        client = AlgoliaSearchClient(
            config.algolia_app_id,
            config.algolia_write_key,
            timeout=config.algolia_timeout_seconds,
        )
    log_event("record_store_selected", store="live")
    return LiveRecordStore(client)
