"""Index administration: settings, seeding and market price sync."""

from __future__ import annotations

import re
import time
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from ..domain import INDEX_SETTINGS, RecordType, index_name, seed_records
from ..observability.logging_utils import log_event
from ..schemas import MarketPriceInput
from .errors import ConfigurationError
from .search_client import AlgoliaSearchClient


NOT_CONFIGURED_MESSAGE = (
    "Algolia admin not configured. Please set ALGOLIA_APP_ID and ALGOLIA_WRITE_KEY."
)

OBJECT_ID_FIELDS: Dict[RecordType, Tuple[str, ...]] = {
    RecordType.MARKET_PRICE: ("region", "crop"),
    RecordType.CROP_ROTATION: ("soil_type", "previous_crop", "next_crop"),
    RecordType.LOGISTICS: ("origin_region", "buyer"),
    RecordType.BENCHMARK: ("region",),
}

_WHITESPACE = re.compile(r"\s+")


def make_object_id(*parts: object) -> str:
    text = "-".join(str(part) for part in parts).lower()
    return _WHITESPACE.sub("-", text)


def prepare_objects(
    record_type: RecordType,
    rows: Sequence[Mapping[str, object]],
    *,
    now_ms: Optional[int] = None,
) -> List[Dict[str, object]]:
    """Attach object ids (and the market recency stamp) to rows for indexing."""
    fields = OBJECT_ID_FIELDS[record_type]
    stamp = now_ms if now_ms is not None else int(time.time() * 1000)
    objects: List[Dict[str, object]] = []
    for idx, row in enumerate(rows):
        obj = dict(row)
        obj["objectID"] = make_object_id(*(row[field] for field in fields), idx)
        if record_type is RecordType.MARKET_PRICE:
            obj["lastUpdated"] = stamp
        objects.append(obj)
    return objects


class IndexAdmin:
    def __init__(self, client: Optional[AlgoliaSearchClient]) -> None:
        self._client = client

    @property
    def configured(self) -> bool:
        return self._client is not None

    def _require_client(self) -> AlgoliaSearchClient:
        if self._client is None:
            raise ConfigurationError(NOT_CONFIGURED_MESSAGE)
        return self._client

    async def configure_indices(self) -> None:
        client = self._require_client()
        for record_type in RecordType:
            await client.set_settings(
                index_name(record_type), INDEX_SETTINGS[record_type]
            )
        log_event("index_settings_configured", indices=len(INDEX_SETTINGS))

    async def index_records(
        self, record_type: RecordType, rows: Sequence[Mapping[str, object]]
    ) -> int:
        client = self._require_client()
        objects = prepare_objects(record_type, rows)
        await client.save_objects(index_name(record_type), objects)
        log_event(
            "records_indexed", index=index_name(record_type), count=len(objects)
        )
        return len(objects)

    async def index_market_prices(self, prices: Sequence[MarketPriceInput]) -> int:
        rows = [price.model_dump() for price in prices]
        return await self.index_records(RecordType.MARKET_PRICE, rows)

    async def seed_initial_data(self) -> Dict[str, int]:
        self._require_client()
        counts: Dict[str, int] = {}
        for record_type in RecordType:
            counts[index_name(record_type)] = await self.index_records(
                record_type, seed_records(record_type)
            )
        log_event("seed_complete", counts=counts)
        return counts

    async def initialize(self) -> Dict[str, int]:
        await self.configure_indices()
        return await self.seed_initial_data()
