"""Index catalogue: record types, index names and index settings."""

from __future__ import annotations

from enum import Enum
from typing import Dict, List, Tuple


class RecordType(str, Enum):
    MARKET_PRICE = "MarketPrice"
    CROP_ROTATION = "CropRotation"
    LOGISTICS = "Logistics"
    BENCHMARK = "Benchmark"


INDICES: Dict[RecordType, str] = {
    RecordType.MARKET_PRICE: "market_prices",
    RecordType.CROP_ROTATION: "crop_rotation",
    RecordType.LOGISTICS: "logistics",
    RecordType.BENCHMARK: "benchmarks",
}

# Key used for each record type in OrchestrationResult.data.
DATA_KEYS: Dict[RecordType, str] = {
    RecordType.MARKET_PRICE: "market",
    RecordType.CROP_ROTATION: "rotation",
    RecordType.LOGISTICS: "logistics",
    RecordType.BENCHMARK: "benchmarks",
}

# Filter fields honoured per record type. Logistics "region" matches either
# end of a route.
FILTER_FIELDS: Dict[RecordType, Tuple[str, ...]] = {
    RecordType.MARKET_PRICE: ("crop", "region"),
    RecordType.CROP_ROTATION: ("previous_crop", "soil_type"),
    RecordType.LOGISTICS: ("region", "origin_region", "destination_market"),
    RecordType.BENCHMARK: ("region",),
}

DIRECT_SEARCH_PAGE_SIZE = 20
TOOL_SEARCH_PAGE_SIZE = 10

INDEX_SETTINGS: Dict[RecordType, Dict[str, List[str]]] = {
    RecordType.MARKET_PRICE: {
        "searchableAttributes": ["crop", "region"],
        "attributesForFaceting": ["filterOnly(region)", "filterOnly(crop)"],
        "customRanking": ["desc(lastUpdated)", "desc(demand_index)"],
    },
    RecordType.CROP_ROTATION: {
        "searchableAttributes": [
            "previous_crop",
            "next_crop",
            "soil_type",
            "climate_zone",
        ],
        "attributesForFaceting": [
            "filterOnly(soil_type)",
            "filterOnly(previous_crop)",
        ],
        "customRanking": ["asc(risk_score)"],
    },
    RecordType.LOGISTICS: {
        "searchableAttributes": [
            "buyer",
            "origin_region",
            "destination_market",
            "carrier",
        ],
        "attributesForFaceting": [
            "filterOnly(origin_region)",
            "filterOnly(destination_market)",
        ],
        "customRanking": ["asc(cost_per_ton)", "asc(transit_days)"],
    },
    RecordType.BENCHMARK: {
        "searchableAttributes": ["region", "crop_mix", "practices"],
        "attributesForFaceting": ["filterOnly(region)"],
    },
}


def index_name(record_type: RecordType) -> str:
    return INDICES[record_type]


def data_key(record_type: RecordType) -> str:
    return DATA_KEYS[record_type]
