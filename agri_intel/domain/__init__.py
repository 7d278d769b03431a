from __future__ import annotations

from .indices import (
    DATA_KEYS,
    DIRECT_SEARCH_PAGE_SIZE,
    FILTER_FIELDS,
    INDEX_SETTINGS,
    INDICES,
    TOOL_SEARCH_PAGE_SIZE,
    RecordType,
    data_key,
    index_name,
)
from .seed_data import SEED_RECORDS, seed_records

__all__ = [
    "DATA_KEYS",
    "DIRECT_SEARCH_PAGE_SIZE",
    "FILTER_FIELDS",
    "INDEX_SETTINGS",
    "INDICES",
    "SEED_RECORDS",
    "TOOL_SEARCH_PAGE_SIZE",
    "RecordType",
    "data_key",
    "index_name",
    "seed_records",
]
