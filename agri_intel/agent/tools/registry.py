from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ...domain import TOOL_SEARCH_PAGE_SIZE, RecordType, data_key, index_name
from ...infra.record_store import RecordStore
from ...observability.logging_utils import log_event
from ...schemas import AnyRecord, ToolCallDirective, UnknownToolCall


def _params(**items: str) -> Mapping[str, Mapping[str, str]]:
    return MappingProxyType(
        {
            name: MappingProxyType({"type": "string", "description": description})
            for name, description in items.items()
        }
    )


@dataclass(frozen=True, eq=False)
class ToolSpec:
    """A named lookup capability backed by one record type."""

    name: str
    description: str
    record_type: RecordType
    parameters: Mapping[str, Mapping[str, str]] = field(
        default_factory=lambda: MappingProxyType({})
    )

    @property
    def index(self) -> str:
        return index_name(self.record_type)

    @property
    def data_key(self) -> str:
        return data_key(self.record_type)

    def json_schema(self) -> Dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                name: dict(schema) for name, schema in self.parameters.items()
            },
        }


MARKET_PULSE = ToolSpec(
    name="getMarketPulse",
    description=(
        "Retrieves live market prices for crops and regions. Use this for "
        "queries about prices, demand, or costs."
    ),
    record_type=RecordType.MARKET_PRICE,
    parameters=_params(
        crop="The crop name (e.g., Almonds, Corn)",
        region="The geographic region (e.g., California, Midwest)",
    ),
)
SUGGEST_ROTATION = ToolSpec(
    name="suggestRotation",
    description=(
        "Determines optimal crop rotation and compatibility. Use this for "
        "queries about what to plant next or soil compatibility."
    ),
    record_type=RecordType.CROP_ROTATION,
    parameters=_params(
        previous_crop="The crop previously planted",
        soil_type="Type of soil (e.g., Loam, Clay, Sandy)",
    ),
)
OPTIMIZE_LOGISTICS = ToolSpec(
    name="optimizeLogistics",
    description=(
        "Identifies buyers and logistics routes. Use this for queries about "
        "selling crops, finding buyers, or shipping."
    ),
    record_type=RecordType.LOGISTICS,
    parameters=_params(
        crop="The crop to be shipped",
        region="Origin or destination region",
    ),
)
GET_BENCHMARKS = ToolSpec(
    name="getBenchmarks",
    description=(
        "Retrieves regional performance benchmarks and practices. Use this "
        "for yield, margin, or best practice comparisons."
    ),
    record_type=RecordType.BENCHMARK,
    parameters=_params(region="Target region for benchmarks"),
)

# Resolution order matters: composed messages follow it.
TOOLS: Tuple[ToolSpec, ...] = (
    MARKET_PULSE,
    SUGGEST_ROTATION,
    OPTIMIZE_LOGISTICS,
    GET_BENCHMARKS,
)
TOOL_INDEX: Mapping[str, ToolSpec] = MappingProxyType({t.name: t for t in TOOLS})
_TOOLS_BY_RECORD_TYPE: Mapping[RecordType, ToolSpec] = MappingProxyType(
    {t.record_type: t for t in TOOLS}
)


def list_tools() -> Tuple[ToolSpec, ...]:
    return TOOLS


def get_tool(name: str) -> Optional[ToolSpec]:
    return TOOL_INDEX.get(name)


def tool_for_record_type(record_type: RecordType) -> ToolSpec:
    return _TOOLS_BY_RECORD_TYPE[record_type]


def tool_catalogue() -> List[Dict[str, Any]]:
    """
    Tool metadata sent to the completions endpoint.

    Only name, description and parameter schema leave the process.
    """
    return [
        {"name": t.name, "description": t.description, "parameters": t.json_schema()}
        for t in TOOLS
    ]


def resolve_filters(
    spec: ToolSpec, params: Optional[Mapping[str, Any]]
) -> Dict[str, str]:
    filters: Dict[str, str] = {}
    for name, value in (params or {}).items():
        if name not in spec.parameters or value is None:
            continue
        text = str(value).strip()
        if text:
            filters[name] = text
    return filters


def directive_tool(directive: ToolCallDirective) -> Optional[ToolSpec]:
    if isinstance(directive, UnknownToolCall):
        return None
    return TOOL_INDEX[directive.tool]


def directive_params(directive: ToolCallDirective) -> Dict[str, Any]:
    if isinstance(directive, UnknownToolCall):
        return dict(directive.params)
    return directive.params.model_dump(exclude_none=True)


async def execute_tool(
    spec: ToolSpec,
    store: RecordStore,
    query: str,
    params: Optional[Mapping[str, Any]] = None,
    *,
    hits_per_page: int = TOOL_SEARCH_PAGE_SIZE,
) -> List[AnyRecord]:
    filters = resolve_filters(spec, params)
    records = await store.search(
        spec.record_type, query, filters, hits_per_page=hits_per_page
    )
    log_event("tool_output", tool=spec.name, filters=filters, results=len(records))
    return records
