from __future__ import annotations

from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Discriminator,
    Field,
    Tag,
    TypeAdapter,
)


class IndexRecord(BaseModel):
    """Base for records stored in a search index.

    Attribute names mirror the index attributes; unknown attributes returned
    by the hosted service (highlighting, ranking info) are kept as extras.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    object_id: Optional[str] = Field(default=None, alias="objectID")


class MarketPriceRecord(IndexRecord):
    region: str
    crop: str
    price: float
    unit: str
    demand_index: int = Field(ge=0, le=100)
    date: str
    last_updated: Optional[int] = Field(
        default=None,
        alias="lastUpdated",
        description="Epoch milliseconds stamped at indexing time.",
    )


class CropRotationRecord(IndexRecord):
    """Directional rotation rule: previous_crop followed by next_crop."""

    soil_type: str
    climate_zone: str
    previous_crop: str
    next_crop: str
    risk_score: int = Field(ge=0, le=100, description="Lower is safer.")
    compatibility: Literal["High", "Medium", "Low (Disease Risk)"]


class LogisticsRecord(IndexRecord):
    origin_region: str
    destination_market: str
    buyer: str
    carrier: str
    cost_per_ton: float
    transit_days: int = Field(ge=1)


class BenchmarkRecord(IndexRecord):
    region: str
    crop_mix: List[str]
    margin: str
    yield_: str = Field(alias="yield")
    practices: str


AnyRecord = Union[
    MarketPriceRecord, CropRotationRecord, LogisticsRecord, BenchmarkRecord
]


class MarketPriceInput(BaseModel):
    """Market price row accepted by the sync endpoint."""

    model_config = ConfigDict(extra="forbid")

    region: str = Field(min_length=1)
    crop: str = Field(min_length=1)
    price: float
    unit: str = Field(min_length=1)
    demand_index: int = Field(ge=0, le=100)
    date: str = Field(min_length=1)


class ToolCall(BaseModel):
    """One executed tool invocation with its resolved parameters."""

    tool: str
    params: Dict[str, Any] = Field(default_factory=dict)
    results: List[AnyRecord] = Field(default_factory=list)


class OrchestrationData(BaseModel):
    model_config = ConfigDict(extra="ignore")

    market: Optional[List[MarketPriceRecord]] = None
    rotation: Optional[List[CropRotationRecord]] = None
    logistics: Optional[List[LogisticsRecord]] = None
    benchmarks: Optional[List[BenchmarkRecord]] = None


class OrchestrationMetadata(BaseModel):
    agent_id: str
    orchestration_type: Literal["algolia_agent_studio"] = "algolia_agent_studio"
    timestamp: int
    source: Literal["live", "simulation", "fallback"] = "simulation"
    broad_search: bool = False


class OrchestrationResult(BaseModel):
    """Composed chat answer plus per-category records for dashboard cards."""

    message: str
    tool_calls: List[ToolCall] = Field(default_factory=list)
    data: OrchestrationData = Field(default_factory=OrchestrationData)
    metadata: OrchestrationMetadata


# Tool-call directives returned by the completions endpoint.


class MarketPulseArgs(BaseModel):
    model_config = ConfigDict(extra="ignore")

    crop: Optional[str] = None
    region: Optional[str] = None


class RotationArgs(BaseModel):
    model_config = ConfigDict(extra="ignore")

    previous_crop: Optional[str] = None
    soil_type: Optional[str] = None


class LogisticsArgs(BaseModel):
    model_config = ConfigDict(extra="ignore")

    crop: Optional[str] = None
    region: Optional[str] = None


class BenchmarkArgs(BaseModel):
    model_config = ConfigDict(extra="ignore")

    region: Optional[str] = None


class MarketPulseCall(BaseModel):
    tool: Literal["getMarketPulse"]
    params: MarketPulseArgs = Field(default_factory=MarketPulseArgs)


class RotationCall(BaseModel):
    tool: Literal["suggestRotation"]
    params: RotationArgs = Field(default_factory=RotationArgs)


class LogisticsCall(BaseModel):
    tool: Literal["optimizeLogistics"]
    params: LogisticsArgs = Field(default_factory=LogisticsArgs)


class BenchmarkCall(BaseModel):
    tool: Literal["getBenchmarks"]
    params: BenchmarkArgs = Field(default_factory=BenchmarkArgs)


class UnknownToolCall(BaseModel):
    tool: str = ""
    params: Dict[str, Any] = Field(default_factory=dict)


KNOWN_TOOL_NAMES = frozenset(
    {"getMarketPulse", "suggestRotation", "optimizeLogistics", "getBenchmarks"}
)


def _tool_call_tag(value: Any) -> str:
    if isinstance(value, dict):
        name = value.get("tool")
    else:
        name = getattr(value, "tool", None)
    return name if name in KNOWN_TOOL_NAMES else "unknown"


ToolCallDirective = Annotated[
    Union[
        Annotated[MarketPulseCall, Tag("getMarketPulse")],
        Annotated[RotationCall, Tag("suggestRotation")],
        Annotated[LogisticsCall, Tag("optimizeLogistics")],
        Annotated[BenchmarkCall, Tag("getBenchmarks")],
        Annotated[UnknownToolCall, Tag("unknown")],
    ],
    Discriminator(_tool_call_tag),
]

_TOOL_CALLS_ADAPTER = TypeAdapter(List[ToolCallDirective])


def parse_tool_calls(raw: Any) -> List[ToolCallDirective]:
    """Validate raw tool-call directives into the tagged union.

    Raises pydantic.ValidationError when the payload is not a list of objects.
    """
    items = []
    for item in raw or []:
        if isinstance(item, dict) and item.get("params") is None:
            item = {k: v for k, v in item.items() if k != "params"}
        items.append(item)
    return _TOOL_CALLS_ADAPTER.validate_python(items)


class CompletionsResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    message: str = ""
    tool_calls: Optional[List[Dict[str, Any]]] = None
    data: Dict[str, Any] = Field(default_factory=dict)


# API payloads.


class ChatRequest(BaseModel):
    message: str = Field(min_length=1)


class SearchFilters(BaseModel):
    model_config = ConfigDict(extra="forbid")

    region: Optional[str] = None
    crop: Optional[str] = None
    previous_crop: Optional[str] = None
    soil_type: Optional[str] = None
    origin_region: Optional[str] = None
    destination_market: Optional[str] = None


class SearchRequest(BaseModel):
    query: str = ""
    filters: SearchFilters = Field(default_factory=SearchFilters)


class SearchAllResponse(BaseModel):
    market: List[MarketPriceRecord] = Field(default_factory=list)
    rotation: List[CropRotationRecord] = Field(default_factory=list)
    logistics: List[LogisticsRecord] = Field(default_factory=list)
    benchmarks: List[BenchmarkRecord] = Field(default_factory=list)
    last_updated: Optional[int] = None


class StatusResponse(BaseModel):
    configured: bool
    app_id_masked: Optional[str] = None


class InitializeResponse(BaseModel):
    success: bool
    message: str


class SyncMarketPricesRequest(BaseModel):
    prices: List[MarketPriceInput]


class SyncMarketPricesResponse(BaseModel):
    success: bool
    indexed: int
