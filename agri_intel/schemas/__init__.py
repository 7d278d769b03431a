from .models import (
    AnyRecord,
    BenchmarkArgs,
    BenchmarkCall,
    BenchmarkRecord,
    ChatRequest,
    CompletionsResponse,
    CropRotationRecord,
    IndexRecord,
    InitializeResponse,
    LogisticsArgs,
    LogisticsCall,
    LogisticsRecord,
    MarketPriceInput,
    MarketPriceRecord,
    MarketPulseArgs,
    MarketPulseCall,
    OrchestrationData,
    OrchestrationMetadata,
    OrchestrationResult,
    RotationArgs,
    RotationCall,
    SearchAllResponse,
    SearchFilters,
    SearchRequest,
    StatusResponse,
    SyncMarketPricesRequest,
    SyncMarketPricesResponse,
    ToolCall,
    ToolCallDirective,
    UnknownToolCall,
    parse_tool_calls,
)

__all__ = [
    "AnyRecord",
    "BenchmarkArgs",
    "BenchmarkCall",
    "BenchmarkRecord",
    "ChatRequest",
    "CompletionsResponse",
    "CropRotationRecord",
    "IndexRecord",
    "InitializeResponse",
    "LogisticsArgs",
    "LogisticsCall",
    "LogisticsRecord",
    "MarketPriceInput",
    "MarketPriceRecord",
    "MarketPulseArgs",
    "MarketPulseCall",
    "OrchestrationData",
    "OrchestrationMetadata",
    "OrchestrationResult",
    "RotationArgs",
    "RotationCall",
    "SearchAllResponse",
    "SearchFilters",
    "SearchRequest",
    "StatusResponse",
    "SyncMarketPricesRequest",
    "SyncMarketPricesResponse",
    "ToolCall",
    "ToolCallDirective",
    "UnknownToolCall",
    "parse_tool_calls",
]
