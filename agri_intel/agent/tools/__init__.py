from .registry import (
    GET_BENCHMARKS,
    MARKET_PULSE,
    OPTIMIZE_LOGISTICS,
    SUGGEST_ROTATION,
    TOOLS,
    ToolSpec,
    execute_tool,
    get_tool,
    list_tools,
    tool_catalogue,
    tool_for_record_type,
)

__all__ = [
    "GET_BENCHMARKS",
    "MARKET_PULSE",
    "OPTIMIZE_LOGISTICS",
    "SUGGEST_ROTATION",
    "TOOLS",
    "ToolSpec",
    "execute_tool",
    "get_tool",
    "list_tools",
    "tool_catalogue",
    "tool_for_record_type",
]
