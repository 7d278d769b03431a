"""
LangGraph state shared by the orchestration workflow nodes.
"""

from typing import List, TypedDict

from ...schemas import OrchestrationData, OrchestrationResult, ToolCall


class OrchestrationState(TypedDict, total=False):
    """State flowing through cache check, live call, simulation and merge."""

    query: str
    trace: List[str]
    cache_hit: bool
    live_failed: bool
    source: str
    broad_search: bool
    tool_names: List[str]
    message: str
    tool_calls: List[ToolCall]
    data: OrchestrationData
    result: OrchestrationResult


def add_trace(state: OrchestrationState, message: str) -> List[str]:
    """Return the workflow trace with one more entry."""
    trace = list(state.get("trace") or [])
    trace.append(message)
    return trace
