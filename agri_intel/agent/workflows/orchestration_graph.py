"""
LangGraph workflow for query orchestration.

cache_check ends the run on a hit. On a miss the query goes to the live
completions call when it is configured, otherwise straight to the local
simulation. A failed live call also falls through to the simulation. Both
paths end in merge, which builds the result and writes the cache.
"""

from __future__ import annotations

from typing import Protocol

from langgraph.graph import END, StateGraph

from ...observability.otel import (
    record_exception,
    span_attributes,
    start_span,
    summarize_state,
)
from .state import OrchestrationState

WORKFLOW_NAME = "orchestration"


class OrchestrationNodes(Protocol):
    live_enabled: bool

    async def cache_check(self, state: OrchestrationState) -> dict: ...

    async def live_call(self, state: OrchestrationState) -> dict: ...

    async def simulate(self, state: OrchestrationState) -> dict: ...

    async def merge(self, state: OrchestrationState) -> dict: ...


def trace_node(node_name: str, func):
    """Run an async node inside a `workflow.orchestration.<node>` span."""

    async def _inner(state: OrchestrationState) -> dict:
        attrs = {"workflow.name": WORKFLOW_NAME, "node.name": node_name}
        attrs.update(span_attributes("node.input", summarize_state(state)))
        with start_span(
            f"workflow.{WORKFLOW_NAME}.{node_name}", attributes=attrs
        ) as span:
            try:
                result = await func(state)
            except Exception as exc:
                record_exception(span, exc)
                raise
            for key, value in span_attributes(
                "node.output", summarize_state(result)
            ).items():
                span.set_attribute(key, value)
            return result

    return _inner


def build_orchestration_graph(nodes: OrchestrationNodes):
    """
    Construct and return the compiled orchestration workflow.
    """

    def _route_after_cache(state: OrchestrationState) -> str:
        if state.get("cache_hit"):
            return "hit"
        return "live" if nodes.live_enabled else "simulate"

    def _route_after_live(state: OrchestrationState) -> str:
        return "simulate" if state.get("live_failed") else "merge"

    graph = StateGraph(OrchestrationState)
    graph.add_node("cache_check", trace_node("cache_check", nodes.cache_check))
    graph.add_node("live_call", trace_node("live_call", nodes.live_call))
    graph.add_node("simulate", trace_node("simulate", nodes.simulate))
    graph.add_node("merge", trace_node("merge", nodes.merge))

    graph.set_entry_point("cache_check")
    graph.add_conditional_edges(
        "cache_check",
        _route_after_cache,
        {"hit": END, "live": "live_call", "simulate": "simulate"},
    )
    graph.add_conditional_edges(
        "live_call",
        _route_after_live,
        {"simulate": "simulate", "merge": "merge"},
    )
    graph.add_edge("simulate", "merge")
    graph.add_edge("merge", END)
    return graph.compile()
