from __future__ import annotations

import asyncio
import time
from typing import TYPE_CHECKING, Callable, List, Optional, Sequence, Tuple

from ..infra.completions import AgentStudioClient
from ..infra.config import DEFAULT_AGENT_ID
from ..infra.record_store import FallbackRecordStore, RecordStore
from ..infra.response_cache import NoopResponseCache, ResponseCache
from ..observability.logging_utils import (
    log_error,
    log_event,
    summarize_text,
    trace_scope,
)
from ..prompts.workflow_messages import compose_message
from ..schemas import (
    AnyRecord,
    OrchestrationData,
    OrchestrationMetadata,
    OrchestrationResult,
    ToolCall,
    ToolCallDirective,
    parse_tool_calls,
)
from .intent_rules import classify_query
from .tools.registry import (
    ToolSpec,
    directive_params,
    directive_tool,
    execute_tool,
    tool_catalogue,
)
from .workflows.orchestration_graph import build_orchestration_graph
from .workflows.state import OrchestrationState, add_trace

if TYPE_CHECKING:
    from ..infra.context import AppContext


class Orchestrator:
    """Resolve a query to tool invocations and compose the chat answer.

    Results are memoized per raw query text. The live completions path is
    used only when a client is supplied; any failure there degrades to the
    keyword simulation, and a failing record store during simulation
    degrades to the fallback records. Callers always get a result.
    """

    def __init__(
        self,
        *,
        store: RecordStore,
        cache: Optional[ResponseCache] = None,
        completions: Optional[AgentStudioClient] = None,
        fallback_store: Optional[RecordStore] = None,
        agent_id: str = DEFAULT_AGENT_ID,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = store
        self._cache = cache if cache is not None else NoopResponseCache()
        self._completions = completions
        self._fallback_store = (
            fallback_store if fallback_store is not None else FallbackRecordStore()
        )
        self._agent_id = agent_id
        self._clock = clock
        self._graph = build_orchestration_graph(self)

    @classmethod
    def from_context(cls, context: "AppContext") -> "Orchestrator":
        return cls(
            store=context.store,
            cache=context.cache,
            completions=context.completions,
            fallback_store=context.fallback_store,
            agent_id=context.config.agent_id,
        )

    @property
    def live_enabled(self) -> bool:
        return self._completions is not None

    async def run(self, query: str) -> OrchestrationResult:
        with trace_scope():
            log_event("orchestration_start", query=summarize_text(query))
            state = await self._graph.ainvoke({"query": query, "trace": []})
            log_event(
                "orchestration_complete",
                trace=state.get("trace"),
                source=state["result"].metadata.source,
            )
            return state["result"]

    # Workflow nodes.

    async def cache_check(self, state: OrchestrationState) -> dict:
        cached = self._cache.get(state["query"])
        if cached is None:
            return {"cache_hit": False, "trace": add_trace(state, "cache miss")}
        return {
            "cache_hit": True,
            "result": cached,
            "trace": add_trace(state, "cache hit"),
        }

    async def live_call(self, state: OrchestrationState) -> dict:
        query = state["query"]
        try:
            response = await self._completions.complete(query, tool_catalogue())
            directives = parse_tool_calls(response.tool_calls)
            data = OrchestrationData.model_validate(response.data)
            tool_calls = await self._run_directives(query, directives, data)
        except Exception as exc:
            log_error("live_orchestration_failed", exc=exc)
            return {"live_failed": True, "trace": add_trace(state, "live failed")}
        return {
            "live_failed": False,
            "source": "live",
            "broad_search": False,
            "tool_names": [call.tool for call in tool_calls],
            "message": response.message,
            "tool_calls": tool_calls,
            "data": data,
            "trace": add_trace(state, f"live ok ({len(tool_calls)} tool calls)"),
        }

    async def simulate(self, state: OrchestrationState) -> dict:
        query = state["query"]
        decision = classify_query(query)
        source = "simulation"
        try:
            data, tool_calls = await self._fan_out(query, decision.tools, self._store)
        except Exception as exc:
            log_error("simulation_store_failed", exc=exc)
            source = "fallback"
            data, tool_calls = await self._fan_out(
                query, decision.tools, self._fallback_store
            )
        message = compose_message(
            decision.tool_names, broad_search=decision.broad_search, data=data
        )
        return {
            "source": source,
            "broad_search": decision.broad_search,
            "tool_names": decision.tool_names,
            "message": message,
            "tool_calls": tool_calls,
            "data": data,
            "trace": add_trace(state, f"{source} ({', '.join(decision.tool_names)})"),
        }

    async def merge(self, state: OrchestrationState) -> dict:
        data = state.get("data") or OrchestrationData()
        message = state.get("message") or ""
        if not message:
            message = compose_message(
                state.get("tool_names") or [],
                broad_search=bool(state.get("broad_search")),
                data=data,
            )
        result = OrchestrationResult(
            message=message,
            tool_calls=list(state.get("tool_calls") or []),
            data=data,
            metadata=OrchestrationMetadata(
                agent_id=self._agent_id,
                timestamp=int(self._clock() * 1000),
                source=state.get("source") or "simulation",
                broad_search=bool(state.get("broad_search")),
            ),
        )
        self._cache.set(state["query"], result)
        return {"result": result, "trace": add_trace(state, "merged")}

    # Tool execution.

    async def _fan_out(
        self, query: str, tools: Sequence[ToolSpec], store: RecordStore
    ) -> Tuple[OrchestrationData, List[ToolCall]]:
        results = await asyncio.gather(
            *(execute_tool(spec, store, query) for spec in tools)
        )
        data = OrchestrationData()
        tool_calls: List[ToolCall] = []
        for spec, records in zip(tools, results):
            setattr(data, spec.data_key, records)
            tool_calls.append(ToolCall(tool=spec.name, params={}, results=records))
        return data, tool_calls

    async def _run_directive(
        self, query: str, directive: ToolCallDirective
    ) -> List[AnyRecord]:
        spec = directive_tool(directive)
        if spec is None:
            log_event("tool_unknown", tool=directive.tool)
            return []
        try:
            return await execute_tool(
                spec, self._store, query, directive_params(directive)
            )
        except Exception as exc:
            log_error("tool_execution_failed", exc=exc, tool=spec.name)
            return []

    async def _run_directives(
        self,
        query: str,
        directives: Sequence[ToolCallDirective],
        data: OrchestrationData,
    ) -> List[ToolCall]:
        results = await asyncio.gather(
            *(self._run_directive(query, directive) for directive in directives)
        )
        tool_calls: List[ToolCall] = []
        for directive, records in zip(directives, results):
            tool_calls.append(
                ToolCall(
                    tool=directive.tool,
                    params=directive_params(directive),
                    results=records,
                )
            )
            spec = directive_tool(directive)
            if spec is not None:
                setattr(data, spec.data_key, records)
        return tool_calls
