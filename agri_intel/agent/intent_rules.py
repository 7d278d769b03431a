from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple

from .tools.registry import (
    GET_BENCHMARKS,
    MARKET_PULSE,
    OPTIMIZE_LOGISTICS,
    SUGGEST_ROTATION,
    TOOLS,
    ToolSpec,
)


MARKET_KEYWORDS = ["price", "market", "almond", "california"]
ROTATION_KEYWORDS = ["plant", "rotation", "after", "crop"]
LOGISTICS_KEYWORDS = ["buyer", "sell", "logistics", "find"]
BENCHMARK_KEYWORDS = ["benchmark", "yield", "practice"]

# Checked in this order; every group that matches contributes its tool.
KEYWORD_RULES: List[Tuple[ToolSpec, List[str]]] = [
    (MARKET_PULSE, MARKET_KEYWORDS),
    (SUGGEST_ROTATION, ROTATION_KEYWORDS),
    (OPTIMIZE_LOGISTICS, LOGISTICS_KEYWORDS),
    (GET_BENCHMARKS, BENCHMARK_KEYWORDS),
]


@dataclass(frozen=True)
class IntentDecision:
    tools: Tuple[ToolSpec, ...]
    broad_search: bool = False

    @property
    def tool_names(self) -> List[str]:
        return [tool.name for tool in self.tools]


def _contains_any(text: str, keywords: List[str]) -> bool:
    return any(word in text for word in keywords)


def matched_tools(query: str) -> List[ToolSpec]:
    text = (query or "").lower()
    return [tool for tool, keywords in KEYWORD_RULES if _contains_any(text, keywords)]


def classify_query(query: str) -> IntentDecision:
    """Map a free-text query to the tools to invoke.

    Substring matching on the lowercased query; no tool match means a broad
    search over every tool.
    """
    tools = matched_tools(query)
    if not tools:
        return IntentDecision(tools=TOOLS, broad_search=True)
    return IntentDecision(tools=tuple(tools))


class IntentRouter:
    def route(self, query: str) -> Tuple[str, List[str]]:
        decision = classify_query(query)
        mode = "broad_search" if decision.broad_search else "tools"
        return mode, decision.tool_names
