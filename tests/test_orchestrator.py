import json
import sys
import unittest
from pathlib import Path
from typing import List, Optional

import httpx

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from agri_intel.agent.orchestrator import Orchestrator
from agri_intel.domain import RecordType
from agri_intel.infra.completions import AgentStudioClient
from agri_intel.infra.errors import SearchServiceError
from agri_intel.infra.record_store import FallbackRecordStore, RecordStore
from agri_intel.infra.response_cache import MemoryResponseCache

FIXED_NOW = 1_700_000_000.0


class _CountingStore(RecordStore):
    kind = "counting"

    def __init__(self, failing: Optional[set] = None) -> None:
        self._inner = FallbackRecordStore(indexed_at=1)
        self._failing = failing or set()
        self.calls: List[RecordType] = []

    async def search(self, record_type, query, filters=None, *, hits_per_page=10):
        self.calls.append(record_type)
        if record_type in self._failing:
            raise SearchServiceError("index unavailable", index="test")
        return await self._inner.search(
            record_type, query, filters, hits_per_page=hits_per_page
        )


class _FakeClock:
    def __init__(self) -> None:
        self.now = 50.0

    def __call__(self) -> float:
        return self.now


def _orchestrator(store: RecordStore, **kwargs) -> Orchestrator:
    kwargs.setdefault("cache", MemoryResponseCache(ttl_seconds=300))
    return Orchestrator(
        store=store,
        fallback_store=FallbackRecordStore(indexed_at=1),
        clock=lambda: FIXED_NOW,
        **kwargs,
    )


class SimulationScenarioTests(unittest.IsolatedAsyncioTestCase):
    async def test_almond_prices(self) -> None:
        result = await _orchestrator(_CountingStore()).run(
            "What are the almond prices in California?"
        )
        self.assertIn("market prices", result.message)
        self.assertIn("Algolia Agent Studio", result.message)
        self.assertEqual([c.tool for c in result.tool_calls], ["getMarketPulse"])
        self.assertIn("Almonds", [r.crop for r in result.data.market])
        self.assertEqual(result.data.market[0].region, "California")
        self.assertIsNone(result.data.rotation)
        self.assertEqual(result.metadata.source, "simulation")
        self.assertEqual(result.metadata.timestamp, int(FIXED_NOW * 1000))
        self.assertEqual(result.metadata.orchestration_type, "algolia_agent_studio")

    async def test_rotation_after_corn(self) -> None:
        result = await _orchestrator(_CountingStore()).run(
            "What should I plant after corn?"
        )
        self.assertIn("agronomy rules", result.message)
        self.assertIn("Corn → Soybeans", result.message)
        self.assertEqual([c.tool for c in result.tool_calls], ["suggestRotation"])
        self.assertEqual(result.data.rotation[0].next_crop, "Soybeans")
        self.assertEqual(result.data.rotation[0].compatibility, "High")

    async def test_every_matched_rotation_rule_is_listed(self) -> None:
        result = await _orchestrator(_CountingStore()).run(
            "What should I plant after cotton, lettuce, canola or tomato?"
        )
        self.assertEqual([c.tool for c in result.tool_calls], ["suggestRotation"])
        pairs = [(r.previous_crop, r.next_crop) for r in result.data.rotation]
        self.assertEqual(
            pairs,
            [
                ("Canola", "Wheat"),
                ("Tomato", "Pepper"),
                ("Lettuce", "Broccoli"),
                ("Cotton", "Peanuts"),
            ],
        )
        for record in result.data.rotation:
            self.assertIn(
                f"{record.previous_crop} → {record.next_crop}: "
                f"{record.compatibility} compatibility",
                result.message,
            )
        self.assertIn("Low (Disease Risk) compatibility", result.message)

    async def test_find_buyers(self) -> None:
        result = await _orchestrator(_CountingStore()).run("Find buyers for my crops")
        self.assertIn("logistics chain", result.message)
        self.assertIn("agronomy rules", result.message)
        self.assertLess(
            result.message.index("agronomy rules"),
            result.message.index("logistics chain"),
        )
        self.assertTrue(result.data.logistics)

    async def test_broad_search(self) -> None:
        result = await _orchestrator(_CountingStore()).run(
            "Analyze my farm's potential"
        )
        self.assertIn("broad search", result.message)
        self.assertNotIn("market prices from", result.message)
        self.assertTrue(result.metadata.broad_search)
        self.assertEqual(len(result.tool_calls), 4)
        for key in ("market", "rotation", "logistics", "benchmarks"):
            self.assertTrue(getattr(result.data, key), msg=key)

    async def test_store_failure_degrades_to_fallback(self) -> None:
        store = _CountingStore(failing={RecordType.MARKET_PRICE})
        result = await _orchestrator(store).run("almond prices")
        self.assertEqual(result.metadata.source, "fallback")
        self.assertTrue(result.data.market)


class CacheBehaviourTests(unittest.IsolatedAsyncioTestCase):
    async def test_repeated_query_is_served_from_cache(self) -> None:
        store = _CountingStore()
        orchestrator = _orchestrator(store)
        first = await orchestrator.run("What should I plant after corn?")
        calls = len(store.calls)
        second = await orchestrator.run("What should I plant after corn?")
        self.assertEqual(len(store.calls), calls)
        self.assertEqual(first.model_dump(), second.model_dump())

    async def test_expired_entry_triggers_new_lookup(self) -> None:
        clock = _FakeClock()
        store = _CountingStore()
        orchestrator = _orchestrator(
            store, cache=MemoryResponseCache(ttl_seconds=300, clock=clock)
        )
        await orchestrator.run("corn prices")
        calls = len(store.calls)
        clock.now += 301
        await orchestrator.run("corn prices")
        self.assertGreater(len(store.calls), calls)

    async def test_degraded_results_are_cached(self) -> None:
        store = _CountingStore(failing={RecordType.MARKET_PRICE})
        orchestrator = _orchestrator(store)
        await orchestrator.run("almond prices")
        calls = len(store.calls)
        cached = await orchestrator.run("almond prices")
        self.assertEqual(len(store.calls), calls)
        self.assertEqual(cached.metadata.source, "fallback")


class LiveOrchestrationTests(unittest.IsolatedAsyncioTestCase):
    def _completions(self, handler) -> AgentStudioClient:
        return AgentStudioClient(
            "APPID1234",
            "write-key",
            "agent-42",
            transport=httpx.MockTransport(handler),
        )

    async def test_live_directives_are_executed(self) -> None:
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["body"] = json.loads(request.content)
            return httpx.Response(
                200,
                json={
                    "message": "Here is what I found.",
                    "tool_calls": [
                        {"tool": "getMarketPulse", "params": {"crop": "Almonds"}},
                        {"tool": "getWeather", "params": {"city": "Fresno"}},
                    ],
                    "data": {},
                },
            )

        completions = self._completions(handler)
        try:
            result = await _orchestrator(
                _CountingStore(), completions=completions, agent_id="agent-42"
            ).run("zzz")
        finally:
            await completions.aclose()

        self.assertEqual(seen["path"], "/agent-studio/1/agents/agent-42/completions")
        self.assertEqual(seen["body"]["message"], "zzz")
        self.assertFalse(seen["body"]["stream"])
        self.assertEqual(len(seen["body"]["tools"]), 4)
        self.assertEqual(result.message, "Here is what I found.")
        self.assertEqual(result.metadata.source, "live")
        self.assertEqual(result.metadata.agent_id, "agent-42")
        self.assertEqual(
            [c.tool for c in result.tool_calls], ["getMarketPulse", "getWeather"]
        )
        self.assertEqual(result.tool_calls[0].params, {"crop": "Almonds"})
        self.assertEqual([r.crop for r in result.data.market], ["Almonds"])
        self.assertEqual(result.tool_calls[1].results, [])

    async def test_failing_live_tool_keeps_other_results(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                json={
                    "message": "Partial answer.",
                    "tool_calls": [
                        {"tool": "getMarketPulse", "params": {"region": "Texas"}},
                        {"tool": "getBenchmarks", "params": {"region": "Midwest"}},
                    ],
                },
            )

        completions = self._completions(handler)
        store = _CountingStore(failing={RecordType.MARKET_PRICE})
        try:
            result = await _orchestrator(store, completions=completions).run("zzz")
        finally:
            await completions.aclose()

        self.assertEqual(result.metadata.source, "live")
        self.assertEqual(result.data.market, [])
        self.assertEqual(len(result.data.benchmarks), 2)

    async def test_live_failure_falls_back_to_simulation(self) -> None:
        completions = self._completions(
            lambda request: httpx.Response(500, text="upstream error")
        )
        try:
            result = await _orchestrator(
                _CountingStore(), completions=completions
            ).run("What are the almond prices in California?")
        finally:
            await completions.aclose()

        self.assertEqual(result.metadata.source, "simulation")
        self.assertIn("market prices", result.message)
        self.assertTrue(result.data.market)

    async def test_malformed_live_payload_falls_back_to_simulation(self) -> None:
        completions = self._completions(
            lambda request: httpx.Response(200, json={"tool_calls": "nope"})
        )
        try:
            result = await _orchestrator(
                _CountingStore(), completions=completions
            ).run("Find buyers for my crops")
        finally:
            await completions.aclose()

        self.assertEqual(result.metadata.source, "simulation")
        self.assertIn("logistics chain", result.message)


if __name__ == "__main__":
    unittest.main()
