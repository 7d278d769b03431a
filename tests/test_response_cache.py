import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from agri_intel.infra.config import AppConfig
from agri_intel.infra.response_cache import (
    MemoryResponseCache,
    NoopResponseCache,
    build_response_cache,
)
from agri_intel.schemas import OrchestrationMetadata, OrchestrationResult


class _FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def _result(message: str = "ok") -> OrchestrationResult:
    return OrchestrationResult(
        message=message,
        metadata=OrchestrationMetadata(agent_id="test-agent", timestamp=1),
    )


class MemoryResponseCacheTests(unittest.TestCase):
    def setUp(self) -> None:
        self.clock = _FakeClock()
        self.cache = MemoryResponseCache(ttl_seconds=300, clock=self.clock)

    def test_hit_within_ttl(self) -> None:
        self.cache.set("q", _result())
        self.clock.now += 299
        self.assertEqual(self.cache.get("q").message, "ok")

    def test_expired_entry_is_evicted_on_read(self) -> None:
        self.cache.set("q", _result())
        self.clock.now += 300
        self.assertIsNone(self.cache.get("q"))
        self.assertEqual(len(self.cache), 0)

    def test_keys_are_raw_query_text(self) -> None:
        self.cache.set("Corn prices", _result())
        self.assertIsNone(self.cache.get("corn prices"))
        self.assertIsNone(self.cache.get("Corn prices "))

    def test_returned_value_is_a_copy(self) -> None:
        self.cache.set("q", _result())
        first = self.cache.get("q")
        first.message = "changed"
        self.assertEqual(self.cache.get("q").message, "ok")

    def test_clear(self) -> None:
        self.cache.set("q", _result())
        self.cache.clear()
        self.assertIsNone(self.cache.get("q"))


class BuildResponseCacheTests(unittest.TestCase):
    def test_disabled_store(self) -> None:
        cfg = AppConfig(_env_file=None, response_cache_store="disabled")
        cache = build_response_cache(cfg)
        self.assertIsInstance(cache, NoopResponseCache)
        cache.set("q", _result())
        self.assertIsNone(cache.get("q"))

    def test_memory_store_default(self) -> None:
        cfg = AppConfig(_env_file=None, response_cache_store="MEMORY")
        self.assertIsInstance(build_response_cache(cfg), MemoryResponseCache)


if __name__ == "__main__":
    unittest.main()
