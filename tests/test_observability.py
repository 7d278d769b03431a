import json
import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from agri_intel.agent.workflows.orchestration_graph import trace_node
from agri_intel.infra.config import AppConfig
from agri_intel.observability.logging_utils import (
    get_trace_id,
    log_error,
    log_event,
    trace_scope,
)
from agri_intel.observability.otel import (
    current_span_ids,
    init_otel,
    parse_pairs,
    span_attributes,
    start_span,
    summarize_state,
)
from agri_intel.schemas import OrchestrationData


class SpanAttributeTests(unittest.TestCase):
    def test_parse_pairs(self) -> None:
        self.assertEqual(
            parse_pairs("api-key=abc, env = dev,broken,=x,y="),
            {"api-key": "abc", "env": "dev"},
        )
        self.assertEqual(parse_pairs(None), {})

    def test_long_payload_is_truncated(self) -> None:
        attrs = span_attributes("node.input", "a" * 10, limit=4)
        self.assertEqual(attrs["node.input"], "aaaa...")
        self.assertEqual(attrs["node.input.size"], 10)
        self.assertTrue(attrs["node.input.truncated"])

    def test_structured_payload_is_json(self) -> None:
        attrs = span_attributes("node.output", {"cache_hit": False})
        self.assertEqual(json.loads(attrs["node.output"]), {"cache_hit": False})
        self.assertFalse(attrs["node.output.truncated"])

    def test_summarize_state(self) -> None:
        summary = summarize_state(
            {
                "query": "plant after corn",
                "cache_hit": False,
                "trace": ["cache miss"],
                "tool_names": ["suggestRotation"],
                "data": OrchestrationData(rotation=[]),
            }
        )
        self.assertEqual(
            summary["keys"], ["cache_hit", "data", "query", "tool_names", "trace"]
        )
        self.assertEqual(summary["trace_count"], 1)
        self.assertEqual(summary["tool_names"], ["suggestRotation"])
        self.assertEqual(summary["data_counts"], {"rotation": 0})


class TracingSetupTests(unittest.TestCase):
    def test_no_endpoint_leaves_tracing_off(self) -> None:
        cfg = AppConfig(
            _env_file=None,
            otel_exporter_otlp_endpoint=None,
            otel_exporter_otlp_traces_endpoint=None,
            otel_exporter_otlp_logs_endpoint=None,
        )
        self.assertFalse(init_otel(cfg))

    def test_disabled_exporters_leave_tracing_off(self) -> None:
        cfg = AppConfig(
            _env_file=None,
            otel_exporter_otlp_endpoint="http://collector:4317",
            otel_traces_exporter="none",
            otel_logs_exporter="none",
        )
        self.assertFalse(init_otel(cfg))

    def test_protocol_and_level_are_normalised(self) -> None:
        cfg = AppConfig(
            _env_file=None,
            otel_exporter_otlp_protocol=" HTTP/protobuf ",
            log_level="debug",
        )
        self.assertEqual(cfg.otel_exporter_otlp_protocol, "http/protobuf")
        self.assertEqual(cfg.log_level, "DEBUG")

    def test_span_outside_provider_is_usable(self) -> None:
        with start_span("workflow.test", attributes={"node.name": "x"}) as span:
            span.set_attribute("node.output", "ok")
        self.assertEqual(current_span_ids(), {})


class TraceNodeTests(unittest.IsolatedAsyncioTestCase):
    async def test_result_passes_through(self) -> None:
        async def node(state):
            return {"cache_hit": False, "trace": state["trace"] + ["cache miss"]}

        wrapped = trace_node("cache_check", node)
        result = await wrapped({"query": "q", "trace": []})
        self.assertEqual(result, {"cache_hit": False, "trace": ["cache miss"]})

    async def test_node_error_is_reraised(self) -> None:
        async def node(state):
            raise ValueError("boom")

        wrapped = trace_node("simulate", node)
        with self.assertRaises(ValueError):
            await wrapped({"query": "q"})


class EventLoggingTests(unittest.TestCase):
    def test_trace_scope_restores_previous_id(self) -> None:
        self.assertEqual(get_trace_id(), "unknown")
        with trace_scope("outer") as outer:
            self.assertEqual(outer, "outer")
            with trace_scope() as inner:
                self.assertEqual(len(inner), 12)
                self.assertEqual(get_trace_id(), inner)
            self.assertEqual(get_trace_id(), "outer")
        self.assertEqual(get_trace_id(), "unknown")

    def test_event_payload_carries_trace_id(self) -> None:
        with self.assertLogs("agri_intel", level="INFO") as logs:
            with trace_scope("abc123"):
                log_event("record_search", hits=2)
        payload = json.loads(logs.records[0].getMessage())
        self.assertEqual(payload["event"], "record_search")
        self.assertEqual(payload["trace_id"], "abc123")
        self.assertEqual(payload["hits"], 2)

    def test_error_payload_names_exception_type(self) -> None:
        with self.assertLogs("agri_intel", level="WARNING") as logs:
            log_error("tool_execution_failed", exc=KeyError("rotation"), tool="x")
        record = logs.records[0]
        payload = json.loads(record.getMessage())
        self.assertEqual(record.levelname, "WARNING")
        self.assertEqual(payload["error_type"], "KeyError")
        self.assertEqual(payload["tool"], "x")


if __name__ == "__main__":
    unittest.main()
