"""
OpenTelemetry wiring. Every entry point degrades to a no-op when the
opentelemetry packages are absent or no OTLP endpoint is configured.
"""

from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING, Dict, Optional, Tuple

if TYPE_CHECKING:
    from ..infra.config import AppConfig


DEFAULT_SERVICE_NAME = "agri-intel"
ATTR_MAX_LEN = 2000

_OTEL_INITIALIZED = False
_HTTPX_INSTRUMENTED = False


class _NoopSpan:
    def set_attribute(self, *args, **kwargs) -> None:
        return None

    def record_exception(self, *args, **kwargs) -> None:
        return None

    def set_status(self, *args, **kwargs) -> None:
        return None


def parse_pairs(raw: Optional[str]) -> Dict[str, str]:
    """Parse `k1=v1,k2=v2` as used by OTEL_EXPORTER_OTLP_HEADERS and
    OTEL_RESOURCE_ATTRIBUTES."""
    pairs: Dict[str, str] = {}
    for item in (raw or "").split(","):
        key, sep, value = item.partition("=")
        key, value = key.strip(), value.strip()
        if sep and key and value:
            pairs[key] = value
    return pairs


def _serialize(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False, default=str)


def span_attributes(
    prefix: str, payload: object, limit: int = ATTR_MAX_LEN
) -> Dict[str, object]:
    text = _serialize(payload)
    size = len(text)
    truncated = bool(limit) and size > limit
    if truncated:
        text = text[:limit] + "..."
    return {
        prefix: text,
        f"{prefix}.size": size,
        f"{prefix}.truncated": truncated,
    }


def summarize_state(state: object) -> object:
    """Compact view of an orchestration state for span attributes."""
    if not isinstance(state, dict):
        return state
    summary: Dict[str, object] = {"keys": sorted(state.keys())}
    for key in ("query", "cache_hit", "live_failed", "source", "broad_search"):
        if key in state:
            summary[key] = state[key]
    if state.get("tool_names"):
        summary["tool_names"] = list(state["tool_names"])
    for key in ("trace", "tool_calls"):
        value = state.get(key)
        if isinstance(value, list):
            summary[f"{key}_count"] = len(value)
    data = state.get("data")
    if hasattr(data, "model_dump"):
        summary["data_counts"] = {
            key: len(records)
            for key, records in data.model_dump().items()
            if records is not None
        }
    return summary


@contextmanager
def start_span(
    name: str,
    attributes: Optional[Dict[str, object]] = None,
    *,
    service_name: str = DEFAULT_SERVICE_NAME,
):
    try:
        from opentelemetry import trace
    except ImportError:
        yield _NoopSpan()
        return
    tracer = trace.get_tracer(service_name)
    with tracer.start_as_current_span(name) as span:
        for key, value in (attributes or {}).items():
            if value is not None:
                span.set_attribute(key, value)
        yield span


def record_exception(span: object, exc: Exception) -> None:
    span.record_exception(exc)
    try:
        from opentelemetry.trace import Status, StatusCode
    except ImportError:
        return None
    span.set_status(Status(StatusCode.ERROR, str(exc)))


def current_span_ids() -> Dict[str, str]:
    """Hex ids of the active span, or {} outside a recorded span."""
    try:
        from opentelemetry import trace
    except ImportError:
        return {}
    context = trace.get_current_span().get_span_context()
    if not context.is_valid:
        return {}
    return {
        "otel_trace_id": format(context.trace_id, "032x"),
        "otel_span_id": format(context.span_id, "016x"),
    }


def _exporter_enabled(name: Optional[str]) -> bool:
    if not name:
        return True
    return name.strip().lower() not in {"none", "off", "false", "0"}


def _signal_endpoint(
    base: Optional[str], signal: str, override: Optional[str], use_http: bool
) -> Optional[str]:
    endpoint = (override or base or "").strip()
    if not endpoint or not use_http or "/v1/" in endpoint:
        return endpoint or None
    return endpoint.rstrip("/") + f"/v1/{signal}"


def _exporters(use_http: bool) -> Tuple[type, type]:
    if use_http:
        from opentelemetry.exporter.otlp.proto.http._log_exporter import (
            OTLPLogExporter,
        )
        from opentelemetry.exporter.otlp.proto.http.trace_exporter import (
            OTLPSpanExporter,
        )
    else:
        from opentelemetry.exporter.otlp.proto.grpc._log_exporter import (
            OTLPLogExporter,
        )
        from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import (
            OTLPSpanExporter,
        )
    return OTLPSpanExporter, OTLPLogExporter


def init_otel(config: "AppConfig") -> bool:
    """Install OTLP trace and log exporters from the OTEL_* settings."""
    global _OTEL_INITIALIZED
    if _OTEL_INITIALIZED:
        return True
    enable_traces = _exporter_enabled(config.otel_traces_exporter)
    enable_logs = _exporter_enabled(config.otel_logs_exporter)
    base = config.otel_exporter_otlp_endpoint
    if not (enable_traces or enable_logs):
        return False
    if not (
        base
        or config.otel_exporter_otlp_traces_endpoint
        or config.otel_exporter_otlp_logs_endpoint
    ):
        return False

    use_http = config.otel_exporter_otlp_protocol.startswith("http")
    try:
        from opentelemetry import trace
        from opentelemetry._logs import set_logger_provider
        from opentelemetry.sdk._logs import LoggerProvider, LoggingHandler
        from opentelemetry.sdk._logs.export import BatchLogRecordProcessor
        from opentelemetry.sdk.resources import Resource
        from opentelemetry.sdk.trace import TracerProvider
        from opentelemetry.sdk.trace.export import BatchSpanProcessor

        span_exporter_cls, log_exporter_cls = _exporters(use_http)
    except ImportError:
        return False

    headers = parse_pairs(config.otel_exporter_otlp_headers)
    resource = Resource.create(
        {
            "service.name": config.otel_service_name,
            **parse_pairs(config.otel_resource_attributes),
        }
    )

    traces_endpoint = _signal_endpoint(
        base, "traces", config.otel_exporter_otlp_traces_endpoint, use_http
    )
    if enable_traces and traces_endpoint:
        tracer_provider = TracerProvider(resource=resource)
        tracer_provider.add_span_processor(
            BatchSpanProcessor(
                span_exporter_cls(endpoint=traces_endpoint, headers=headers)
            )
        )
        trace.set_tracer_provider(tracer_provider)

    logs_endpoint = _signal_endpoint(
        base, "logs", config.otel_exporter_otlp_logs_endpoint, use_http
    )
    if enable_logs and logs_endpoint:
        logger_provider = LoggerProvider(resource=resource)
        logger_provider.add_log_record_processor(
            BatchLogRecordProcessor(
                log_exporter_cls(endpoint=logs_endpoint, headers=headers)
            )
        )
        set_logger_provider(logger_provider)
        logging.getLogger().addHandler(
            LoggingHandler(level=logging.INFO, logger_provider=logger_provider)
        )

    _OTEL_INITIALIZED = True
    return True


def instrument_fastapi(app: object) -> bool:
    try:
        from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
    except ImportError:
        return False
    FastAPIInstrumentor.instrument_app(app)
    return True


def instrument_httpx() -> bool:
    global _HTTPX_INSTRUMENTED
    if _HTTPX_INSTRUMENTED:
        return True
    try:
        from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
    except ImportError:
        return False
    HTTPXClientInstrumentor().instrument()
    _HTTPX_INSTRUMENTED = True
    return True
