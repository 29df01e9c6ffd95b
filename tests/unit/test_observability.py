"""Unit tests for observability module."""

import json
import logging

from opentelemetry.trace import SpanKind
import pytest

from site_content_index.observability import (
    SEARCH_LATENCY,
    JsonFormatter,
    configure_logging,
    create_span,
    get_metrics,
    get_metrics_content_type,
    track_latency,
)
from site_content_index.observability.context import get_trace_context, set_trace_context, update_span_id


def _record(message: str = "hello", **extra) -> logging.LogRecord:
    record = logging.LogRecord("site_content_index.search.ranking", logging.INFO, __file__, 1, message, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.mark.unit
class TestJsonFormatter:
    def test_includes_trace_context(self):
        set_trace_context("a" * 32, "b" * 16, route="/api/search")

        payload = json.loads(JsonFormatter().format(_record()))

        assert payload["trace_id"] == "a" * 32
        assert payload["span_id"] == "b" * 16
        assert payload["route"] == "/api/search"
        assert payload["component"] == "ranking"
        assert payload["message"] == "hello"

    def test_redacts_and_serializes_extras(self):
        payload = json.loads(JsonFormatter().format(_record(token="s3cret", sources={"doc", "blog"})))

        assert payload["token"] == "[REDACTED]"
        assert payload["sources"] == ["blog", "doc"]

    def test_truncates_long_messages(self):
        payload = json.loads(JsonFormatter().format(_record("x" * 5000)))

        assert len(payload["message"]) == JsonFormatter.MAX_MESSAGE_LEN + 3


@pytest.mark.unit
def test_configure_logging_installs_single_handler():
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        configure_logging(level="debug", json_output=True, logger_levels={"noisy": "error"})

        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JsonFormatter)
        assert root.level == logging.DEBUG
        assert logging.getLogger("noisy").level == logging.ERROR
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)


@pytest.mark.unit
def test_trace_context_helpers():
    set_trace_context("c" * 32, "d" * 16)
    update_span_id("e" * 16)

    assert get_trace_context() == {"trace_id": "c" * 32, "span_id": "e" * 16}


@pytest.mark.unit
def test_create_span_propagates_errors():
    with pytest.raises(RuntimeError, match="boom"):
        with create_span("unit.test", kind=SpanKind.INTERNAL, attributes={"k": "v"}):
            raise RuntimeError("boom")


@pytest.mark.unit
def test_track_latency_records_histogram():
    with track_latency(SEARCH_LATENCY, operation="unit-test"):
        pass

    assert b'content_search_latency_seconds_count{operation="unit-test"} 1.0' in get_metrics()
    assert get_metrics_content_type().startswith("text/plain")
