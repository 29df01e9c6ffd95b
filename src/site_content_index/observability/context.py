"""Request-scoped trace context for log correlation across async boundaries."""

from __future__ import annotations

from contextvars import ContextVar
from uuid import uuid4


trace_context: ContextVar[dict | None] = ContextVar("trace_context", default=None)


def generate_trace_id() -> str:
    """32-char hex trace ID."""
    return uuid4().hex


def generate_span_id() -> str:
    """16-char hex span ID."""
    return uuid4().hex[:16]


def get_trace_context() -> dict:
    """Current trace context, creating one when the task has none yet."""
    ctx = trace_context.get()
    if ctx is None or not ctx.get("trace_id"):
        ctx = {"trace_id": generate_trace_id(), "span_id": generate_span_id()}
        trace_context.set(ctx)
    return ctx


def set_trace_context(trace_id: str, span_id: str, **extra: object) -> None:
    trace_context.set({"trace_id": trace_id, "span_id": span_id, **extra})


def update_span_id(span_id: str) -> None:
    """Replace span_id while keeping trace_id and any extra fields."""
    ctx = trace_context.get() or {}
    trace_context.set({**ctx, "span_id": span_id})
