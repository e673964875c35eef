"""OpenTelemetry spans for analysis batches and supervised child processes.

Spans are only exported when ``TRACING_EXPORTER=console``; they then go to
stderr so the JSON a CLI may print on stdout stays clean. Without an exporter
the spans still exist in-process and carry the trace ids the log schema
processor injects.
"""

from __future__ import annotations

import functools
import inspect
import os
import sys
from collections.abc import Callable, Mapping
from typing import Any, ParamSpec, TypeVar

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.util.types import AttributeValue

_CONFIGURED = False
TRACER_NAME = "codebase_insight"

P = ParamSpec("P")
R = TypeVar("R")

SpanAttributes = Mapping[str, AttributeValue]


def configure_tracing(exporter: str | None = None) -> None:
    """Install the global TracerProvider once; later calls are no-ops."""
    global _CONFIGURED  # noqa: PLW0603
    if _CONFIGURED:
        return
    _CONFIGURED = True

    provider = TracerProvider(
        resource=Resource.create(
            {
                "service.name": os.environ.get("SERVICE_NAME", "codebase-insight"),
                "deployment.environment": os.environ.get("APP_ENV", "local"),
            }
        )
    )
    exporter = (exporter or os.environ.get("TRACING_EXPORTER", "none")).lower()
    if exporter == "console":
        provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter(out=sys.stderr)))
    trace.set_tracer_provider(provider)


def get_tracer(name: str = TRACER_NAME) -> trace.Tracer:
    return trace.get_tracer(name)


def trace_operation(
    span_name: str, attributes: Callable[..., SpanAttributes] | None = None
) -> Callable:
    """Run the decorated coroutine inside a span named ``span_name``.

    ``attributes`` receives the same arguments as the decorated function and
    returns the span attributes for that call, e.g. the repository count of
    a batch. The tracer is looked up per call, so a provider installed after
    import is honoured.
    """

    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        if not inspect.iscoroutinefunction(func):
            raise TypeError(f"trace_operation expects a coroutine function, got {func!r}")

        @functools.wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            with get_tracer().start_as_current_span(span_name) as span:
                if attributes is not None:
                    span.set_attributes(dict(attributes(*args, **kwargs)))
                return await func(*args, **kwargs)  # type: ignore[misc]

        return wrapper  # type: ignore[return-value]

    return decorator


def annotate_current_span(attributes: SpanAttributes) -> None:
    """Attach outcome attributes to the active span, if one is recording."""
    span: Any = trace.get_current_span()
    if span.is_recording():
        span.set_attributes(dict(attributes))
