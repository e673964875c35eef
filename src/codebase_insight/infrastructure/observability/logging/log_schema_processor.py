"""Schema processor for structlog.

Transforms the flat structlog event_dict into the nested JSON structure used
by every log line. All field extraction uses dict.pop(key, default) to avoid
KeyError.
"""

from __future__ import annotations

import os
from typing import Any

from opentelemetry import trace


def _build_root_fields(event_dict: dict[str, Any]) -> dict[str, Any]:
    return {
        "timestamp": event_dict.pop("timestamp", None),
        "level": event_dict.pop("level", "info"),
        "service": os.environ.get("SERVICE_NAME", "codebase-insight"),
        "environment": os.environ.get("APP_ENV", "local"),
        "trace_id": event_dict.pop("trace_id", None),
        "span_id": event_dict.pop("span_id", None),
        "message": event_dict.pop("event", ""),
    }


def _safe_float(value: Any) -> float | None:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _build_processing(event_dict: dict[str, Any]) -> dict[str, Any] | None:
    status = event_dict.pop("processing_status", None)
    if status is None:
        return None
    return {
        "status": status,
        "duration_ms": _safe_float(event_dict.pop("processing_duration_ms", None)),
        "retries": event_dict.pop("processing_retries", None),
    }


def _build_error(event_dict: dict[str, Any]) -> dict[str, Any] | None:
    """Extract error block. Returns None if no error_type present."""
    error_type = event_dict.pop("error_type", None)
    if error_type is None:
        return None
    return {
        "type": error_type,
        "details": event_dict.pop("error_details", None),
        "retryable": event_dict.pop("error_retryable", False),
    }


def _build_analysis(event_dict: dict[str, Any]) -> dict[str, Any] | None:
    """Extract the per-repository analysis block."""
    repo = event_dict.pop("repo", None)
    stage = event_dict.pop("stage", None)
    provider = event_dict.pop("provider", None)
    if repo is None and stage is None and provider is None:
        return None
    return {"repo": repo, "stage": stage, "provider": provider}


def _build_context(event_dict: dict[str, Any]) -> dict[str, Any] | None:
    component = event_dict.pop("context_component", None)
    if component is None:
        return None
    return {"component": component, "command": event_dict.pop("context_command", None)}


def _build_metadata(event_dict: dict[str, Any]) -> dict[str, Any] | None:
    source = event_dict.pop("source_system", None)
    tags = event_dict.pop("tags", None)
    if source is None and tags is None:
        return None
    return {"source_system": source, "tags": tags}


def _inject_otel_ids(event_dict: dict[str, Any]) -> None:
    """Overwrite trace_id and span_id from the current OTel span if recording."""
    span = trace.get_current_span()
    if span.is_recording():
        ctx = span.get_span_context()
        event_dict["trace_id"] = format(ctx.trace_id, "032x")
        event_dict["span_id"] = format(ctx.span_id, "016x")


def log_schema_processor(
    logger: Any,  # noqa: ARG001
    method_name: str,  # noqa: ARG001
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Structlog processor that reshapes a flat event_dict into the log schema."""
    _inject_otel_ids(event_dict)
    result = _build_root_fields(event_dict)

    for key, builder in (
        ("processing", _build_processing),
        ("error", _build_error),
        ("analysis", _build_analysis),
        ("context", _build_context),
        ("metadata", _build_metadata),
    ):
        block = builder(event_dict)
        if block is not None:
            result[key] = block

    if event_dict:
        result["extra"] = dict(event_dict)

    return result
