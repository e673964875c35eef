"""Structlog setup for codebase-insight.

Everything is written to stderr: the analysed CLIs own stdout. Events pass
through secret redaction before the schema processor nests them, so neither
the console nor the JSON renderer ever sees a clone URL with a token in it.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Any

import structlog

from codebase_insight.infrastructure.observability.logging.log_schema_processor import (
    log_schema_processor,
)
from codebase_insight.infrastructure.observability.redaction_service import (
    redaction_processor,
)

_CONFIGURED = False
_JSON_ENVIRONMENTS = ("ci", "qa", "staging", "prod", "production")


def configure_logging(level: int | str | None = None) -> None:
    """Configure structlog and the stdlib root logger on first call only.

    ``level`` defaults to ``LOG_LEVEL`` (INFO when unset). The renderer is
    JSON when ``LOG_FORMAT=json`` or ``APP_ENV`` names a deployed environment.
    """
    global _CONFIGURED  # noqa: PLW0603
    if _CONFIGURED:
        return
    _CONFIGURED = True

    renderer = _select_renderer()
    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        redaction_processor,
        log_schema_processor,
    ]
    structlog.configure(
        processors=[*shared_processors, renderer],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )

    # git and asyncio warnings logged through stdlib get the same shape
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                *shared_processors,
                renderer,
            ],
        )
    )
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(resolve_level(level))


def get_logger(component: str) -> Any:
    """Lazy logger tagged with ``context_component``.

    Safe at module import time: configuration is resolved on first use, so
    modules imported before ``configure_logging`` still log through it.
    """
    return structlog.get_logger(context_component=component)


def resolve_level(level: int | str | None) -> int:
    if level is None:
        level = os.environ.get("LOG_LEVEL", "INFO")
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def _select_renderer() -> Any:
    log_format = os.environ.get("LOG_FORMAT", "").lower()
    if log_format in ("json", "console"):
        use_json = log_format == "json"
    else:
        use_json = os.environ.get("APP_ENV", "local").lower() in _JSON_ENVIRONMENTS
    if use_json:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
