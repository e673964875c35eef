"""Pure functions that recover a ``CodebaseAnalysis`` from raw CLI output.

The payload may arrive wrapped in a JSON envelope, inside a ```json fence,
or bare. Each step passes its input through unchanged when its precondition
does not hold.
"""

import json
import re
from typing import Any

from pydantic import ValidationError

from codebase_insight.core.application.exceptions import ParseError
from codebase_insight.core.domain.analysis import CodebaseAnalysis

REQUIRED_FIELDS: tuple[str, ...] = ("repo", "architecture", "quality")

_JSON_FENCE = re.compile(r"```json\s*(.*?)```", re.DOTALL | re.IGNORECASE)
_ENVELOPE_TEXT_KEYS = ("result", "content")


def extract_analysis(raw_text: str) -> CodebaseAnalysis:
    """Turn raw CLI output into a validated analysis or raise ParseError."""
    text = unwrap_envelope(raw_text)
    text = strip_json_fence(text)
    document = _parse_json_object(text)
    _check_required_fields(document)
    return _validate(document)


def unwrap_envelope(text: str) -> str:
    """Follow ``result`` / ``content`` string fields of non-payload JSON objects."""
    stripped = text.strip()
    if not stripped.startswith("{"):
        return text
    try:
        document = json.loads(stripped)
    except json.JSONDecodeError:
        return text
    if not isinstance(document, dict) or "repo" in document:
        return text
    for key in _ENVELOPE_TEXT_KEYS:
        inner = document.get(key)
        if isinstance(inner, str):
            return unwrap_envelope(inner)
    return text


def strip_json_fence(text: str) -> str:
    """Keep only the interior of the first ```json fence, if there is one."""
    match = _JSON_FENCE.search(text)
    return match.group(1) if match else text


def _parse_json_object(text: str) -> dict[str, Any]:
    try:
        document = json.loads(text.strip())
    except json.JSONDecodeError as exc:
        raise ParseError(
            f"Analysis output is not valid JSON: {exc.msg}",
            context={"line": exc.lineno, "column": exc.colno},
        ) from exc
    if not isinstance(document, dict):
        raise ParseError(
            "Analysis output is not a JSON object",
            context={"json_type": type(document).__name__},
        )
    return document


def _check_required_fields(document: dict[str, Any]) -> None:
    missing = [name for name in REQUIRED_FIELDS if document.get(name) is None]
    if missing:
        raise ParseError(
            f"Missing required fields in analysis output: {', '.join(missing)}",
            context={"missing": missing},
        )


def _validate(document: dict[str, Any]) -> CodebaseAnalysis:
    try:
        return CodebaseAnalysis.model_validate(document)
    except ValidationError as exc:
        raise ParseError(
            f"Analysis output failed schema validation: {exc.error_count()} error(s)",
            context={"errors": [str(err.get("loc")) for err in exc.errors()]},
        ) from exc
