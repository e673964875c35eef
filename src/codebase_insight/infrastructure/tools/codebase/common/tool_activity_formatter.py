"""Human-readable progress lines for tool invocations seen in the stream."""

from typing import Any

from codebase_insight.core.application.policies import CROSS_REFERENCE_NAMESPACE

MAX_COMMAND_PREVIEW = 80


def describe_tool_use(name: str, tool_input: dict[str, Any] | None = None) -> str:
    tool_input = tool_input or {}
    lowered = name.lower()
    if lowered == "read":
        return f"Reading {tool_input.get('file_path') or tool_input.get('path') or 'file'}"
    if lowered == "glob":
        return f"Searching for {tool_input.get('pattern', 'files')}"
    if lowered == "grep":
        return f'Grepping for "{tool_input.get("pattern", "...")}"'
    if lowered == "bash":
        command = str(tool_input.get("command", "command"))
        return f"Running: {command[:MAX_COMMAND_PREVIEW]}"
    if lowered.startswith(CROSS_REFERENCE_NAMESPACE):
        return f"Querying {name[len(CROSS_REFERENCE_NAMESPACE):]}"
    return f"Using {name}"
