"""Events decoded from the agentic CLI's newline-delimited JSON stream."""

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any


class ContentBlockType(StrEnum):
    TOOL_USE = "tool_use"
    TEXT = "text"


@dataclass(frozen=True)
class ContentBlock:
    type: ContentBlockType
    name: str | None = None
    input: dict[str, Any] = field(default_factory=dict)
    text: str | None = None


@dataclass(frozen=True)
class AssistantEvent:
    content_blocks: list[ContentBlock]

    @property
    def tool_uses(self) -> list[ContentBlock]:
        return [b for b in self.content_blocks if b.type == ContentBlockType.TOOL_USE]


@dataclass(frozen=True)
class ResultEvent:
    text: str | None
    exhausted_turn_budget: bool = False


@dataclass(frozen=True)
class AnalysisPayloadEvent:
    """A bare analysis object printed directly on stdout, without a wrapper."""

    raw_json: str


StreamEvent = AssistantEvent | ResultEvent | AnalysisPayloadEvent


@dataclass
class DecodedStream:
    """What survives of a stream once it has been fully decoded."""

    terminal_text: str | None = None
    last_text: str | None = None
    fallback_text: str | None = None
    exhausted_turn_budget: bool = False

    @property
    def text(self) -> str:
        return self.terminal_text or self.last_text or self.fallback_text or ""

    @property
    def has_terminal_result(self) -> bool:
        return self.terminal_text is not None
