"""Incremental decoder for the CLI's newline-delimited JSON event stream.

Chunks may split lines (and multi-byte UTF-8 sequences) anywhere, so bytes
are buffered until a newline arrives and only complete lines are decoded.
"""

import json
from typing import Any

from codebase_insight.core.domain.process import (
    AnalysisPayloadEvent,
    AssistantEvent,
    ContentBlock,
    ContentBlockType,
    DecodedStream,
    ResultEvent,
    StreamEvent,
)

MAX_TURNS_SUBTYPE = "error_max_turns"


class StreamEventDecoder:
    """Feeds raw stdout bytes in, gets classified events out.

    One instance decodes exactly one stream. After a terminal record (a bare
    analysis payload or a result with text) every later line is ignored.
    """

    def __init__(self) -> None:
        self._buffer = bytearray()
        self._summary = DecodedStream()
        self._terminated = False

    @property
    def summary(self) -> DecodedStream:
        return self._summary

    def feed(self, chunk: bytes) -> list[StreamEvent]:
        self._buffer.extend(chunk)
        events: list[StreamEvent] = []
        while (newline := self._buffer.find(b"\n")) != -1:
            raw = bytes(self._buffer[:newline])
            del self._buffer[: newline + 1]
            event = self._decode_line(raw)
            if event is not None:
                events.append(event)
        return events

    def close(self) -> list[StreamEvent]:
        """Flush an unterminated trailing line at end of stream."""
        if not self._buffer:
            return []
        raw = bytes(self._buffer)
        self._buffer.clear()
        event = self._decode_line(raw)
        return [event] if event is not None else []

    @classmethod
    def decode_all(cls, data: bytes) -> DecodedStream:
        decoder = cls()
        decoder.feed(data)
        decoder.close()
        return decoder.summary

    # ── Line classification ──

    def _decode_line(self, raw: bytes) -> StreamEvent | None:
        if self._terminated:
            return None
        line = raw.decode("utf-8", errors="replace").strip()
        if not line:
            return None
        try:
            record = json.loads(line)
        except json.JSONDecodeError:
            self._track_fallback(line)
            return None
        if not isinstance(record, dict):
            self._track_fallback(line)
            return None
        return self._classify(record, line)

    def _classify(self, record: dict[str, Any], line: str) -> StreamEvent | None:
        if "repo" in record and "architecture" in record:
            self._summary.terminal_text = line
            self._terminated = True
            return AnalysisPayloadEvent(raw_json=line)
        record_type = record.get("type")
        if record_type == "result":
            return self._on_result(record)
        if record_type == "assistant":
            return self._on_assistant(record)
        return None

    def _on_result(self, record: dict[str, Any]) -> ResultEvent:
        exhausted = record.get("subtype") == MAX_TURNS_SUBTYPE
        if exhausted:
            self._summary.exhausted_turn_budget = True
        text = record.get("result")
        if isinstance(text, str):
            self._summary.terminal_text = text
            self._terminated = True
            return ResultEvent(text=text, exhausted_turn_budget=exhausted)
        return ResultEvent(text=None, exhausted_turn_budget=exhausted)

    def _on_assistant(self, record: dict[str, Any]) -> AssistantEvent | None:
        message = record.get("message")
        content = message.get("content") if isinstance(message, dict) else None
        if not isinstance(content, list):
            return None
        blocks = [b for b in (_content_block(item) for item in content) if b is not None]
        for block in blocks:
            if block.type == ContentBlockType.TEXT and block.text:
                self._summary.last_text = block.text
        return AssistantEvent(content_blocks=blocks)

    def _track_fallback(self, line: str) -> None:
        current = self._summary.fallback_text
        if current is None or len(line) > len(current):
            self._summary.fallback_text = line


def _content_block(item: Any) -> ContentBlock | None:
    if not isinstance(item, dict):
        return None
    block_type = item.get("type")
    if block_type == ContentBlockType.TOOL_USE:
        tool_input = item.get("input")
        return ContentBlock(
            type=ContentBlockType.TOOL_USE,
            name=str(item.get("name") or ""),
            input=tool_input if isinstance(tool_input, dict) else {},
        )
    if block_type == ContentBlockType.TEXT:
        text = item.get("text")
        return ContentBlock(type=ContentBlockType.TEXT, text=text if isinstance(text, str) else None)
    return None
