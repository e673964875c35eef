import json

import pytest

from codebase_insight.core.domain.process import (
    AnalysisPayloadEvent,
    AssistantEvent,
    ResultEvent,
)
from codebase_insight.infrastructure.tools.codebase.common.stream_event_decoder import (
    StreamEventDecoder,
)


def _line(record: dict) -> bytes:
    return (json.dumps(record) + "\n").encode()


def _assistant(*blocks: dict) -> bytes:
    return _line({"type": "assistant", "message": {"content": list(blocks)}})


@pytest.fixture
def stream() -> bytes:
    return b"".join(
        [
            b"Welcome to the CLI \xe2\x9c\xa8\n",
            _line({"type": "system", "subtype": "init"}),
            _assistant(
                {"type": "text", "text": "Looking around"},
                {"type": "tool_use", "name": "Read", "input": {"file_path": "README.md"}},
            ),
            _assistant({"type": "text", "text": "Almost done"}),
            _line({"type": "result", "subtype": "success", "result": "```json\n{}\n```"}),
            _assistant({"type": "text", "text": "ignored after result"}),
        ]
    )


def test_result_text_is_terminal(stream):
    decoded = StreamEventDecoder.decode_all(stream)

    assert decoded.text == "```json\n{}\n```"
    assert decoded.last_text == "Almost done"
    assert decoded.has_terminal_result
    assert decoded.exhausted_turn_budget is False


@pytest.mark.parametrize("chunk_size", [1, 2, 3, 7, 64])
def test_decoding_is_independent_of_chunk_boundaries(stream, chunk_size):
    decoder = StreamEventDecoder()
    events = []
    for start in range(0, len(stream), chunk_size):
        events.extend(decoder.feed(stream[start : start + chunk_size]))
    events.extend(decoder.close())

    assert decoder.summary == StreamEventDecoder.decode_all(stream)
    assert [type(e) for e in events] == [AssistantEvent, AssistantEvent, ResultEvent]
    assert decoder.summary.fallback_text == "Welcome to the CLI ✨"


def test_tool_use_blocks_are_surfaced():
    decoder = StreamEventDecoder()

    (event,) = decoder.feed(
        _assistant({"type": "tool_use", "name": "Grep", "input": {"pattern": "TODO"}})
    )

    assert isinstance(event, AssistantEvent)
    assert event.tool_uses[0].name == "Grep"
    assert event.tool_uses[0].input == {"pattern": "TODO"}


def test_bare_payload_line_is_terminal(sample_analysis_json):
    decoder = StreamEventDecoder()
    late = _assistant({"type": "text", "text": "late"})
    events = decoder.feed(sample_analysis_json.encode() + b"\n" + late)

    assert isinstance(events[0], AnalysisPayloadEvent)
    assert len(events) == 1
    assert decoder.summary.text == sample_analysis_json


def test_turn_budget_exhaustion_without_text():
    decoded = StreamEventDecoder.decode_all(
        _line({"type": "result", "subtype": "error_max_turns"})
    )

    assert decoded.exhausted_turn_budget is True
    assert decoded.text == ""


def test_unterminated_tail_is_flushed_on_close():
    decoder = StreamEventDecoder()
    decoder.feed(json.dumps({"type": "result", "result": "tail"}).encode())

    assert decoder.summary.text == ""
    decoder.close()
    assert decoder.summary.text == "tail"


def test_last_assistant_text_wins_without_result():
    decoded = StreamEventDecoder.decode_all(
        _assistant({"type": "text", "text": "first"})
        + _assistant({"type": "text", "text": ""})
        + _assistant({"type": "text", "text": "second"})
    )

    assert decoded.text == "second"


def test_longest_non_json_line_is_the_fallback():
    decoded = StreamEventDecoder.decode_all(b"short\na much longer banner line\nmid line\n[1, 2]\n")

    assert decoded.text == "a much longer banner line"


def test_blank_and_garbled_lines_are_tolerated():
    decoded = StreamEventDecoder.decode_all(b"\n   \n{\"type\": \"assis\n\xff\xfe\n")

    assert decoded.terminal_text is None
    assert decoded.fallback_text is not None
