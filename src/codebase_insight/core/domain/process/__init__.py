from codebase_insight.core.domain.process.stream_event import (
    AnalysisPayloadEvent,
    AssistantEvent,
    ContentBlock,
    ContentBlockType,
    DecodedStream,
    ResultEvent,
    StreamEvent,
)
from codebase_insight.core.domain.process.supervised_run_outcome import (
    SPAWN_FAILED_EXIT_CODE,
    SupervisedRunOutcome,
)

__all__ = [
    "SPAWN_FAILED_EXIT_CODE",
    "AnalysisPayloadEvent",
    "AssistantEvent",
    "ContentBlock",
    "ContentBlockType",
    "DecodedStream",
    "ResultEvent",
    "StreamEvent",
    "SupervisedRunOutcome",
]
