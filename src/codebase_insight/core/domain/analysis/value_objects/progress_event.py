from collections.abc import Callable
from dataclasses import dataclass

from codebase_insight.core.domain.analysis.value_objects.analysis_stage import AnalysisStage


@dataclass(frozen=True)
class ProgressEvent:
    repo: str
    stage: AnalysisStage
    message: str


ProgressSink = Callable[[ProgressEvent], None]
