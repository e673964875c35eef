from enum import StrEnum, auto


class AnalysisStage(StrEnum):
    """Per-repository pipeline stages, in the only order they may be emitted."""

    CLONING = auto()
    ANALYZING = auto()
    PARSING = auto()
    DONE = auto()
    FAILED = auto()

    @property
    def is_terminal(self) -> bool:
        return self in (AnalysisStage.DONE, AnalysisStage.FAILED)
