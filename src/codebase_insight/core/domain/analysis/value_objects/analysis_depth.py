from dataclasses import dataclass
from enum import StrEnum, auto


@dataclass(frozen=True)
class DepthProfile:
    max_turns: int
    timeout_seconds: float


class AnalysisDepth(StrEnum):
    STANDARD = auto()
    DEEP = auto()

    @property
    def profile(self) -> DepthProfile:
        return DEPTH_PROFILES[self]


DEPTH_PROFILES: dict[AnalysisDepth, DepthProfile] = {
    AnalysisDepth.STANDARD: DepthProfile(max_turns=30, timeout_seconds=20 * 60),
    AnalysisDepth.DEEP: DepthProfile(max_turns=60, timeout_seconds=60 * 60),
}
