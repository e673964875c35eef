from dataclasses import dataclass

from codebase_insight.core.domain.analysis.value_objects.analysis_depth import AnalysisDepth


@dataclass(frozen=True)
class RunOptions:
    """Knobs for a single ``analyze`` invocation.

    ``max_turns`` and ``timeout_seconds`` always come from the depth profile
    selected at configuration time; use :meth:`for_depth` to build one.
    """

    shallow_clone: bool
    depth: AnalysisDepth
    model: str
    max_turns: int
    timeout_seconds: float

    @classmethod
    def for_depth(
        cls, depth: AnalysisDepth, model: str = "sonnet", shallow_clone: bool = True
    ) -> "RunOptions":
        profile = depth.profile
        return cls(
            shallow_clone=shallow_clone,
            depth=depth,
            model=model,
            max_turns=profile.max_turns,
            timeout_seconds=profile.timeout_seconds,
        )
