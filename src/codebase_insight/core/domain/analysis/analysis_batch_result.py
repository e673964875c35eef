from dataclasses import dataclass, field

from codebase_insight.core.domain.analysis.codebase_analysis import CodebaseAnalysis


@dataclass(frozen=True)
class RepositoryFailure:
    repo: str
    error: str


@dataclass
class AnalysisBatchResult:
    results: list[CodebaseAnalysis] = field(default_factory=list)
    failures: list[RepositoryFailure] = field(default_factory=list)

    @property
    def integration_connected(self) -> bool:
        return len(self.results) > 0
