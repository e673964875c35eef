from abc import ABC, abstractmethod

from codebase_insight.core.domain.analysis import CodebaseAnalysis


class AnalysisCachePort(ABC):
    """Persistence sink for finished analyses, keyed by repository full name."""

    @abstractmethod
    async def put(self, repo: str, analysis: CodebaseAnalysis) -> None: ...

    @abstractmethod
    async def get(self, repo: str) -> CodebaseAnalysis | None: ...

    @abstractmethod
    async def list_all(self) -> list[CodebaseAnalysis]: ...

    @abstractmethod
    async def clear(self) -> None: ...

    @abstractmethod
    async def mark_synced(self) -> None:
        """Record that at least one repository finished in the latest batch."""
