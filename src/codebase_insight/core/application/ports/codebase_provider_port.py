from abc import ABC, abstractmethod
from collections.abc import Callable
from pathlib import Path

from codebase_insight.core.domain.analysis import CodebaseAnalysis, Prerequisites, RunOptions
from codebase_insight.core.domain.shared import CodebaseProviderType


class CodebaseProviderPort(ABC):
    """Port for an external agentic CLI able to analyse a checked-out repository.

    Implementations MUST raise only ``CodebaseAnalysisError`` subclasses from
    ``materialize`` and ``analyze``:
        - CloneError: when the repository cannot be cloned.
        - AnalysisTimeoutError: deadline expired with nothing salvageable.
        - ExitCodeError: the CLI exited non-zero.
        - TurnBudgetExhaustedError: the CLI ran out of turns without output.
        - ParseError: the output is missing or invalid.
    """

    @property
    @abstractmethod
    def provider_type(self) -> CodebaseProviderType: ...

    @property
    def name(self) -> str:
        return self.provider_type.value

    @abstractmethod
    async def is_available(self) -> bool:
        """Return True when the CLI binary is on the execution path."""

    @abstractmethod
    async def check_prerequisites(self) -> Prerequisites:
        """Check CLI, authentication, git and the cross-reference tool. Never raises."""

    @abstractmethod
    async def materialize(
        self, repo_full_name: str, target_dir: Path, access_token: str, shallow: bool
    ) -> None:
        """Clone ``repo_full_name`` into ``target_dir``, or fast-forward an existing clone."""

    @abstractmethod
    async def analyze(
        self,
        repo_path: Path,
        prompt: str,
        options: RunOptions,
        cross_reference_enabled: bool = False,
        on_progress: Callable[[str], None] | None = None,
    ) -> CodebaseAnalysis:
        """Run the CLI against ``repo_path`` and return the parsed analysis.

        Args:
            repo_path: Working directory of the CLI process.
            prompt: Fully-assembled analysis prompt.
            options: Model, turn budget and deadline for this run.
            cross_reference_enabled: Allow-list the ticket-tracker tool if supported.
            on_progress: Receives human-readable activity lines while the CLI runs.

        Returns:
            The analysis; ``partial`` is True when salvaged after a deadline.
        """
