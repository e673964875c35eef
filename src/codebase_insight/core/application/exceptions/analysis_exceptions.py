"""Codebase analysis exception hierarchy.

Every provider failure is translated into one of these types so the
orchestrator can decide retry-or-surface without string matching.
"""

from typing import Any, ClassVar


class CodebaseAnalysisError(Exception):
    """Base exception for all codebase analysis failures."""

    retryable: ClassVar[bool] = False

    def __init__(self, message: str = "", *, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context: dict[str, Any] = context or {}


class SetupError(CodebaseAnalysisError):
    """A global prerequisite is missing; the whole batch is aborted."""

    def __init__(
        self,
        message: str,
        *,
        missing: list[str] | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, context=context)
        self.missing: list[str] = missing or []


class CloneError(CodebaseAnalysisError):
    """Cloning failed. The message has already been scrubbed of credentials."""


class AnalysisTimeoutError(CodebaseAnalysisError):
    """The deadline expired and nothing salvageable had been produced."""

    def __init__(
        self, elapsed_minutes: int, *, context: dict[str, Any] | None = None
    ) -> None:
        super().__init__(f"Analysis timed out after {elapsed_minutes}m", context=context)
        self.elapsed_minutes = elapsed_minutes


class ParseError(CodebaseAnalysisError):
    """The CLI output could not be turned into a valid analysis."""

    retryable: ClassVar[bool] = True


class TurnBudgetExhaustedError(CodebaseAnalysisError):
    """The CLI hit its max-turn limit without producing an answer.

    Retrying with the same budget is pointless; callers should suggest a
    deeper analysis profile instead.
    """


class ExitCodeError(CodebaseAnalysisError):
    """The CLI exited non-zero or could not be started. ``stderr`` is kept verbatim."""

    def __init__(
        self,
        message: str,
        *,
        exit_code: int,
        stderr: str = "",
        spawn_failed: bool = False,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, context=context)
        self.exit_code = exit_code
        self.stderr = stderr
        self.spawn_failed = spawn_failed
