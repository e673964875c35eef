from codebase_insight.core.application.exceptions.analysis_exceptions import (
    AnalysisTimeoutError,
    CloneError,
    CodebaseAnalysisError,
    ExitCodeError,
    ParseError,
    SetupError,
    TurnBudgetExhaustedError,
)

__all__ = [
    "AnalysisTimeoutError",
    "CloneError",
    "CodebaseAnalysisError",
    "ExitCodeError",
    "ParseError",
    "SetupError",
    "TurnBudgetExhaustedError",
]
