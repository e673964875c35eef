from codebase_insight.core.application.workflows.analysis.codebase_analysis_workflow import (
    CodebaseAnalysisWorkflow,
    failure_message,
)

__all__ = ["CodebaseAnalysisWorkflow", "failure_message"]
