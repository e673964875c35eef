from codebase_insight.core.application.prompt_templates.codebase_analysis_prompt_builder import (
    CodebaseAnalysisPromptBuilder,
)

__all__ = ["CodebaseAnalysisPromptBuilder"]
