from codebase_insight.core.application.policies.analysis_tool_policy import (
    CROSS_REFERENCE_NAMESPACE,
    AnalysisToolPolicy,
)
from codebase_insight.core.application.policies.parse_retry_policy import ParseRetryPolicy

__all__ = ["CROSS_REFERENCE_NAMESPACE", "AnalysisToolPolicy", "ParseRetryPolicy"]
