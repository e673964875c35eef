from codebase_insight.core.domain.analysis.analysis_batch_result import (
    AnalysisBatchResult,
    RepositoryFailure,
)
from codebase_insight.core.domain.analysis.codebase_analysis import (
    ArchitectureSection,
    CodebaseAnalysis,
    CrossReferenceSection,
    QualitySection,
    RisksSection,
    TechDebtItem,
    TechnicalDebtSection,
)
from codebase_insight.core.domain.analysis.value_objects.analysis_depth import (
    AnalysisDepth,
    DepthProfile,
)
from codebase_insight.core.domain.analysis.value_objects.analysis_stage import AnalysisStage
from codebase_insight.core.domain.analysis.value_objects.prerequisites import Prerequisites
from codebase_insight.core.domain.analysis.value_objects.progress_event import (
    ProgressEvent,
    ProgressSink,
)
from codebase_insight.core.domain.analysis.value_objects.run_options import RunOptions
from codebase_insight.core.domain.analysis.value_objects.tech_debt_severity import (
    TechDebtSeverity,
)

__all__ = [
    "AnalysisBatchResult",
    "AnalysisDepth",
    "AnalysisStage",
    "ArchitectureSection",
    "CodebaseAnalysis",
    "CrossReferenceSection",
    "DepthProfile",
    "Prerequisites",
    "ProgressEvent",
    "ProgressSink",
    "QualitySection",
    "RepositoryFailure",
    "RisksSection",
    "RunOptions",
    "TechDebtItem",
    "TechDebtSeverity",
    "TechnicalDebtSection",
]
