from codebase_insight.infrastructure.repositories.analysis_cache_file_adapter import (
    AnalysisCacheFileAdapter,
)
from codebase_insight.infrastructure.repositories.local_workspace_adapter import (
    LocalWorkspaceAdapter,
)

__all__ = ["AnalysisCacheFileAdapter", "LocalWorkspaceAdapter"]
