from codebase_insight.core.application.ports.analysis_cache_port import AnalysisCachePort
from codebase_insight.core.application.ports.codebase_provider_port import CodebaseProviderPort
from codebase_insight.core.application.ports.workspace_port import WorkspacePort

__all__ = ["AnalysisCachePort", "CodebaseProviderPort", "WorkspacePort"]
