"""Composition root: wires configuration, adapters and the analysis workflow."""

from codebase_insight.core.application.workflows.analysis import CodebaseAnalysisWorkflow
from codebase_insight.infrastructure.configuration import AppConfig
from codebase_insight.infrastructure.observability import configure_logging
from codebase_insight.infrastructure.observability.tracing_setup import configure_tracing
from codebase_insight.infrastructure.repositories import (
    AnalysisCacheFileAdapter,
    LocalWorkspaceAdapter,
)
from codebase_insight.infrastructure.resolution.provider_resolver import ProviderResolver


def build_codebase_analysis_workflow(
    config: AppConfig | None = None, *, configure_observability: bool = True
) -> CodebaseAnalysisWorkflow:
    if configure_observability:
        configure_logging()
        configure_tracing()
    config = config or AppConfig()
    analysis = config.analysis

    def read_token() -> str | None:
        return analysis.github_token.get_secret_value() if analysis.github_token else None

    return CodebaseAnalysisWorkflow(
        provider=ProviderResolver(config).resolve_provider(),
        cache=AnalysisCacheFileAdapter(analysis.resolved_cache_dir),
        workspace=LocalWorkspaceAdapter(analysis.data_root, read_token),
        options=analysis.run_options(),
    )
