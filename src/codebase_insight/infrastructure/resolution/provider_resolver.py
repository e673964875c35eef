from codebase_insight.core.application.ports import CodebaseProviderPort
from codebase_insight.core.domain.shared import CodebaseProviderType
from codebase_insight.infrastructure.common.process import ProcessSupervisor
from codebase_insight.infrastructure.configuration import AppConfig
from codebase_insight.infrastructure.tools.codebase.claude.claude_cli_provider import (
    ClaudeCliProvider,
)
from codebase_insight.infrastructure.tools.codebase.common.git_materializer import GitMaterializer
from codebase_insight.infrastructure.tools.codebase.opencode.opencode_provider import (
    OpenCodeProvider,
)


class ProviderResolver:
    """Factory that instantiates the codebase provider selected in configuration."""

    def __init__(self, config: AppConfig, supervisor: ProcessSupervisor | None = None) -> None:
        self.config = config
        self.supervisor = supervisor or ProcessSupervisor(
            kill_grace_seconds=config.analysis.kill_grace_seconds
        )

    def resolve_materializer(self) -> GitMaterializer:
        analysis = self.config.analysis
        return GitMaterializer(
            self.supervisor,
            clone_host=analysis.clone_host,
            clone_timeout_seconds=analysis.clone_timeout_seconds,
            pull_timeout_seconds=analysis.pull_timeout_seconds,
        )

    def resolve_provider(
        self, provider_type: CodebaseProviderType | None = None
    ) -> CodebaseProviderPort:
        provider_type = provider_type or self.config.analysis.provider
        heartbeat = self.config.analysis.heartbeat_seconds

        if provider_type == CodebaseProviderType.CLAUDE_CLI:
            return ClaudeCliProvider(
                self.supervisor, self.resolve_materializer(), self.config.claude, heartbeat
            )
        if provider_type == CodebaseProviderType.OPENCODE:
            return OpenCodeProvider(
                self.supervisor, self.resolve_materializer(), self.config.opencode, heartbeat
            )
        raise ValueError(f"Unsupported codebase provider: {provider_type}")
