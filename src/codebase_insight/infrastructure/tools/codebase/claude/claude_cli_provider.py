from pathlib import Path

from codebase_insight.core.application.policies import AnalysisToolPolicy
from codebase_insight.core.domain.analysis import Prerequisites, RunOptions
from codebase_insight.core.domain.shared import CodebaseProviderType
from codebase_insight.infrastructure.common.process import ProcessSupervisor
from codebase_insight.infrastructure.observability.logger_factory_service import get_logger
from codebase_insight.infrastructure.tools.codebase.claude.config.claude_cli_settings import (
    ClaudeCliSettings,
)
from codebase_insight.infrastructure.tools.codebase.common.base_cli_provider import (
    BaseCliProvider,
)
from codebase_insight.infrastructure.tools.codebase.common.git_materializer import GitMaterializer

logger = get_logger("claude_cli_provider")


class ClaudeCliProvider(BaseCliProvider):
    """Runs the analysis through ``claude --print`` with an explicit tool allow-list."""

    _PROVIDER_TYPE = CodebaseProviderType.CLAUDE_CLI
    _SUPPORTS_CROSS_REFERENCE = True

    def __init__(
        self,
        supervisor: ProcessSupervisor,
        materializer: GitMaterializer,
        settings: ClaudeCliSettings,
        heartbeat_seconds: float = 30.0,
    ) -> None:
        super().__init__(
            supervisor,
            materializer,
            AnalysisToolPolicy(cross_reference_tool=settings.cross_reference_tool),
            command=settings.command,
            heartbeat_seconds=heartbeat_seconds,
        )
        self._settings = settings

    def _build_args(self, prompt: str, options: RunOptions, allowed_tools: list[str]) -> list[str]:
        return [
            "--print",
            "--output-format",
            "stream-json",
            "--allowedTools",
            ",".join(allowed_tools),
            "--model",
            options.model,
            "--max-turns",
            str(options.max_turns),
            "-p",
            prompt,
        ]

    async def check_prerequisites(self) -> Prerequisites:
        cli_present = await self.is_available()
        git_present = self._materializer.is_git_available()
        authenticated = cross_reference = False
        if cli_present:
            authenticated = await self._check_version()
            cross_reference = await self._check_cross_reference_server()
        prerequisites = Prerequisites(
            cli_present=cli_present,
            cli_authenticated=authenticated,
            git_present=git_present,
            cross_reference_tool_present=cross_reference,
        )
        logger.info(
            "Claude CLI prerequisites checked",
            provider=self.name,
            missing=prerequisites.missing_requirements(),
            cross_reference_tool_present=cross_reference,
        )
        return prerequisites

    async def _check_version(self) -> bool:
        outcome = await self._supervisor.run(
            self._command,
            ["--version"],
            cwd=Path.cwd(),
            timeout_seconds=self._settings.check_timeout_seconds,
        )
        return outcome.succeeded

    async def _check_cross_reference_server(self) -> bool:
        outcome = await self._supervisor.run(
            self._command,
            ["mcp", "list"],
            cwd=Path.cwd(),
            timeout_seconds=self._settings.check_timeout_seconds,
        )
        if not outcome.succeeded:
            return False
        return has_cross_reference_server(outcome.stdout, self._settings.cross_reference_aliases)


def has_cross_reference_server(mcp_list_output: str, aliases: list[str]) -> bool:
    """True when the first column of any ``claude mcp list`` line matches an alias."""
    for line in mcp_list_output.splitlines():
        columns = line.split()
        if not columns:
            continue
        server_name = columns[0].lower()
        if any(alias in server_name for alias in aliases):
            return True
    return False
