import json
import os
from collections.abc import Mapping

from codebase_insight.core.application.policies import AnalysisToolPolicy
from codebase_insight.core.domain.analysis import Prerequisites, RunOptions
from codebase_insight.core.domain.shared import CodebaseProviderType
from codebase_insight.infrastructure.common.process import ProcessSupervisor
from codebase_insight.infrastructure.observability.logger_factory_service import get_logger
from codebase_insight.infrastructure.tools.codebase.common.base_cli_provider import (
    BaseCliProvider,
)
from codebase_insight.infrastructure.tools.codebase.common.git_materializer import GitMaterializer
from codebase_insight.infrastructure.tools.codebase.opencode.config.opencode_settings import (
    OpenCodeSettings,
)

logger = get_logger("opencode_provider")

CONFIG_CONTENT_ENV = "OPENCODE_CONFIG_CONTENT"


class OpenCodeProvider(BaseCliProvider):
    """Runs the analysis through ``opencode --print``.

    OpenCode has no ``--allowedTools`` flag; the same read-only policy is
    expressed as an inline permission config passed through the environment.
    It never offers the ticket cross-reference tool.
    """

    _PROVIDER_TYPE = CodebaseProviderType.OPENCODE
    _SUPPORTS_CROSS_REFERENCE = False

    def __init__(
        self,
        supervisor: ProcessSupervisor,
        materializer: GitMaterializer,
        settings: OpenCodeSettings,
        heartbeat_seconds: float = 30.0,
    ) -> None:
        super().__init__(
            supervisor,
            materializer,
            AnalysisToolPolicy(),
            command=settings.command,
            heartbeat_seconds=heartbeat_seconds,
        )
        self._settings = settings

    def _build_args(
        self, prompt: str, options: RunOptions, allowed_tools: list[str]  # noqa: ARG002
    ) -> list[str]:
        args = ["--print", "--output-format", "stream-json", "--max-turns", str(options.max_turns)]
        if self._settings.model:
            args.extend(["--model", self._settings.model])
        args.extend(["-p", prompt])
        return args

    def _build_env(self, allowed_tools: list[str]) -> Mapping[str, str]:  # noqa: ARG002
        return {**os.environ, CONFIG_CONTENT_ENV: json.dumps(self.permission_config())}

    def permission_config(self) -> dict:
        bash_rules = {f"{cmd}*": "allow" for cmd in self._tool_policy.read_only_shell_commands}
        return {
            "permission": {
                "edit": "deny",
                "webfetch": "deny",
                "bash": {**bash_rules, "*": "deny"},
            }
        }

    async def check_prerequisites(self) -> Prerequisites:
        cli_present = await self.is_available()
        prerequisites = Prerequisites(
            cli_present=cli_present,
            # OpenCode has no separate login check; an installed CLI is assumed configured.
            cli_authenticated=cli_present,
            git_present=self._materializer.is_git_available(),
            cross_reference_tool_present=False,
        )
        logger.info(
            "OpenCode prerequisites checked",
            provider=self.name,
            missing=prerequisites.missing_requirements(),
        )
        return prerequisites
