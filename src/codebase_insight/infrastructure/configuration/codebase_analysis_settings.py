from pathlib import Path

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from codebase_insight.core.domain.analysis import AnalysisDepth, RunOptions
from codebase_insight.core.domain.shared import CodebaseProviderType


class CodebaseAnalysisSettings(BaseSettings):
    """Settings shared by every codebase analysis backend."""

    provider: CodebaseProviderType = Field(
        default=CodebaseProviderType.CLAUDE_CLI, alias="CODEBASE_PROVIDER"
    )
    workspace_path: Path = Field(
        default_factory=Path.cwd,
        description="Root under which .codebase_insight/ is created",
        alias="WORKSPACE_PATH",
    )
    github_token: SecretStr | None = Field(default=None, alias="GITHUB_TOKEN")
    clone_host: str = Field(default="github.com", alias="GIT_CLONE_HOST")
    depth: AnalysisDepth = Field(default=AnalysisDepth.STANDARD, alias="ANALYSIS_DEPTH")
    model: str = Field(default="sonnet", alias="ANALYSIS_MODEL")
    shallow_clone: bool = Field(default=True, alias="ANALYSIS_SHALLOW_CLONE")
    heartbeat_seconds: float = Field(default=30.0, gt=0, alias="ANALYSIS_HEARTBEAT_SECONDS")
    kill_grace_seconds: float = Field(default=5.0, ge=0, alias="PROCESS_KILL_GRACE_SECONDS")
    clone_timeout_seconds: float = Field(default=120.0, gt=0, alias="GIT_CLONE_TIMEOUT_SECONDS")
    pull_timeout_seconds: float = Field(default=60.0, gt=0, alias="GIT_PULL_TIMEOUT_SECONDS")
    cache_dir: Path | None = Field(
        default=None,
        description="Defaults to <workspace>/.codebase_insight/analyses",
        alias="ANALYSIS_CACHE_DIR",
    )

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def data_root(self) -> Path:
        return self.workspace_path / ".codebase_insight"

    @property
    def resolved_cache_dir(self) -> Path:
        return self.cache_dir or self.data_root / "analyses"

    def run_options(self) -> RunOptions:
        return RunOptions.for_depth(
            self.depth, model=self.model, shallow_clone=self.shallow_clone
        )
