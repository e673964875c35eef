from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from codebase_insight.infrastructure.configuration.codebase_analysis_settings import (
    CodebaseAnalysisSettings,
)
from codebase_insight.infrastructure.tools.codebase.claude.config.claude_cli_settings import (
    ClaudeCliSettings,
)
from codebase_insight.infrastructure.tools.codebase.opencode.config.opencode_settings import (
    OpenCodeSettings,
)


class AppConfig(BaseSettings):
    """Master config class combining all sub-settings."""

    analysis: CodebaseAnalysisSettings = Field(default_factory=CodebaseAnalysisSettings)
    claude: ClaudeCliSettings = Field(default_factory=ClaudeCliSettings)
    opencode: OpenCodeSettings = Field(default_factory=OpenCodeSettings)

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")
