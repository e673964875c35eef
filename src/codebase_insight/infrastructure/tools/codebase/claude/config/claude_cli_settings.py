import json

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ClaudeCliSettings(BaseSettings):
    """Settings for the Claude CLI analysis backend."""

    command: str = Field(default="claude", alias="CLAUDE_CLI_COMMAND")
    cross_reference_tool: str = Field(
        default="mcp__jira",
        description="Tool name allow-listed when ticket cross-referencing is enabled",
        alias="CLAUDE_CROSS_REFERENCE_TOOL",
    )
    cross_reference_aliases: list[str] = Field(
        default_factory=lambda: ["jira", "atlassian"],
        description="Substrings identifying a ticket-tracker server in `claude mcp list`",
        alias="CLAUDE_CROSS_REFERENCE_ALIASES",
    )
    check_timeout_seconds: float = Field(default=10.0, alias="CLAUDE_CHECK_TIMEOUT_SECONDS")

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @field_validator("cross_reference_aliases", mode="before")
    @classmethod
    def parse_aliases(cls, value: object) -> list[str]:
        """Parse comma-separated string or JSON array into a lowercase list."""
        if isinstance(value, str):
            cleaned = value.strip().strip("'").strip('"')
            if not cleaned:
                return []
            try:
                parsed = json.loads(cleaned)
            except json.JSONDecodeError:
                parsed = cleaned.split(",")
            value = parsed if isinstance(parsed, list) else [parsed]
        if isinstance(value, list):
            return [str(v).strip().lower() for v in value if str(v).strip()]
        return []
