from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class OpenCodeSettings(BaseSettings):
    """Settings for the OpenCode CLI analysis backend."""

    command: str = Field(default="opencode", alias="OPENCODE_CLI_COMMAND")
    model: str | None = Field(
        default=None,
        description="provider/model id; when unset OpenCode uses its own configured model",
        alias="OPENCODE_MODEL",
    )

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")
