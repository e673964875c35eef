from enum import StrEnum, auto


class CodebaseProviderType(StrEnum):
    """Identifies the external agentic CLI that performs the analysis."""

    CLAUDE_CLI = auto()
    OPENCODE = auto()

    @property
    def cli_command(self) -> str:
        return DEFAULT_CLI_COMMANDS[self]


DEFAULT_CLI_COMMANDS: dict[CodebaseProviderType, str] = {
    CodebaseProviderType.CLAUDE_CLI: "claude",
    CodebaseProviderType.OPENCODE: "opencode",
}
