import structlog

logger = structlog.get_logger()

# Tools that never modify the checkout.
_READ_ONLY_TOOLS: list[str] = ["Read", "Glob", "Grep"]

# Shell subcommands the CLI may run; everything else in the shell is denied.
_READ_ONLY_SHELL_COMMANDS: list[str] = [
    "git log",
    "git shortlog",
    "git blame",
    "find",
    "wc",
]

CROSS_REFERENCE_NAMESPACE = "mcp__"


class AnalysisToolPolicy:
    """Builds the least-privilege tool allow-list handed to the analysis CLI.

    The cross-reference tool (ticket-tracker search) is the only non-local
    capability and is appended only when the caller enables it.
    """

    def __init__(self, cross_reference_tool: str = "mcp__jira") -> None:
        self._cross_reference_tool = cross_reference_tool

    @property
    def cross_reference_tool(self) -> str:
        return self._cross_reference_tool

    @property
    def read_only_shell_commands(self) -> list[str]:
        return list(_READ_ONLY_SHELL_COMMANDS)

    def allowed_tools(self, cross_reference_enabled: bool = False) -> list[str]:
        tools = [*_READ_ONLY_TOOLS]
        tools.extend(f"Bash({command}:*)" for command in _READ_ONLY_SHELL_COMMANDS)
        if cross_reference_enabled:
            tools.append(self._cross_reference_tool)
        logger.debug(
            "Analysis tool allow-list built",
            tool_count=len(tools),
            cross_reference_enabled=cross_reference_enabled,
        )
        return tools
