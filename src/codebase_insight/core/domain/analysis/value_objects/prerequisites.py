from dataclasses import dataclass


@dataclass(frozen=True)
class Prerequisites:
    cli_present: bool
    cli_authenticated: bool
    git_present: bool
    cross_reference_tool_present: bool = False

    def missing_requirements(self) -> list[str]:
        """Global gaps that make a whole batch impossible, in reporting order."""
        missing: list[str] = []
        if not self.cli_present:
            missing.append("cli")
        if not self.cli_authenticated:
            missing.append("cli_authentication")
        if not self.git_present:
            missing.append("git")
        return missing
