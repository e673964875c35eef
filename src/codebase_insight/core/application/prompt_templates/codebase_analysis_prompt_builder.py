from collections.abc import Sequence

from codebase_insight.core.domain.analysis import AnalysisDepth


class CodebaseAnalysisPromptBuilder:
    """Builds the single prompt handed to the agentic CLI for one repository.

    Sections are assembled in a fixed order: task, strategy, optional git
    history, optional ticket cross-reference, time budget, evidence rules and
    finally the output schema with the repository name filled in.
    """

    @staticmethod
    def build(
        repo_full_name: str,
        cross_reference_enabled: bool,
        project_keys: Sequence[str] = (),
        full_clone: bool = False,
        depth: AnalysisDepth = AnalysisDepth.STANDARD,
    ) -> str:
        sections = [_task_section(repo_full_name), _strategy_section()]
        if full_clone:
            sections.append(_git_history_section())
        if cross_reference_enabled:
            sections.append(_cross_reference_section(project_keys))
        sections.append(_time_budget_section(depth))
        sections.append(_evidence_rules_section())
        sections.append(_output_schema_section(repo_full_name, cross_reference_enabled))
        return "\n\n".join(sections)


# ── Section Helpers ──────────────────────────────────────────────────


def _task_section(repo_full_name: str) -> str:
    return (
        "You are analyzing the codebase in the current working directory for the "
        f"repository: {repo_full_name}\n\n"
        "Produce a structured, evidence-backed assessment of this codebase. A staff "
        "engineer will use your findings as input for an organizational SWOT analysis. "
        "Explore with the Read, Glob, Grep and Bash tools. The checkout is read-only."
    )


def _strategy_section() -> str:
    return (
        "## Analysis Strategy\n\n"
        "1. **Discover structure**: Glob for manifests and entry points (README*, "
        "pyproject.toml, package.json, go.mod, Cargo.toml, pom.xml). Read the main "
        "config to learn the stack and build system.\n"
        "2. **Map architecture**: Identify top-level modules, service boundaries and "
        "dependency direction.\n"
        "3. **Assess quality**: Locate test files, estimate the test-to-source ratio, "
        "look at error handling, typing and lint configuration.\n"
        "4. **Find tech debt**: Grep for TODO, FIXME, HACK, XXX and deprecation markers. "
        "Use `wc -l` to spot oversized files.\n"
        "5. **Evaluate delivery risks**: Check dependency freshness and CI/CD config."
    )


def _git_history_section() -> str:
    return (
        "## Git History Analysis (Full Clone Available)\n\n"
        "The full commit history is present. Use it:\n"
        '- `git log --stat --since="6 months ago"` to find high-churn files\n'
        "- `git shortlog -sn` to gauge contributor spread and bus factor\n"
        "- `git blame <file>` to see ownership and age of critical code\n\n"
        "Focus on files that change often but have few tests, and on modules with a "
        "single maintainer."
    )


def _cross_reference_section(project_keys: Sequence[str]) -> str:
    projects = ", ".join(project_keys) if project_keys else "any"
    return (
        "## Ticket Cross-Reference\n\n"
        "Use the issue-tracker tools to search for issues related to what you find "
        "in the code.\n"
        "- Search for issues mentioning the file paths, modules or error patterns you "
        "discovered\n"
        "- Correlate code hotspots with open bugs or in-progress stories\n"
        f"- Projects to search: {projects}\n\n"
        'Report the correlations in the "crossReference" section of the output. Each '
        "correlation names both the code location and the issue key."
    )


def _time_budget_section(depth: AnalysisDepth) -> str:
    minutes = int(depth.profile.timeout_seconds // 60)
    if depth is AnalysisDepth.DEEP:
        return (
            "## Time Budget\n\n"
            f"You have up to {minutes} minutes. Go deep on each section: follow "
            "call chains, read the implementations behind interfaces and back every "
            "claim with several references. Still emit the JSON before time runs out."
        )
    return (
        "## Time Budget\n\n"
        f"You have a HARD LIMIT of {minutes} minutes. Prefer BREADTH over depth: "
        "skim every area once before looking closer at any single one. If you are "
        "running low on time, stop exploring and emit the JSON with what you have."
    )


def _evidence_rules_section() -> str:
    return (
        "## Evidence Rules\n\n"
        "- Every finding MUST cite a specific file path, line range, git log output "
        "or grep result.\n"
        "- Do not speculate about business context or team dynamics.\n"
        '- Prefer concrete numbers: "47 TODO comments in src/auth/" beats "some '
        'technical debt exists".\n'
        "- If you find no evidence for a category, return an empty list.\n"
        "- Skip: node_modules/, vendor/, dist/, build/, .git/, lockfiles, .env*"
    )


def _output_schema_section(repo_full_name: str, cross_reference_enabled: bool) -> str:
    cross_reference = (
        '"crossReference": { "summary": "...", "correlations": ["PROJ-123: ..."] }'
        if cross_reference_enabled
        else '"crossReference": null'
    )
    return (
        "## Output Format\n\n"
        "Respond with ONLY a JSON object wrapped in a ```json code fence, matching "
        "this schema exactly:\n\n"
        "```json\n"
        "{\n"
        f'  "repo": "{repo_full_name}",\n'
        '  "analyzedAt": "<current ISO 8601 timestamp>",\n'
        '  "architecture": { "summary": "...", "modules": ["..."], "concerns": ["..."] },\n'
        '  "quality": { "summary": "...", "strengths": ["..."], "weaknesses": ["..."] },\n'
        '  "technicalDebt": {\n'
        '    "summary": "...",\n'
        '    "items": [{ "description": "...", "location": "...", '
        '"severity": "high | medium | low", "evidence": "..." }]\n'
        "  },\n"
        '  "risks": { "summary": "...", "items": ["..."] },\n'
        f"  {cross_reference}\n"
        "}\n"
        "```\n\n"
        "Do not include any text before or after the code fence."
    )
