from codebase_insight.core.domain.analysis import AnalysisDepth
from codebase_insight.core.domain.shared import CodebaseProviderType
from codebase_insight.infrastructure.configuration import CodebaseAnalysisSettings
from codebase_insight.infrastructure.tools.codebase.claude.config.claude_cli_settings import (
    ClaudeCliSettings,
)


def test_environment_selects_provider_and_depth(monkeypatch, tmp_path):
    monkeypatch.setenv("CODEBASE_PROVIDER", "opencode")
    monkeypatch.setenv("ANALYSIS_DEPTH", "deep")
    monkeypatch.setenv("ANALYSIS_SHALLOW_CLONE", "false")
    monkeypatch.setenv("WORKSPACE_PATH", str(tmp_path))
    monkeypatch.setenv("GITHUB_TOKEN", "ghp_env")

    settings = CodebaseAnalysisSettings()

    assert settings.provider is CodebaseProviderType.OPENCODE
    assert settings.depth is AnalysisDepth.DEEP
    assert settings.github_token.get_secret_value() == "ghp_env"
    options = settings.run_options()
    assert (options.max_turns, options.timeout_seconds, options.shallow_clone) == (60, 3600, False)


def test_layout_defaults(tmp_path):
    settings = CodebaseAnalysisSettings(WORKSPACE_PATH=tmp_path)

    assert settings.data_root == tmp_path / ".codebase_insight"
    assert settings.resolved_cache_dir == tmp_path / ".codebase_insight" / "analyses"
    assert settings.model == "sonnet"
    assert settings.shallow_clone is True


def test_cross_reference_aliases_from_json_list(monkeypatch):
    monkeypatch.setenv("CLAUDE_CROSS_REFERENCE_ALIASES", '["Jira", "Linear"]')

    assert ClaudeCliSettings().cross_reference_aliases == ["jira", "linear"]
