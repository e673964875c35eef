import signal

from codebase_insight.core.domain.analysis import (
    AnalysisBatchResult,
    AnalysisDepth,
    AnalysisStage,
    Prerequisites,
    RepositoryFailure,
    RunOptions,
)
from codebase_insight.core.domain.process import DecodedStream, SupervisedRunOutcome


def test_depth_profiles_are_fixed():
    standard = RunOptions.for_depth(AnalysisDepth.STANDARD)
    deep = RunOptions.for_depth(AnalysisDepth.DEEP, model="opus", shallow_clone=False)

    assert (standard.max_turns, standard.timeout_seconds) == (30, 1200)
    assert standard.model == "sonnet"
    assert standard.shallow_clone is True
    assert (deep.max_turns, deep.timeout_seconds) == (60, 3600)
    assert deep.model == "opus"
    assert deep.shallow_clone is False


def test_missing_requirements_lists_global_gaps_in_order():
    prerequisites = Prerequisites(cli_present=False, cli_authenticated=False, git_present=False)

    assert prerequisites.missing_requirements() == ["cli", "cli_authentication", "git"]


def test_cross_reference_tool_is_not_a_requirement():
    prerequisites = Prerequisites(
        cli_present=True,
        cli_authenticated=True,
        git_present=True,
        cross_reference_tool_present=False,
    )

    assert prerequisites.missing_requirements() == []


def test_terminal_stages():
    assert AnalysisStage.DONE.is_terminal
    assert AnalysisStage.FAILED.is_terminal
    assert not AnalysisStage.PARSING.is_terminal


def test_batch_is_connected_only_with_a_success(sample_analysis):
    failed_only = AnalysisBatchResult(
        results=[], failures=[RepositoryFailure(repo="a/b", error="boom")]
    )
    mixed = AnalysisBatchResult(results=[sample_analysis], failures=failed_only.failures)

    assert failed_only.integration_connected is False
    assert mixed.integration_connected is True


def test_decoded_stream_text_priority():
    assert DecodedStream(terminal_text="t", last_text="l", fallback_text="f").text == "t"
    assert DecodedStream(last_text="l", fallback_text="f").text == "l"
    assert DecodedStream(fallback_text="f").text == "f"
    assert DecodedStream().text == ""


def test_outcome_flags():
    assert SupervisedRunOutcome("", "", 0, False).succeeded
    assert SupervisedRunOutcome("", "no such file", 127, False, spawn_error=True).spawn_failed
    assert not SupervisedRunOutcome("", "", 127, False).spawn_failed
    # a child that died from SIGHUP reports -1 and still counts as started
    hung_up = SupervisedRunOutcome("", "", -signal.SIGHUP, False)
    assert not hung_up.spawn_failed
    assert not hung_up.succeeded
