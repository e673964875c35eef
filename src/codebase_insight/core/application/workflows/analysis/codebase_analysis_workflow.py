"""Batch orchestrator: clone, analyze, parse and cache each repository in turn."""

import time
from collections.abc import Callable, Sequence
from pathlib import Path

from structlog.contextvars import bound_contextvars

from codebase_insight.core.application.exceptions import (
    AnalysisTimeoutError,
    CloneError,
    CodebaseAnalysisError,
    ExitCodeError,
    ParseError,
    SetupError,
    TurnBudgetExhaustedError,
)
from codebase_insight.core.application.policies import ParseRetryPolicy
from codebase_insight.core.application.ports import (
    AnalysisCachePort,
    CodebaseProviderPort,
    WorkspacePort,
)
from codebase_insight.core.application.prompt_templates import CodebaseAnalysisPromptBuilder
from codebase_insight.core.domain.analysis import (
    AnalysisBatchResult,
    AnalysisStage,
    CodebaseAnalysis,
    Prerequisites,
    ProgressEvent,
    ProgressSink,
    RepositoryFailure,
    RunOptions,
)
from codebase_insight.infrastructure.observability.logger_factory_service import get_logger
from codebase_insight.infrastructure.observability.metrics_service import (
    ANALYSES_TOTAL,
    ANALYSIS_DURATION_SECONDS,
)
from codebase_insight.infrastructure.observability.redaction_service import redact_text
from codebase_insight.infrastructure.observability.tracing_setup import (
    annotate_current_span,
    trace_operation,
)

logger = get_logger("codebase_analysis_workflow")

Emit = Callable[[AnalysisStage, str], None]


def _batch_span_attributes(
    workflow: "CodebaseAnalysisWorkflow", repos: Sequence[str], *_args: object, **_kwargs: object
) -> dict[str, str | int]:
    return {
        "analysis.provider": workflow._provider.name,  # noqa: SLF001
        "analysis.repo_count": len(repos),
    }


class CodebaseAnalysisWorkflow:
    """Sequential per-repository pipeline: Setup -> Clone -> Analyze -> Cache.

    Each repository moves ``cloning -> analyzing -> parsing -> done`` or drops
    to ``failed`` from any stage. One repository failing never stops the batch;
    only a global setup gap does.
    """

    def __init__(
        self,
        provider: CodebaseProviderPort,
        cache: AnalysisCachePort,
        workspace: WorkspacePort,
        options: RunOptions,
        prompt_builder: CodebaseAnalysisPromptBuilder | None = None,
        retry_policy: ParseRetryPolicy | None = None,
    ) -> None:
        self._provider = provider
        self._cache = cache
        self._workspace = workspace
        self._options = options
        self._prompt_builder = prompt_builder or CodebaseAnalysisPromptBuilder()
        self._retry_policy = retry_policy or ParseRetryPolicy()

    # ── Queries ──────────────────────────────────────────────────────

    async def check_prerequisites(self) -> Prerequisites:
        return await self._provider.check_prerequisites()

    async def get_cached_analysis(self, repo: str) -> CodebaseAnalysis | None:
        return await self._cache.get(repo)

    async def list_cached_analyses(self) -> list[CodebaseAnalysis]:
        return await self._cache.list_all()

    async def clear_cloned_repos(self) -> None:
        """Remove every local clone and forget the cached analyses."""
        self._workspace.clear_repositories()
        await self._cache.clear()

    def get_storage_size(self) -> int:
        return self._workspace.storage_size_bytes()

    # ── Batch ────────────────────────────────────────────────────────

    @trace_operation("workflow.codebase_analysis", attributes=_batch_span_attributes)
    async def execute(
        self,
        repos: Sequence[str],
        on_progress: ProgressSink | None = None,
        cross_reference_project_keys: Sequence[str] = (),
    ) -> AnalysisBatchResult:
        """Analyze ``repos`` one after another.

        Raises:
            SetupError: when the CLI, its authentication, git or the access
                token is missing. Nothing is cloned in that case.
        """
        logger.info(
            "Codebase analysis batch started", repo_count=len(repos), provider=self._provider.name
        )
        prerequisites = await self._step_1_verify_setup()
        cross_reference_enabled = prerequisites.cross_reference_tool_present

        results: list[CodebaseAnalysis] = []
        failures: list[RepositoryFailure] = []
        for repo in repos:
            emit = _progress_emitter(repo, on_progress)
            with bound_contextvars(repo=repo, provider=self._provider.name):
                started = time.monotonic()
                try:
                    analysis = await self._run_repository(
                        repo, emit, cross_reference_enabled, cross_reference_project_keys
                    )
                except Exception as exc:  # noqa: BLE001
                    failures.append(self._record_failure(repo, exc, emit))
                    continue
                finally:
                    ANALYSIS_DURATION_SECONDS.labels(provider=self._provider.name).observe(
                        time.monotonic() - started
                    )
                results.append(analysis)
                ANALYSES_TOTAL.labels(
                    provider=self._provider.name,
                    outcome="partial" if analysis.partial else "success",
                ).inc()

        batch = AnalysisBatchResult(results=results, failures=failures)
        annotate_current_span(
            {"analysis.succeeded": len(results), "analysis.failed": len(failures)}
        )
        if batch.integration_connected:
            await self._cache.mark_synced()
        logger.info(
            "Codebase analysis batch finished",
            succeeded=len(results),
            failed=len(failures),
            processing_status="SUCCESS" if not failures else "PARTIAL",
        )
        return batch

    # ── Step Methods ─────────────────────────────────────────────────

    async def _step_1_verify_setup(self) -> Prerequisites:
        prerequisites = await self._provider.check_prerequisites()
        missing = prerequisites.missing_requirements()
        if not self._workspace.get_access_token():
            missing.append("access_token")
        if missing:
            logger.error(
                "Codebase analysis setup incomplete",
                processing_status="ERROR",
                error_type="SetupError",
                error_details=", ".join(missing),
            )
            raise SetupError(
                f"Codebase analysis is not set up: missing {', '.join(missing)}",
                missing=missing,
            )
        return prerequisites

    async def _run_repository(
        self,
        repo: str,
        emit: Emit,
        cross_reference_enabled: bool,
        project_keys: Sequence[str],
    ) -> CodebaseAnalysis:
        repo_dir = await self._step_2_materialize(repo, emit)
        analysis = await self._step_3_analyze(
            repo, repo_dir, emit, cross_reference_enabled, project_keys
        )
        await self._step_4_cache(repo, analysis, emit)
        return analysis

    async def _step_2_materialize(self, repo: str, emit: Emit) -> Path:
        emit(AnalysisStage.CLONING, f"Cloning {repo}...")
        repo_dir = self._workspace.resolve_repository_dir(repo)
        token = self._workspace.get_access_token()
        if not token:
            raise CloneError("No source-control access token is configured", context={"repo": repo})
        await self._provider.materialize(repo, repo_dir, token, self._options.shallow_clone)
        return repo_dir

    async def _step_3_analyze(
        self,
        repo: str,
        repo_dir: Path,
        emit: Emit,
        cross_reference_enabled: bool,
        project_keys: Sequence[str],
    ) -> CodebaseAnalysis:
        prompt = self._prompt_builder.build(
            repo,
            cross_reference_enabled,
            project_keys,
            full_clone=not self._options.shallow_clone,
            depth=self._options.depth,
        )
        emit(AnalysisStage.ANALYZING, f"{self._provider.name} is analyzing {repo}...")

        async def attempt() -> CodebaseAnalysis:
            return await self._provider.analyze(
                repo_dir,
                prompt,
                self._options,
                cross_reference_enabled,
                on_progress=lambda message: emit(AnalysisStage.ANALYZING, message),
            )

        return await self._retry_policy.run(
            attempt,
            on_retry=lambda _exc: emit(
                AnalysisStage.ANALYZING, f"Retrying analysis of {repo} (parse error)..."
            ),
        )

    async def _step_4_cache(self, repo: str, analysis: CodebaseAnalysis, emit: Emit) -> None:
        emit(AnalysisStage.PARSING, f"Caching analysis for {repo}...")
        await self._cache.put(repo, analysis)
        suffix = " (partial, deadline reached)" if analysis.partial else ""
        emit(AnalysisStage.DONE, f"Analysis complete for {repo}{suffix}")
        logger.info(
            "Repository analysis complete", processing_status="SUCCESS", partial=analysis.partial
        )

    # ── Failure handling ─────────────────────────────────────────────

    def _record_failure(self, repo: str, exc: Exception, emit: Emit) -> RepositoryFailure:
        message = failure_message(repo, exc, secrets=(self._workspace.get_access_token() or "",))
        logger.error(
            "Repository analysis failed",
            processing_status="ERROR",
            error_type=type(exc).__name__,
            error_details=message,
            error_retryable=isinstance(exc, CodebaseAnalysisError) and exc.retryable,
        )
        ANALYSES_TOTAL.labels(provider=self._provider.name, outcome=_outcome_label(exc)).inc()
        emit(AnalysisStage.FAILED, message)
        return RepositoryFailure(repo=repo, error=message)


def failure_message(repo: str, exc: Exception, secrets: tuple[str, ...] = ()) -> str:
    """User-facing text for a failed repository, free of credentials."""
    if isinstance(exc, AnalysisTimeoutError):
        message = (
            f"Analysis of {repo} timed out after {exc.elapsed_minutes}m. "
            "Try a deeper analysis profile or a faster model."
        )
    elif isinstance(exc, ParseError):
        message = f"Could not parse analysis output for {repo} after retry."
    elif isinstance(exc, TurnBudgetExhaustedError):
        message = (
            f"Analysis of {repo} ran out of turns before producing a result. "
            "Try the deep analysis profile."
        )
    elif isinstance(exc, ExitCodeError) and exc.spawn_failed:
        message = f"Required command not found while analyzing {repo}."
    elif isinstance(exc, CodebaseAnalysisError):
        message = f"Analysis failed for {repo}: {exc.message}"
    else:
        message = f"Analysis failed for {repo}: {exc}"
    return redact_text(message, secrets=secrets)


def _outcome_label(exc: Exception) -> str:
    if isinstance(exc, CodebaseAnalysisError):
        return type(exc).__name__
    return "unexpected_error"


def _progress_emitter(repo: str, sink: ProgressSink | None) -> Emit:
    def emit(stage: AnalysisStage, message: str) -> None:
        if sink is None:
            return
        try:
            sink(ProgressEvent(repo=repo, stage=stage, message=message))
        except Exception as exc:  # noqa: BLE001
            logger.warning(
                "Progress sink failed",
                error_type=type(exc).__name__,
                error_details=str(exc),
            )

    return emit
