"""Abstract base for the agentic CLI providers (Claude CLI, OpenCode).

Centralises the shared analysis lifecycle (heartbeat, live stream decoding,
progress forwarding, outcome interpretation, metrics) so that each concrete
provider only describes its argument surface, its permission model and its
prerequisite checks.
"""

import asyncio
import contextlib
import shutil
import time
from abc import abstractmethod
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import ClassVar

from codebase_insight.core.application.exceptions import (
    AnalysisTimeoutError,
    ExitCodeError,
    ParseError,
    TurnBudgetExhaustedError,
)
from codebase_insight.core.application.policies import AnalysisToolPolicy
from codebase_insight.core.application.ports import CodebaseProviderPort
from codebase_insight.core.domain.analysis import CodebaseAnalysis, RunOptions
from codebase_insight.core.domain.process import (
    AssistantEvent,
    DecodedStream,
    StreamEvent,
    SupervisedRunOutcome,
)
from codebase_insight.core.domain.shared import CodebaseProviderType
from codebase_insight.infrastructure.common.process import ProcessSupervisor
from codebase_insight.infrastructure.observability.logger_factory_service import get_logger
from codebase_insight.infrastructure.tools.codebase.common.analysis_result_extractor import (
    extract_analysis,
)
from codebase_insight.infrastructure.tools.codebase.common.git_materializer import GitMaterializer
from codebase_insight.infrastructure.tools.codebase.common.stream_event_decoder import (
    StreamEventDecoder,
)
from codebase_insight.infrastructure.tools.codebase.common.tool_activity_formatter import (
    describe_tool_use,
)

logger = get_logger("codebase_provider")

ProgressCallback = Callable[[str], None]


class BaseCliProvider(CodebaseProviderPort):
    """Template base for CLI-backed codebase providers."""

    _PROVIDER_TYPE: ClassVar[CodebaseProviderType]
    _SUPPORTS_CROSS_REFERENCE: ClassVar[bool] = False

    def __init__(
        self,
        supervisor: ProcessSupervisor,
        materializer: GitMaterializer,
        tool_policy: AnalysisToolPolicy,
        command: str | None = None,
        heartbeat_seconds: float = 30.0,
    ) -> None:
        self._supervisor = supervisor
        self._materializer = materializer
        self._tool_policy = tool_policy
        self._command = command or self._PROVIDER_TYPE.cli_command
        self._heartbeat_seconds = heartbeat_seconds

    # ── Abstract hooks ──

    @abstractmethod
    def _build_args(self, prompt: str, options: RunOptions, allowed_tools: list[str]) -> list[str]:
        """Return the CLI argument vector for one analysis run."""

    def _build_env(self, allowed_tools: list[str]) -> Mapping[str, str] | None:  # noqa: ARG002
        """Extra environment for the CLI process; None inherits the parent's."""
        return None

    # ── Port implementation ──

    @property
    def provider_type(self) -> CodebaseProviderType:
        return self._PROVIDER_TYPE

    @property
    def command(self) -> str:
        return self._command

    async def is_available(self) -> bool:
        return shutil.which(self._command) is not None

    async def materialize(
        self, repo_full_name: str, target_dir: Path, access_token: str, shallow: bool
    ) -> None:
        await self._materializer.materialize(repo_full_name, target_dir, access_token, shallow)

    async def analyze(
        self,
        repo_path: Path,
        prompt: str,
        options: RunOptions,
        cross_reference_enabled: bool = False,
        on_progress: ProgressCallback | None = None,
    ) -> CodebaseAnalysis:
        allowed_tools = self._tool_policy.allowed_tools(
            cross_reference_enabled and self._SUPPORTS_CROSS_REFERENCE
        )
        notify = _safe_progress(on_progress)
        decoder = StreamEventDecoder()

        def on_stdout_chunk(chunk: bytes) -> None:
            self._report_activity(decoder.feed(chunk), notify)

        def on_stderr_line(line: str) -> None:
            notify(f"[{self._command}] {line}")

        logger.info(
            "Starting CLI analysis",
            provider=self.name,
            model=options.model,
            max_turns=options.max_turns,
            timeout_seconds=options.timeout_seconds,
        )
        heartbeat = asyncio.create_task(self._heartbeat(notify, time.monotonic()))
        try:
            outcome = await self._supervisor.run(
                self._command,
                self._build_args(prompt, options, allowed_tools),
                cwd=repo_path,
                timeout_seconds=options.timeout_seconds,
                on_stderr_line=on_stderr_line,
                on_stdout_chunk=on_stdout_chunk,
                env=self._build_env(allowed_tools),
            )
        finally:
            heartbeat.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await heartbeat
        self._report_activity(decoder.close(), notify)
        return self._interpret(outcome, decoder.summary, options)

    # ── Internals ──

    async def _heartbeat(self, notify: ProgressCallback, started: float) -> None:
        while True:
            await asyncio.sleep(self._heartbeat_seconds)
            minutes = round((time.monotonic() - started) / 60)
            notify(f"Still analyzing... {minutes}m elapsed")

    @staticmethod
    def _report_activity(events: list[StreamEvent], notify: ProgressCallback) -> None:
        for event in events:
            if isinstance(event, AssistantEvent):
                for block in event.tool_uses:
                    notify(describe_tool_use(block.name or "", block.input))

    def _interpret(
        self, outcome: SupervisedRunOutcome, decoded: DecodedStream, options: RunOptions
    ) -> CodebaseAnalysis:
        """Translate a supervised run into an analysis or a typed error."""
        if outcome.timed_out:
            return self._salvage(outcome, decoded)
        if outcome.spawn_failed or outcome.exit_code != 0:
            raise ExitCodeError(
                outcome.stderr.strip() or f"{self._command} exited with code {outcome.exit_code}",
                exit_code=outcome.exit_code,
                stderr=outcome.stderr,
                spawn_failed=outcome.spawn_failed,
                context={"provider": self.name},
            )
        text = decoded.text
        if not text and decoded.exhausted_turn_budget:
            raise TurnBudgetExhaustedError(
                f"{self._command} used all {options.max_turns} turns without producing an analysis",
                context={"provider": self.name, "max_turns": options.max_turns},
            )
        if not text:
            raise ParseError(f"{self._command} produced no output", context={"provider": self.name})
        return extract_analysis(text)

    def _salvage(self, outcome: SupervisedRunOutcome, decoded: DecodedStream) -> CodebaseAnalysis:
        elapsed_minutes = round(outcome.elapsed_seconds / 60)
        try:
            analysis = extract_analysis(decoded.text).as_salvaged()
        except ParseError as exc:
            logger.warning(
                "Deadline expired with nothing salvageable",
                provider=self.name,
                processing_status="TIMEOUT",
                error_type="AnalysisTimeoutError",
                error_details=exc.message,
            )
            raise AnalysisTimeoutError(
                elapsed_minutes, context={"provider": self.name}
            ) from exc
        logger.warning(
            "Deadline expired, returning salvaged partial analysis",
            provider=self.name,
            repo=analysis.repo,
            processing_status="PARTIAL",
        )
        return analysis


def _safe_progress(on_progress: ProgressCallback | None) -> ProgressCallback:
    """Wrap the caller's progress callback so it can never break a run."""

    def notify(message: str) -> None:
        if on_progress is None:
            return
        try:
            on_progress(message)
        except Exception as exc:  # noqa: BLE001
            logger.warning(
                "Progress callback failed",
                error_type=type(exc).__name__,
                error_details=str(exc),
            )

    return notify
