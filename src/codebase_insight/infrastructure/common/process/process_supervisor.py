"""Bounded-lifetime child process runner.

``run`` always settles: a deadline expiry, a non-zero exit or a failure to
start are all folded into the returned ``SupervisedRunOutcome``. Output is
captured incrementally so that whatever the child printed before being killed
is still available to the caller.
"""

from __future__ import annotations

import asyncio
import signal
import time
from collections.abc import Callable, Mapping, Sequence
from pathlib import Path

from codebase_insight.core.domain.process import SPAWN_FAILED_EXIT_CODE, SupervisedRunOutcome
from codebase_insight.infrastructure.observability.logger_factory_service import get_logger
from codebase_insight.infrastructure.observability.metrics_service import (
    CLI_PROCESS_DURATION_SECONDS,
    CLI_PROCESS_RUNS_TOTAL,
)
from codebase_insight.infrastructure.observability.tracing_setup import get_tracer

logger = get_logger("process_supervisor")

_READ_CHUNK_BYTES = 64 * 1024


class ProcessSupervisor:
    """Spawns a command with a deadline and escalates SIGTERM to SIGKILL.

    Resolution happens within ``timeout + kill_grace_seconds`` even if the
    child ignores SIGTERM or a grandchild keeps its pipes open: the stream
    pumps get at most ``reap_seconds`` to drain, clipped to what is left of
    that window. A child that had to be killed reports ``-SIGKILL`` when its
    exit could not be observed in time.
    """

    def __init__(self, kill_grace_seconds: float = 5.0, reap_seconds: float = 2.0) -> None:
        self._kill_grace_seconds = kill_grace_seconds
        self._reap_seconds = reap_seconds

    async def run(
        self,
        command: str,
        args: Sequence[str],
        cwd: Path | str,
        timeout_seconds: float,
        on_stderr_line: Callable[[str], None] | None = None,
        on_stdout_chunk: Callable[[bytes], None] | None = None,
        env: Mapping[str, str] | None = None,
    ) -> SupervisedRunOutcome:
        tracer = get_tracer()
        with tracer.start_as_current_span("process.run") as span:
            span.set_attribute("process.command", command)
            span.set_attribute("process.timeout_seconds", timeout_seconds)
            outcome = await self._run(
                command, args, cwd, timeout_seconds, on_stderr_line, on_stdout_chunk, env
            )
            span.set_attribute("process.exit_code", outcome.exit_code)
            span.set_attribute("process.timed_out", outcome.timed_out)
            self._record(command, outcome)
            return outcome

    async def _run(
        self,
        command: str,
        args: Sequence[str],
        cwd: Path | str,
        timeout_seconds: float,
        on_stderr_line: Callable[[str], None] | None,
        on_stdout_chunk: Callable[[bytes], None] | None,
        env: Mapping[str, str] | None,
    ) -> SupervisedRunOutcome:
        started = time.monotonic()
        try:
            proc = await asyncio.create_subprocess_exec(
                command,
                *args,
                cwd=str(cwd),
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=dict(env) if env is not None else None,
            )
        except OSError as exc:
            logger.warning(
                "Failed to start child process",
                context_command=command,
                error_type=type(exc).__name__,
                error_details=str(exc),
            )
            return SupervisedRunOutcome(
                stdout="",
                stderr=str(exc),
                exit_code=SPAWN_FAILED_EXIT_CODE,
                timed_out=False,
                elapsed_seconds=time.monotonic() - started,
                spawn_error=True,
            )

        settle_by = time.monotonic() + timeout_seconds + self._kill_grace_seconds
        stdout_buf = bytearray()
        stderr_buf = bytearray()
        pumps = {
            asyncio.create_task(_pump_stdout(proc.stdout, stdout_buf, on_stdout_chunk)),
            asyncio.create_task(_pump_stderr(proc.stderr, stderr_buf, on_stderr_line)),
        }
        exit_task = asyncio.create_task(proc.wait())

        # The exit listener and the deadline race; whichever finishes first settles.
        done, _ = await asyncio.wait({exit_task}, timeout=timeout_seconds)
        timed_out = exit_task not in done and proc.returncode is None
        if timed_out:
            logger.warning(
                "Child process exceeded its deadline, terminating",
                context_command=command,
                timeout_seconds=timeout_seconds,
            )
            await self._terminate(proc, exit_task)

        reap_budget = max(0.0, min(self._reap_seconds, settle_by - time.monotonic()))
        await self._reap(exit_task, pumps, reap_budget)
        return SupervisedRunOutcome(
            stdout=stdout_buf.decode("utf-8", errors="replace"),
            stderr=stderr_buf.decode("utf-8", errors="replace"),
            exit_code=proc.returncode if proc.returncode is not None else -signal.SIGKILL,
            timed_out=timed_out,
            elapsed_seconds=time.monotonic() - started,
        )

    async def _terminate(self, proc: asyncio.subprocess.Process, exit_task: asyncio.Task) -> None:
        _send_signal(proc, proc.terminate)
        done, _ = await asyncio.wait({exit_task}, timeout=self._kill_grace_seconds)
        if exit_task in done or proc.returncode is not None:
            return
        logger.warning("Child process ignored SIGTERM, sending SIGKILL", pid=proc.pid)
        _send_signal(proc, proc.kill)

    @staticmethod
    async def _reap(exit_task: asyncio.Task, pumps: set[asyncio.Task], budget: float) -> None:
        """Give the exit listener and the stream pumps ``budget`` seconds to finish."""
        tasks = {exit_task, *pumps}
        if budget > 0:
            _, pending = await asyncio.wait(tasks, timeout=budget)
        else:
            pending = {task for task in tasks if not task.done()}
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
            logger.debug("Abandoned unfinished child process tasks", pending=len(pending))

    @staticmethod
    def _record(command: str, outcome: SupervisedRunOutcome) -> None:
        if outcome.timed_out:
            label = "timeout"
        elif outcome.spawn_failed:
            label = "spawn_failed"
        else:
            label = "success" if outcome.exit_code == 0 else "error"
        CLI_PROCESS_RUNS_TOTAL.labels(command=command, outcome=label).inc()
        CLI_PROCESS_DURATION_SECONDS.labels(command=command).observe(outcome.elapsed_seconds)


def _send_signal(proc: asyncio.subprocess.Process, send: Callable[[], None]) -> None:
    try:
        send()
    except ProcessLookupError:
        logger.debug("Child process already gone", pid=proc.pid)


async def _pump_stdout(
    stream: asyncio.StreamReader | None,
    buffer: bytearray,
    on_chunk: Callable[[bytes], None] | None,
) -> None:
    if stream is None:
        return
    while chunk := await stream.read(_READ_CHUNK_BYTES):
        buffer.extend(chunk)
        if on_chunk is not None:
            _invoke_callback(on_chunk, chunk)


async def _pump_stderr(
    stream: asyncio.StreamReader | None,
    buffer: bytearray,
    on_line: Callable[[str], None] | None,
) -> None:
    if stream is None:
        return
    pending = b""
    while chunk := await stream.read(_READ_CHUNK_BYTES):
        buffer.extend(chunk)
        pending += chunk
        *lines, pending = pending.split(b"\n")
        _forward_lines(lines, on_line)
    _forward_lines([pending], on_line)


def _forward_lines(lines: list[bytes], on_line: Callable[[str], None] | None) -> None:
    if on_line is None:
        return
    for raw in lines:
        line = raw.decode("utf-8", errors="replace").strip()
        if line:
            _invoke_callback(on_line, line)


def _invoke_callback(callback: Callable, value: object) -> None:
    try:
        callback(value)
    except Exception as exc:  # noqa: BLE001
        logger.warning(
            "Child process output callback failed",
            error_type=type(exc).__name__,
            error_details=str(exc),
        )
