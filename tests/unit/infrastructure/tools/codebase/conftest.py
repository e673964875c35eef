import asyncio
import json
from dataclasses import dataclass, field

import pytest

from codebase_insight.core.domain.process import SupervisedRunOutcome
from codebase_insight.infrastructure.tools.codebase.common.git_materializer import GitMaterializer


@dataclass
class ScriptedSupervisor:
    """Stands in for ProcessSupervisor: replays stdout/stderr through the callbacks."""

    stdout: bytes = b""
    stderr_lines: list[str] = field(default_factory=list)
    exit_code: int = 0
    timed_out: bool = False
    spawn_error: bool = False
    elapsed_seconds: float = 60.0
    delay_seconds: float = 0.0
    calls: list[dict] = field(default_factory=list)

    async def run(
        self,
        command,
        args,
        cwd,
        timeout_seconds,
        on_stderr_line=None,
        on_stdout_chunk=None,
        env=None,
    ) -> SupervisedRunOutcome:
        self.calls.append(
            {"command": command, "args": list(args), "cwd": cwd, "timeout": timeout_seconds, "env": env}
        )
        if self.delay_seconds:
            await asyncio.sleep(self.delay_seconds)
        if on_stdout_chunk is not None:
            for start in range(0, len(self.stdout), 5):
                on_stdout_chunk(self.stdout[start : start + 5])
        if on_stderr_line is not None:
            for line in self.stderr_lines:
                on_stderr_line(line)
        return SupervisedRunOutcome(
            stdout=self.stdout.decode(),
            stderr="\n".join(self.stderr_lines),
            exit_code=self.exit_code,
            timed_out=self.timed_out,
            elapsed_seconds=self.elapsed_seconds,
            spawn_error=self.spawn_error,
        )


def stream_lines(*records: dict) -> bytes:
    return b"".join((json.dumps(record) + "\n").encode() for record in records)


@pytest.fixture
def scripted_supervisor() -> ScriptedSupervisor:
    return ScriptedSupervisor()


@pytest.fixture
def materializer(scripted_supervisor) -> GitMaterializer:
    return GitMaterializer(scripted_supervisor)  # type: ignore[arg-type]


@pytest.fixture
def fenced_result_stream(sample_analysis_json) -> bytes:
    return stream_lines(
        {
            "type": "assistant",
            "message": {
                "content": [
                    {"type": "tool_use", "name": "Read", "input": {"file_path": "README.md"}},
                    {"type": "tool_use", "name": "mcp__jira", "input": {}},
                ]
            },
        },
        {"type": "result", "subtype": "success", "result": f"```json\n{sample_analysis_json}\n```"},
    )


@pytest.fixture
def assistant_only_stream(sample_analysis_json) -> bytes:
    return stream_lines(
        {"type": "assistant", "message": {"content": [{"type": "text", "text": sample_analysis_json}]}}
    )
