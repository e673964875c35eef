from unittest.mock import AsyncMock

import pytest

from codebase_insight.core.application.exceptions import CloneError
from codebase_insight.core.domain.process import SupervisedRunOutcome
from codebase_insight.infrastructure.common.process import ProcessSupervisor
from codebase_insight.infrastructure.tools.codebase.common.git_materializer import GitMaterializer

TOKEN = "ghp_secretsecretsecretsecret1234"


def _outcome(exit_code=0, stderr="", timed_out=False) -> SupervisedRunOutcome:
    return SupervisedRunOutcome(stdout="", stderr=stderr, exit_code=exit_code, timed_out=timed_out)


@pytest.fixture
def supervisor():
    supervisor = AsyncMock(spec=ProcessSupervisor)
    supervisor.run.return_value = _outcome()
    return supervisor


@pytest.fixture
def materializer(supervisor):
    return GitMaterializer(supervisor, clone_timeout_seconds=120, pull_timeout_seconds=60)


@pytest.mark.asyncio
async def test_shallow_clone_into_new_directory(materializer, supervisor, tmp_path):
    target = tmp_path / "repos" / "acme" / "payments"

    await materializer.materialize("acme/payments", target, TOKEN, shallow=True)

    command, args = supervisor.run.await_args.args
    kwargs = supervisor.run.await_args.kwargs
    assert command == "git"
    assert args == [
        "clone",
        "--depth",
        "1",
        f"https://{TOKEN}@github.com/acme/payments.git",
        str(target),
    ]
    assert kwargs["cwd"] == target.parent
    assert kwargs["timeout_seconds"] == 120
    assert kwargs["env"]["GIT_TERMINAL_PROMPT"] == "0"
    assert target.parent.is_dir()


@pytest.mark.asyncio
async def test_full_clone_has_no_depth_flag(materializer, supervisor, tmp_path):
    await materializer.materialize("acme/payments", tmp_path / "payments", TOKEN, shallow=False)

    _command, args = supervisor.run.await_args.args
    assert "--depth" not in args


@pytest.mark.asyncio
async def test_existing_checkout_is_fast_forwarded(materializer, supervisor, tmp_path):
    await materializer.materialize("acme/payments", tmp_path, TOKEN, shallow=True)

    _command, args = supervisor.run.await_args.args
    assert args == ["pull", "--ff-only"]
    assert supervisor.run.await_args.kwargs["cwd"] == tmp_path
    assert supervisor.run.await_args.kwargs["timeout_seconds"] == 60


@pytest.mark.asyncio
async def test_failed_pull_is_only_a_warning(materializer, supervisor, tmp_path):
    supervisor.run.return_value = _outcome(exit_code=1, stderr="fatal: Not possible to fast-forward")

    await materializer.materialize("acme/payments", tmp_path, TOKEN, shallow=True)


@pytest.mark.asyncio
async def test_clone_error_is_scrubbed_of_credentials(materializer, supervisor, tmp_path):
    supervisor.run.return_value = _outcome(
        exit_code=128,
        stderr=f"fatal: unable to access 'https://{TOKEN}@github.com/acme/payments.git/': 403 ({TOKEN})",
    )

    with pytest.raises(CloneError) as exc_info:
        await materializer.materialize("acme/payments", tmp_path / "new", TOKEN, shallow=True)

    assert TOKEN not in str(exc_info.value)
    assert "https://***@github.com/acme/payments.git" in str(exc_info.value)


@pytest.mark.asyncio
async def test_clone_timeout_is_a_clone_error(materializer, supervisor, tmp_path):
    supervisor.run.return_value = _outcome(exit_code=-15, timed_out=True)

    with pytest.raises(CloneError, match="timed out"):
        await materializer.materialize("acme/payments", tmp_path / "new", TOKEN, shallow=True)


def test_custom_clone_host(supervisor):
    materializer = GitMaterializer(supervisor, clone_host="github.example.com")

    assert materializer.clone_url("a/b", "t") == "https://t@github.example.com/a/b.git"
