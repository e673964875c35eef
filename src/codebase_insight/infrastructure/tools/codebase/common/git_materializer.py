"""Clone-or-update of a GitHub repository through the ``git`` binary."""

import os
import shutil
from pathlib import Path

from codebase_insight.core.application.exceptions import CloneError
from codebase_insight.infrastructure.common.process import ProcessSupervisor
from codebase_insight.infrastructure.observability.logger_factory_service import get_logger
from codebase_insight.infrastructure.observability.redaction_service import redact_text

logger = get_logger("git_materializer")


class GitMaterializer:
    """Creates or fast-forwards a local checkout.

    Every message that may leave this class is scrubbed of URL userinfo and
    of the literal access token.
    """

    def __init__(
        self,
        supervisor: ProcessSupervisor,
        clone_host: str = "github.com",
        clone_timeout_seconds: float = 120.0,
        pull_timeout_seconds: float = 60.0,
        git_command: str = "git",
    ) -> None:
        self._supervisor = supervisor
        self._clone_host = clone_host
        self._clone_timeout_seconds = clone_timeout_seconds
        self._pull_timeout_seconds = pull_timeout_seconds
        self._git_command = git_command

    def is_git_available(self) -> bool:
        return shutil.which(self._git_command) is not None

    async def materialize(
        self, repo_full_name: str, target_dir: Path, access_token: str, shallow: bool
    ) -> None:
        if target_dir.exists():
            await self._pull(repo_full_name, target_dir, access_token)
            return
        target_dir.parent.mkdir(parents=True, exist_ok=True)
        await self._clone(repo_full_name, target_dir, access_token, shallow)

    def clone_url(self, repo_full_name: str, access_token: str) -> str:
        return f"https://{access_token}@{self._clone_host}/{repo_full_name}.git"

    async def _clone(
        self, repo_full_name: str, target_dir: Path, access_token: str, shallow: bool
    ) -> None:
        args = ["clone"]
        if shallow:
            args.extend(["--depth", "1"])
        args.extend([self.clone_url(repo_full_name, access_token), str(target_dir)])
        logger.info("Cloning repository", repo=repo_full_name, shallow=shallow)

        outcome = await self._supervisor.run(
            self._git_command,
            args,
            cwd=target_dir.parent,
            timeout_seconds=self._clone_timeout_seconds,
            env=_git_env(),
        )
        if outcome.timed_out:
            shutil.rmtree(target_dir, ignore_errors=True)
            raise CloneError(
                f"Cloning {repo_full_name} timed out after {int(self._clone_timeout_seconds)}s",
                context={"repo": repo_full_name},
            )
        if outcome.exit_code != 0:
            detail = outcome.stderr.strip() or f"git exited with code {outcome.exit_code}"
            message = redact_text(f"git clone failed: {detail}", secrets=(access_token,))
            logger.error(
                "Repository clone failed",
                repo=repo_full_name,
                processing_status="ERROR",
                error_type="CloneError",
                error_details=message,
            )
            raise CloneError(message, context={"repo": repo_full_name})

    async def _pull(self, repo_full_name: str, target_dir: Path, access_token: str) -> None:
        outcome = await self._supervisor.run(
            self._git_command,
            ["pull", "--ff-only"],
            cwd=target_dir,
            timeout_seconds=self._pull_timeout_seconds,
            env=_git_env(),
        )
        if outcome.succeeded:
            logger.info("Repository updated", repo=repo_full_name)
            return
        # A stale checkout is still worth analysing.
        logger.warning(
            "git pull failed, analysing existing checkout",
            repo=repo_full_name,
            timed_out=outcome.timed_out,
            error_details=redact_text(outcome.stderr.strip(), secrets=(access_token,)),
        )


def _git_env() -> dict[str, str]:
    return {**os.environ, "GIT_TERMINAL_PROMPT": "0"}
