import os
import re
import shutil
from collections.abc import Callable
from pathlib import Path

from codebase_insight.core.application.exceptions import CloneError
from codebase_insight.core.application.ports import WorkspacePort
from codebase_insight.infrastructure.observability.logger_factory_service import get_logger

logger = get_logger("workspace")

_REPO_NAME = re.compile(r"^[A-Za-z0-9_.-]+/[A-Za-z0-9_.-]+$")


class LocalWorkspaceAdapter(WorkspacePort):
    """Clone directories under ``<data_root>/repos/<owner>/<repo>``.

    The access token is read through ``token_source`` on every call and
    never stored on the adapter.
    """

    def __init__(self, data_root: Path, token_source: Callable[[], str | None]) -> None:
        self.repos_root = data_root / "repos"
        self._token_source = token_source

    def resolve_repository_dir(self, repo_full_name: str) -> Path:
        if not _REPO_NAME.match(repo_full_name) or any(
            part in (".", "..") for part in repo_full_name.split("/")
        ):
            raise CloneError(
                f"Invalid repository name '{repo_full_name}', expected owner/repo",
                context={"repo": repo_full_name},
            )
        target = (self.repos_root / repo_full_name).resolve()
        if not target.is_relative_to(self.repos_root.resolve()):
            raise CloneError(
                f"Repository path for '{repo_full_name}' escapes the workspace",
                context={"repo": repo_full_name},
            )
        return target

    def get_access_token(self) -> str | None:
        token = self._token_source()
        return token or None

    def clear_repositories(self) -> None:
        if self.repos_root.exists():
            shutil.rmtree(self.repos_root)
            logger.info("Cloned repositories removed", path=str(self.repos_root))

    def storage_size_bytes(self) -> int:
        total = 0
        for dirpath, _dirnames, filenames in os.walk(self.repos_root):
            for filename in filenames:
                path = os.path.join(dirpath, filename)
                if not os.path.islink(path):
                    total += os.path.getsize(path)
        return total
