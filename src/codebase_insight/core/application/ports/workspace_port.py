from abc import ABC, abstractmethod
from pathlib import Path


class WorkspacePort(ABC):
    """Source of clone locations and source-control credentials."""

    @abstractmethod
    def resolve_repository_dir(self, repo_full_name: str) -> Path:
        """Return the clone directory for ``owner/repo``.

        Raises:
            CloneError: when the name is malformed or escapes the workspace.
        """

    @abstractmethod
    def get_access_token(self) -> str | None:
        """Return the source-control token, or None when none is configured."""

    @abstractmethod
    def clear_repositories(self) -> None: ...

    @abstractmethod
    def storage_size_bytes(self) -> int: ...
