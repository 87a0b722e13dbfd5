"""
Workspace Manager - disposable scratch directories for repository checkouts.

Every call to ``prepare`` creates a new, uniquely named directory, so two
retrievals of the same repository never share scratch state.

Usage:
    from bsdata.adapters.repository import WorkspaceManager

    workspaces = WorkspaceManager(root="workspace/checkouts")
    with workspaces.workspace("star-wars-legion") as path:
        ...  # path is removed afterwards, whatever happens
"""

from __future__ import annotations

import logging
import os
import re
import shutil
import stat
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from .models import FetchError, FetchStep, WorkspaceError

logger = logging.getLogger(__name__)

_REPO_NAME_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")


def validate_repo_name(repo_name: str) -> str:
    """Check that a repository name is a single safe path/URL segment.

    Raises:
        FetchError: If the name is empty or could escape the base URL or
            the workspace root
    """
    if not repo_name or not isinstance(repo_name, str):
        raise FetchError(
            "Repository name must be a non-empty string", FetchStep.VALIDATE
        )
    if not _REPO_NAME_PATTERN.match(repo_name) or ".." in repo_name:
        raise FetchError(
            f"Invalid repository name: {repo_name!r}",
            FetchStep.VALIDATE,
            repository=repo_name,
        )
    return repo_name


def _handle_remove_readonly(func, path, exc):
    """Error handler for Windows readonly files."""
    os.chmod(path, stat.S_IWRITE)
    func(path)


def _remove_directory(path: Path) -> None:
    """Remove a directory tree; errors are not retried."""
    try:
        if os.name == "nt":
            shutil.rmtree(path, onerror=_handle_remove_readonly)
        else:
            shutil.rmtree(path)
    except OSError as e:
        raise WorkspaceError(f"Failed to delete directory {path}: {e}", path) from e


class WorkspaceManager:
    """Creates and removes per-call scratch directories.

    Stale content is never reused because every call gets a new directory.
    Existing ``<name>-*`` directories are left alone, since they may belong to
    a concurrent retrieval; a process killed before ``discard`` therefore
    leaves its directory behind under ``root`` until it is removed by hand.
    """

    def __init__(self, root: str | Path | None = None):
        """Initialize the Workspace Manager.

        Args:
            root: Parent directory of the workspaces. Defaults to the
                system temporary directory.
        """
        self.root = Path(root).resolve() if root is not None else None

    def prepare(self, repo_name: str) -> Path:
        """Create a fresh, empty workspace for one retrieval.

        Args:
            repo_name: Repository name, used as the directory prefix

        Returns:
            Path of the new directory

        Raises:
            FetchError: If the repository name is invalid
            WorkspaceError: If the directory cannot be created
        """
        validate_repo_name(repo_name)
        try:
            if self.root is not None:
                self.root.mkdir(parents=True, exist_ok=True)
            path = Path(tempfile.mkdtemp(prefix=f"{repo_name}-", dir=self.root))
        except OSError as e:
            raise WorkspaceError(
                f"Failed to create workspace for {repo_name}: {e}", self.root
            ) from e

        logger.debug("Prepared workspace %s", path)
        return path

    def discard(self, path: str | Path) -> None:
        """Remove a workspace. A missing directory is not an error.

        Raises:
            WorkspaceError: If the directory cannot be removed
        """
        path = Path(path)
        if not path.exists():
            return
        _remove_directory(path)
        logger.debug("Discarded workspace %s", path)

    @contextmanager
    def workspace(self, repo_name: str) -> Iterator[Path]:
        """Yield a fresh workspace and discard it on exit."""
        path = self.prepare(repo_name)
        try:
            yield path
        finally:
            self.discard(path)
