"""Repository Manager - fetch a data repository at a given revision.

Repositories are addressed by name under a fixed base URL
(``https://github.com/BSData`` by default) and fetched with the git command
line client. Only the content of one commit is needed, so clones are
shallow.

Fetch steps:
    clone     git clone --depth 1 <url> <workspace>        (default branch tip)
    resolve   git fetch --depth 1 origin tag <revision>     (only with a revision)
              git rev-parse --verify refs/tags/<revision>^{commit}
    checkout  git checkout --detach <commit>

Usage:
    from bsdata.adapters.repository import RepoManager

    repo_mgr = RepoManager()
    result = repo_mgr.fetch("star-wars-legion", workspace_path, revision="1.7.0")
"""

from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path

from bsdata.common.logging import RunLogger

from .models import FetchError, FetchResult, FetchStep
from .workspace import validate_repo_name

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://github.com/BSData"


# =============================================================================
# Helper Functions
# =============================================================================


def _git_env() -> dict[str, str]:
    """Environment for git calls that must never wait on a terminal.

    GitHub answers unknown repositories with an authentication challenge;
    without this git would prompt for credentials instead of failing.
    """
    env = dict(os.environ)
    env["GIT_TERMINAL_PROMPT"] = "0"
    env.setdefault("GIT_ASKPASS", "echo")
    return env


# =============================================================================
# Repository Manager
# =============================================================================


class RepoManager:
    """Revision fetcher for named data repositories.

    Provides a clean interface for materializing one revision of a
    repository into a prepared workspace directory.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        depth: int = 1,
        timeout: float | None = None,
        git_executable: str = "git",
    ):
        """Initialize the Repository Manager.

        Args:
            base_url: URL prefix the repository name is appended to
            depth: Clone depth for shallow clones
            timeout: Seconds each git call may take; None waits forever
            git_executable: Name or path of the git binary
        """
        if depth < 1:
            raise ValueError("Clone depth must be at least 1")
        self.base_url = base_url.rstrip("/")
        self.depth = depth
        self.timeout = timeout
        self.git_executable = git_executable

    def repository_url(self, repo_name: str) -> str:
        """Build the clone URL of a repository."""
        return f"{self.base_url}/{repo_name}"

    def _run_git(
        self,
        args: list[str],
        step: FetchStep,
        repo_name: str,
        revision: str | None,
        cwd: Path | None = None,
        run_logger: RunLogger | None = None,
    ) -> str:
        """Run one git command and return its stdout.

        Raises:
            FetchError: Tagged with ``step`` if git is missing, fails or
                times out
        """
        cmd = [self.git_executable]
        if cwd is not None:
            cmd.extend(["-C", str(cwd)])
        cmd.extend(args)

        logger.debug("Running %s", " ".join(cmd))
        if run_logger is not None:
            run_logger.detail_git_command(cmd, step.value)

        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                encoding="utf-8",
                errors="replace",
                check=True,
                timeout=self.timeout,
                env=_git_env(),
            )
        except subprocess.CalledProcessError as e:
            raise FetchError(
                f"git {args[0]} failed: {(e.stderr or e.stdout or str(e)).strip()}",
                step,
                repository=repo_name,
                revision=revision,
            ) from e
        except subprocess.TimeoutExpired as e:
            raise FetchError(
                f"git {args[0]} timed out after {self.timeout} seconds",
                step,
                repository=repo_name,
                revision=revision,
            ) from e
        except FileNotFoundError as e:
            raise FetchError(
                "Git is not installed or not in PATH. "
                "Please install Git to fetch repositories.",
                step,
                repository=repo_name,
                revision=revision,
            ) from e

        return result.stdout.strip()

    def fetch(
        self,
        repo_name: str,
        target: str | Path,
        revision: str | None = None,
        run_logger: RunLogger | None = None,
    ) -> FetchResult:
        """Fetch a repository into ``target`` at the requested revision.

        Args:
            repo_name: Repository name under the base URL
            target: Workspace directory (must be empty or absent)
            revision: Tag name; empty or None for the default branch tip
            run_logger: Optional structured run log receiving each git call

        Returns:
            FetchResult describing the checked out commit

        Raises:
            FetchError: If any step fails; ``error.step`` names the step
        """
        validate_repo_name(repo_name)
        target = Path(target)
        url = self.repository_url(repo_name)
        revision = revision or None

        logger.info("Cloning repo %s", url)
        self._run_git(
            ["clone", "--depth", str(self.depth), "--quiet", url, str(target)],
            FetchStep.CLONE,
            repo_name,
            revision,
            run_logger=run_logger,
        )
        commit = self._run_git(
            ["rev-parse", "HEAD"],
            FetchStep.CLONE,
            repo_name,
            revision,
            cwd=target,
            run_logger=run_logger,
        )
        logger.info("Checked out %s at default branch: %s", repo_name, commit)

        if revision is not None:
            commit = self._resolve_tag(target, repo_name, revision, run_logger)
            self._run_git(
                ["checkout", "--quiet", "--detach", commit],
                FetchStep.CHECKOUT,
                repo_name,
                revision,
                cwd=target,
                run_logger=run_logger,
            )
            logger.info("Checked out %s at tag %s: %s", repo_name, revision, commit)

        return FetchResult(
            name=repo_name,
            url=url,
            path=str(target),
            revision=revision,
            commit=commit,
        )

    def _resolve_tag(
        self,
        target: Path,
        repo_name: str,
        tag: str,
        run_logger: RunLogger | None = None,
    ) -> str:
        """Fetch a tag into the shallow clone and return its commit SHA."""
        self._run_git(
            ["fetch", "--depth", str(self.depth), "--quiet", "origin", "tag", tag],
            FetchStep.RESOLVE,
            repo_name,
            tag,
            cwd=target,
            run_logger=run_logger,
        )
        return self._run_git(
            ["rev-parse", "--verify", "--quiet", f"refs/tags/{tag}^{{commit}}"],
            FetchStep.RESOLVE,
            repo_name,
            tag,
            cwd=target,
            run_logger=run_logger,
        )


# =============================================================================
# Convenience Functions
# =============================================================================


def fetch_repo(
    repo_name: str, target: str | Path, revision: str | None = None, **kwargs
) -> FetchResult:
    """Quick fetch of a repository revision."""
    manager = RepoManager(**kwargs)
    return manager.fetch(repo_name, target, revision)
