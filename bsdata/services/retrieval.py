"""
Catalogue retrieval - fetch a data repository and decode its catalogues.

Pipeline, strictly sequential:
    1. workspace  prepare a fresh scratch directory
    2. fetch      shallow clone, optionally switch to a tag
    3. load       decode every top-level catalogue file
    4. workspace  discard the scratch directory (on every exit path)

Usage:
    from bsdata.services.retrieval import get_data

    catalogues = get_data("star-wars-legion", "1.7.0")

    # or, with explicit settings and a structured run log
    retriever = CatalogueRetriever(settings=BsdataSettings(log_dir="logs"))
    catalogues = retriever.get_data("star-wars-legion")
"""

from __future__ import annotations

import logging
from pathlib import Path

from bsdata.adapters.catalogue import Catalogue, CatalogueLoader
from bsdata.adapters.repository import RepoManager, WorkspaceManager
from bsdata.common.exceptions import RetrievalError, WorkspaceError
from bsdata.common.logging import RunLogger, setup_logging_bridge, teardown_logging_bridge

from .config_models import BsdataSettings

logger = logging.getLogger(__name__)


class CatalogueRetriever:
    """Orchestrates workspace, fetcher and loader for one retrieval at a time.

    Collaborators default to instances built from ``settings``; tests and
    callers may inject their own.
    """

    def __init__(
        self,
        settings: BsdataSettings | None = None,
        workspaces: WorkspaceManager | None = None,
        fetcher: RepoManager | None = None,
        loader: CatalogueLoader | None = None,
        run_logger: RunLogger | None = None,
    ):
        """Initialize the retriever.

        Args:
            settings: Configuration (default: loaded from environment)
            workspaces: Workspace manager override
            fetcher: Revision fetcher override
            loader: Catalogue loader override
            run_logger: Structured log shared by every call. When omitted, a
                new run log is created per call if ``settings.log_dir`` is set.
        """
        self.settings = settings or BsdataSettings()
        self.workspaces = workspaces or WorkspaceManager(self.settings.workspace_dir)
        self.fetcher = fetcher or RepoManager(
            base_url=self.settings.base_url,
            depth=self.settings.clone_depth,
            timeout=self.settings.git_timeout,
        )
        self.loader = loader or CatalogueLoader(self.settings.catalogue_marker)
        self._run_logger = run_logger

    def _new_run_logger(self) -> RunLogger | None:
        if self._run_logger is not None:
            return self._run_logger
        if self.settings.log_dir:
            return RunLogger(logs_dir=self.settings.log_dir)
        return None

    def get_data(self, repo_name: str, revision: str | None = None) -> list[Catalogue]:
        """Fetch a repository revision and decode its catalogues.

        With a run log, warnings and errors logged by ``bsdata`` modules during
        the call are copied into it as detail entries.

        Args:
            repo_name: Repository name under the configured base URL
            revision: Tag name; empty or None for the default branch tip

        Returns:
            Decoded catalogues in directory enumeration order

        Raises:
            WorkspaceError: If the workspace cannot be created or removed
            FetchError: If the repository or tag cannot be fetched
            DecodeError: If any catalogue file cannot be decoded
        """
        logger.info("Getting %s catalogues", repo_name)
        run_logger = self._new_run_logger()
        if run_logger is None:
            return self._retrieve(repo_name, revision, None)

        handler = setup_logging_bridge(run_logger)
        try:
            return self._retrieve(repo_name, revision, run_logger)
        finally:
            teardown_logging_bridge(handler)

    def _retrieve(
        self, repo_name: str, revision: str | None, run_logger: RunLogger | None
    ) -> list[Catalogue]:
        path = self._prepare(repo_name, run_logger)
        phase = "fetch"
        try:
            if run_logger is not None:
                run_logger.phase_start("fetch", f"Fetching {repo_name} {revision or 'HEAD'}")
            result = self.fetcher.fetch(repo_name, path, revision, run_logger=run_logger)
            if run_logger is not None:
                run_logger.phase_complete("fetch", stats=result.to_dict())

            phase = "load"
            if run_logger is not None:
                run_logger.phase_start("load", f"Loading catalogues from {path}")
            catalogues = self.loader.load(path, run_logger=run_logger)
            if run_logger is not None:
                run_logger.phase_complete("load", stats={"catalogues": len(catalogues)})
        except BaseException as e:
            if run_logger is not None:
                run_logger.phase_error(phase, str(e))
            self._discard_after_failure(path, e, run_logger)
            raise

        self._discard(path, run_logger)
        return catalogues

    def _prepare(self, repo_name: str, run_logger: RunLogger | None) -> Path:
        if run_logger is None:
            return self.workspaces.prepare(repo_name)
        run_logger.phase_start("workspace", f"Preparing workspace for {repo_name}")
        try:
            path = self.workspaces.prepare(repo_name)
        except RetrievalError as e:
            run_logger.phase_error("workspace", str(e))
            raise
        run_logger.phase_complete("workspace", stats={"path": str(path)})
        return path

    def _discard(self, path: Path, run_logger: RunLogger | None) -> None:
        if run_logger is None:
            self.workspaces.discard(path)
            return
        run_logger.phase_start("workspace", f"Discarding {path}")
        try:
            self.workspaces.discard(path)
        except WorkspaceError as e:
            run_logger.phase_error("workspace", str(e))
            raise
        run_logger.phase_complete("workspace")

    def _discard_after_failure(
        self, path: Path, error: BaseException, run_logger: RunLogger | None
    ) -> None:
        """Discard the workspace without masking the error already raised."""
        try:
            self._discard(path, run_logger)
        except WorkspaceError as cleanup_error:
            logger.error("Failed to discard workspace %s after error: %s", path, cleanup_error)
            if isinstance(error, RetrievalError):
                error.cleanup_error = cleanup_error


# =============================================================================
# Convenience Functions
# =============================================================================


def get_data(
    repo_name: str, revision: str | None = None, settings: BsdataSettings | None = None
) -> list[Catalogue]:
    """Quick retrieval of a repository's catalogues."""
    return CatalogueRetriever(settings=settings).get_data(repo_name, revision)
