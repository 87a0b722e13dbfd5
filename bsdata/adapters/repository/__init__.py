"""Repository adapter - workspaces and revision fetching.

This package provides the scratch workspace lifecycle and the git-based
fetcher that materializes one revision of a data repository.
"""

from __future__ import annotations

from .manager import DEFAULT_BASE_URL, RepoManager, fetch_repo
from .models import FetchError, FetchResult, FetchStep, WorkspaceError
from .workspace import WorkspaceManager, validate_repo_name

__all__ = [
    # Managers
    "RepoManager",
    "WorkspaceManager",
    # Convenience functions
    "fetch_repo",
    "validate_repo_name",
    # Models
    "FetchResult",
    # Exceptions
    "FetchError",
    "FetchStep",
    "WorkspaceError",
    # Constants
    "DEFAULT_BASE_URL",
]
