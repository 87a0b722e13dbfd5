"""
Shared data models and exceptions for repository operations.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

# Re-export exceptions used by this adapter
from bsdata.common.exceptions import FetchError as FetchError
from bsdata.common.exceptions import FetchStep as FetchStep
from bsdata.common.exceptions import WorkspaceError as WorkspaceError

__all__ = [
    # Exceptions (re-exported)
    "FetchError",
    "FetchStep",
    "WorkspaceError",
    # Models
    "FetchResult",
]


@dataclass
class FetchResult:
    """Outcome of fetching a repository revision into a workspace."""

    name: str
    url: str
    path: str
    revision: str | None = None  # None = default branch tip
    commit: str | None = None  # Full SHA of the checked out commit

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)
