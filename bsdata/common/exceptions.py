"""
Exception hierarchy for catalogue retrieval.

Three failure kinds are distinguished so callers can choose their own
retry policy:

- WorkspaceError: scratch directory creation, enumeration or removal failed
- FetchError: the repository or revision could not be materialized
- DecodeError: a selected catalogue file could not be read or decoded
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

__all__ = [
    "RetrievalError",
    "WorkspaceError",
    "FetchStep",
    "FetchError",
    "DecodeError",
]


class RetrievalError(Exception):
    """Base class for every retrieval failure.

    Attributes:
        cleanup_error: Workspace failure raised while discarding the
            workspace after this error had already occurred.
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
        self.cleanup_error: WorkspaceError | None = None


class WorkspaceError(RetrievalError):
    """Scratch workspace could not be created, read or removed."""

    def __init__(self, message: str, path: str | Path | None = None):
        super().__init__(message)
        self.path = Path(path) if path is not None else None


class FetchStep(str, Enum):
    """Step of the revision fetch that failed."""

    VALIDATE = "validate"
    CLONE = "clone"
    RESOLVE = "resolve"
    CHECKOUT = "checkout"


class FetchError(RetrievalError):
    """Repository content could not be fetched at the requested revision."""

    def __init__(
        self,
        message: str,
        step: FetchStep,
        repository: str | None = None,
        revision: str | None = None,
    ):
        super().__init__(f"[{step.value}] {message}")
        self.step = step
        self.repository = repository
        self.revision = revision


class DecodeError(RetrievalError):
    """A catalogue file could not be read or decoded."""

    def __init__(self, filename: str, reason: str):
        super().__init__(f"Failed to decode {filename}: {reason}")
        self.filename = filename
        self.reason = reason
