"""
Catalogue loader - enumerate and decode catalogue files in a directory.

Selection is by substring: any top-level file whose name contains the
marker (``.cat`` by default) is a catalogue, so ``Army.cat``,
``Army.cat.xml`` and ``Army.catz`` are all picked up. Subdirectories are
not searched.

Usage:
    from bsdata.adapters.catalogue import CatalogueLoader

    catalogues = CatalogueLoader().load("workspace/star-wars-legion")
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from bsdata.common.exceptions import DecodeError, WorkspaceError
from bsdata.common.logging import RunLogger

from .decoder import decode_catalogue
from .models import Catalogue

logger = logging.getLogger(__name__)

CATALOGUE_MARKER = ".cat"


def is_catalogue_file(name: str, marker: str = CATALOGUE_MARKER) -> bool:
    """Check whether a file name carries the catalogue marker."""
    return marker in name


class CatalogueLoader:
    """Decodes every catalogue file found at the top level of a directory."""

    def __init__(self, marker: str = CATALOGUE_MARKER):
        """Initialize the loader.

        Args:
            marker: Substring identifying catalogue file names
        """
        if not marker:
            raise ValueError("Catalogue marker must be a non-empty string")
        self.marker = marker

    def find_files(self, directory: str | Path) -> list[Path]:
        """List catalogue files in directory enumeration order.

        Raises:
            WorkspaceError: If the directory cannot be read
        """
        directory = Path(directory)
        files: list[Path] = []
        try:
            with os.scandir(directory) as entries:
                for entry in entries:
                    is_cat = entry.is_file() and is_catalogue_file(entry.name, self.marker)
                    logger.debug("Is %s a catalogue file? %s", entry.name, is_cat)
                    if is_cat:
                        files.append(Path(entry.path))
        except OSError as e:
            raise WorkspaceError(
                f"Failed to list directory {directory}: {e}", directory
            ) from e
        return files

    def load_file(self, path: str | Path) -> Catalogue:
        """Read and decode a single catalogue file.

        Raises:
            DecodeError: If the file cannot be read or decoded
        """
        path = Path(path)
        try:
            content = path.read_bytes()
        except OSError as e:
            raise DecodeError(path.name, f"unreadable file: {e}") from e
        return decode_catalogue(content, path.name)

    def load(
        self, directory: str | Path, run_logger: RunLogger | None = None
    ) -> list[Catalogue]:
        """Decode all catalogue files of a directory.

        The result is all-or-nothing: the first file that fails aborts the
        whole load.

        Args:
            directory: Directory to scan (not recursive)
            run_logger: Optional structured run log receiving one step per file

        Returns:
            Catalogues in directory enumeration order; empty if none match

        Raises:
            WorkspaceError: If the directory cannot be read
            DecodeError: If any selected file cannot be decoded
        """
        files = self.find_files(directory)
        logger.info("Found %d catalogue files in %s", len(files), directory)

        catalogues: list[Catalogue] = []
        for path in files:
            logger.info("Inspecting file %s", path.name)
            if run_logger is None:
                catalogue = self.load_file(path)
            else:
                with run_logger.step_start(path.name) as step:
                    catalogue = self.load_file(path)
                    step.items_processed = 1
                    step.items_created = 1
                run_logger.detail_catalogue_decoded(path.name, catalogue)

            logger.info("Appending %s", catalogue.name)
            catalogues.append(catalogue)

        return catalogues
