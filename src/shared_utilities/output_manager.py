"""
Output directory management utilities for organizing report outputs.

This module lays out the directory structure for a report: the HTML page at
the top of the output directory and one logo sub-directory per release, with
automatic cleanup of directories left empty after a run.
"""

import os
from pathlib import Path

from .logging_config import get_logger

logger = get_logger(__name__)


def release_logo_dirname(release: str) -> str:
    """Default logo sub-directory name for a release (e.g. ``JASPAR2016_logos``)."""
    return f"JASPAR{release}_logos"


class OutputManager:
    """Manages the output directory structure for a report run."""

    def __init__(self, base_output_dir: str | Path = "output"):
        """
        Initialize the output manager.

        Args:
            base_output_dir: Directory holding the report and logo directories
        """
        self.base_dir = Path(base_output_dir)

    def get_release_dir(self, release: str, create_dirs: bool = True) -> Path:
        """
        Get the logo directory for a release, creating it if needed.

        Directory structure: {base_dir}/JASPAR{release}_logos/
        """
        release_dir = self.base_dir / release_logo_dirname(release)

        if create_dirs and not release_dir.exists():
            release_dir.mkdir(parents=True, exist_ok=True)
            logger.debug(
                "Created logo directory: {path}", path=str(release_dir), release=release
            )

        return release_dir

    def get_logo_path(
        self, release: str, matrix_id: str, create_dirs: bool = True
    ) -> Path:
        """Full path of the logo image for a matrix in a release."""
        safe_id = matrix_id.replace("/", "_")
        return self.get_release_dir(release, create_dirs) / f"{safe_id}.png"

    def relative_reference(self, path: str | Path) -> str:
        """
        Express an output path relative to the base directory.

        Used for ``<img src>`` attributes so that the report directory can be
        moved as a whole. Paths outside the base directory are returned as-is.
        """
        path = Path(path)
        try:
            return path.relative_to(self.base_dir).as_posix()
        except ValueError:
            return path.as_posix()

    def cleanup_empty_directories(self) -> int:
        """
        Remove empty directories below the base output directory.

        Returns:
            Number of directories removed
        """
        removed_count = 0

        if not self.base_dir.exists():
            return 0

        # Walk the directory tree bottom-up to remove empty directories
        for dirpath, dirnames, filenames in os.walk(self.base_dir, topdown=False):
            dir_path = Path(dirpath)

            if dir_path == self.base_dir:
                continue

            # dirnames is stale once children were removed, so re-check on disk
            if not filenames and not any(dir_path.iterdir()):
                try:
                    dir_path.rmdir()
                    removed_count += 1
                    logger.debug(f"Removed empty directory: {dir_path}")
                except OSError as e:
                    logger.warning(f"Failed to remove directory {dir_path}: {e}")

        if removed_count > 0:
            logger.info(f"Cleaned up {removed_count} empty directories")

        return removed_count

