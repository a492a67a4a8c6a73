"""Output directory setup for Folio.

This module prepares the output directory for a build: it wipes whatever a
previous run left behind and mirrors the static directory into it.

Key class:
- OutputInitializer: Cleans the output directory and copies static assets.
"""

from __future__ import annotations

import shutil
from pathlib import Path

from .utils import ensure_clean_dir


class OutputInitializer:
    """Recreates the output directory and copies static assets verbatim.

    Attributes:
        static_dir: Directory containing source assets.
        output_dir: Directory where the site is built.
    """

    def __init__(self, static_dir: Path, output_dir: Path):
        """Initialize the initializer.

        Args:
            static_dir: Directory holding static assets.
            output_dir: Directory where the site will be built.
        """
        self.static_dir = static_dir
        self.output_dir = output_dir

    def run(self, static_paths: list[Path]) -> list[Path]:
        """Clean the output directory and mirror the static entries into it.

        Directories are recreated and files are byte-copied, in the order
        given. Parents must precede their children.

        Args:
            static_paths: Entries below ``static_dir``, as discovered.

        Returns:
            Destination paths of the copied files.
        """
        ensure_clean_dir(self.output_dir)
        copied: list[Path] = []
        for item in static_paths:
            dest = self.output_dir / item.relative_to(self.static_dir)
            if item.is_dir():
                dest.mkdir()
                continue
            shutil.copyfile(item, dest)
            copied.append(dest)
        return copied
