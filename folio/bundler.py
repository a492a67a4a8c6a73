"""Client script bundling for Folio.

Browser scripts are bundled with the esbuild CLI, which is looked up on
``PATH`` first and then in the project's ``node_modules/.bin``.

Key class:
- ScriptBundler: Bundles the configured entry points into the output directory.
"""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path

from .errors import BundleError

ESBUILD = "esbuild"

BUNDLE_FLAGS = [
    "--bundle",
    "--format=esm",
    "--minify",
    "--sourcemap",
    "--target=esnext",
    "--platform=browser",
    '--define:process.env.NODE_ENV="production"',
]


def find_executable(name: str, project_root: Path | None = None) -> str | None:
    """Find an executable in PATH or local node_modules.

    Args:
        name: Name of the executable to find.
        project_root: Optional project root whose node_modules/.bin is searched.

    Returns:
        Full path to the executable if found, None otherwise.
    """
    found = shutil.which(name)
    if found:
        return found

    if project_root is not None:
        local = project_root / "node_modules" / ".bin" / name
        if local.exists():
            return str(local)

    return None


class ScriptBundler:
    """Bundles script entry points into minified, source-mapped ES modules.

    Attributes:
        project_root: Root directory of the project.
        output_dir: Directory the bundles are written to.
        entry_points: Script entry points relative to the project root.
    """

    def __init__(self, project_root: Path, output_dir: Path, entry_points: list[str]):
        self.project_root = project_root
        self.output_dir = output_dir
        self.entry_points = list(entry_points)

    def command(self, esbuild_bin: str) -> list[str]:
        """Build the esbuild argv for the configured entry points."""
        return [
            esbuild_bin,
            *self.entry_points,
            *BUNDLE_FLAGS,
            f"--outdir={self.output_dir}",
        ]

    def run(self) -> None:
        """Bundle every entry point in a single esbuild call.

        Raises:
            BundleError: If esbuild is missing or reports an error.
        """
        if not self.entry_points:
            return

        source = self.project_root / self.entry_points[0]
        esbuild_bin = find_executable(ESBUILD, self.project_root)
        if not esbuild_bin:
            raise BundleError(
                source,
                "esbuild not found. Install with `npm install -D esbuild` "
                "in the project.",
            )

        result = subprocess.run(
            self.command(esbuild_bin),
            cwd=self.project_root,
            capture_output=True,
            text=True,
        )
        if result.returncode != 0:
            raise BundleError(source, f"esbuild failed:\n{result.stderr.strip()}")
