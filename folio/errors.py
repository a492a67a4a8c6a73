"""Build errors for Folio.

Every fatal build condition tied to a file is a BuildError so the CLI can
report the offending path. NoContentError is kept apart: an empty content
directory ends the run with a message rather than a failure report.
"""

from __future__ import annotations

from pathlib import Path


class BuildError(Exception):
    """Error during site build with file context.

    Attributes:
        source_path: Path to the source file that caused the error.
        message: Human-readable error message.
        original_error: The original exception that was caught.
    """

    def __init__(
        self,
        source_path: Path,
        message: str,
        original_error: Exception | None = None,
    ):
        self.source_path = source_path
        self.message = message
        self.original_error = original_error
        super().__init__(f"{source_path}: {message}")


class FrontmatterError(BuildError):
    """A required front-matter field is missing or empty."""

    def __init__(self, source_path: Path, field: str):
        self.field = field
        super().__init__(source_path, f"Missing {field} in {source_path}")


class DuplicateSlugError(BuildError):
    """Two content files normalize to the same slug."""

    def __init__(self, source_path: Path, slug: str):
        self.slug = slug
        super().__init__(source_path, f"Duplicate slug {slug!r} in {source_path}")


class UnknownLayoutError(BuildError):
    """A content file declares a layout that is not recognized."""

    def __init__(self, source_path: Path, layout: object):
        self.layout = layout
        super().__init__(source_path, f"Unknown layout {layout!r} in {source_path}")


class BundleError(BuildError):
    """The script bundler is missing or rejected an entry point."""


class TimestampProviderError(BuildError):
    """The timestamp provider failed or produced unusable output."""


class NoContentError(Exception):
    """No content files were found."""

    def __init__(self, content_dir: Path):
        self.content_dir = content_dir
        super().__init__(f"No files found in {content_dir}")
