"""Utility functions for Folio.

This module contains small helpers shared across the build: slug
normalization, reading time estimation and path handling.

Key functions:
    slugify: Normalize a declared route name into a URL-safe slug.
    reading_time: Estimate reading time of a text.
    ensure_clean_dir: Ensure a directory exists and is empty.
    is_markdown: Check if a path is a Markdown file.
    relative_posix: Express a path relative to a root in POSIX form.
"""

from __future__ import annotations

import math
import re
import shutil
from pathlib import Path

WORDS_PER_MINUTE = 200

_SLUG_SEPARATOR_RE = re.compile(r"[^a-z0-9]+")
_WORD_RE = re.compile(r"\S+")


def slugify(name: str) -> str:
    """Convert a declared route name to a slug.

    Lowercases the name and collapses every run of characters outside
    ``[a-z0-9]`` into a single hyphen. Applying it to its own output
    returns the same value.

    Args:
        name: Route name from front-matter.

    Returns:
        URL-friendly slug, possibly empty.

    Examples:
        >>> slugify("Hello World!")
        'hello-world'

        >>> slugify("hello-world")
        'hello-world'
    """
    cleaned = _SLUG_SEPARATOR_RE.sub("-", str(name).lower())
    return cleaned.strip("-")


def reading_time(text: str, words_per_minute: int = WORDS_PER_MINUTE) -> str:
    """Estimate how long a text takes to read.

    Args:
        text: Raw body text.
        words_per_minute: Reading speed.

    Returns:
        Human-readable estimate such as ``"3 min read"``.

    Examples:
        >>> reading_time("# Hello")
        '1 min read'
    """
    words = len(_WORD_RE.findall(text))
    minutes = math.ceil(words / words_per_minute)
    return f"{minutes} min read"


def ensure_clean_dir(path: Path) -> None:
    """Ensure a directory exists and is empty.

    A missing directory is simply created.

    Args:
        path: Directory path to clean or create.
    """
    if path.exists():
        shutil.rmtree(path)
    path.mkdir(parents=True)


def is_markdown(path: Path) -> bool:
    """Check if a path is a Markdown file.

    Args:
        path: Path to check.

    Returns:
        True if the file has .md extension.
    """
    return path.suffix == ".md"


def relative_posix(path: Path | str, root: Path) -> str:
    """Return ``path`` relative to ``root`` using forward slashes.

    Paths outside ``root`` are returned in POSIX form unchanged.
    """
    candidate = Path(path)
    if not candidate.is_absolute():
        return candidate.as_posix()
    try:
        return candidate.relative_to(root).as_posix()
    except ValueError:
        return candidate.as_posix()
