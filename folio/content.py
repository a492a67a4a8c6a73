"""Content discovery and parsing for Folio.

This module finds content files and static assets on disk and splits each
content file into its YAML front-matter and body.

Key classes:
- Frontmatter: Declared metadata of a content file.
- ContentFile: A parsed content file.

Key functions:
- discover_content: List the markdown files of the content directory.
- discover_static: List every entry below the static directory.
- parse_content_file: Read a content file and split its front-matter.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .errors import BuildError
from .utils import is_markdown

FRONTMATTER_RE = re.compile(
    r"\A---[ \t]*\r?\n(.*?)^---[ \t]*(?:\r?\n|\Z)", re.DOTALL | re.MULTILINE
)

RESERVED_KEYS = ("title", "slug", "layout")


@dataclass
class Frontmatter:
    """Metadata declared at the top of a content file.

    Attributes:
        title: Page title. Required.
        slug: Declared route name. Required.
        layout: Rendering mode, ``default`` or ``slides``.
        extra: Any other keys, passed through to templates.
    """

    title: Any = None
    slug: Any = None
    layout: Any = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> Frontmatter:
        extra = {k: v for k, v in data.items() if k not in RESERVED_KEYS}
        return cls(
            title=data.get("title"),
            slug=data.get("slug"),
            layout=data.get("layout"),
            extra=extra,
        )


@dataclass
class ContentFile:
    """A content file split into front-matter and body.

    Attributes:
        path: Path to the source file.
        frontmatter: Parsed front-matter.
        body: Text following the front-matter block.
    """

    path: Path
    frontmatter: Frontmatter
    body: str


def extract_frontmatter(text: str) -> tuple[dict[str, Any], str]:
    """Extract YAML frontmatter from content.

    Args:
        text: Raw file content.

    Returns:
        Tuple of (frontmatter dict, remaining content).

    Raises:
        yaml.YAMLError: If the front-matter block is not valid YAML.
    """
    match = FRONTMATTER_RE.match(text)
    if not match:
        return {}, text
    data = yaml.safe_load(match.group(1)) or {}
    if not isinstance(data, dict):
        return {}, text
    return data, text[match.end() :]


def parse_content_file(path: Path) -> ContentFile:
    """Read a content file and split its front-matter from the body.

    Args:
        path: Path to the content file.

    Returns:
        ContentFile instance.

    Raises:
        BuildError: If the front-matter is malformed YAML.
    """
    raw = path.read_text(encoding="utf-8-sig")
    try:
        data, body = extract_frontmatter(raw)
    except yaml.YAMLError as exc:
        raise BuildError(path, f"Invalid front-matter: {exc}", exc) from exc
    return ContentFile(path=path, frontmatter=Frontmatter.from_mapping(data), body=body)


def discover_content(content_dir: Path) -> list[Path]:
    """List the markdown files directly inside the content directory.

    Args:
        content_dir: Directory holding content files.

    Returns:
        Sorted list of markdown file paths. Empty if the directory is missing.
    """
    if not content_dir.is_dir():
        return []
    return sorted(
        path for path in content_dir.iterdir() if path.is_file() and is_markdown(path)
    )


def discover_static(static_dir: Path) -> list[Path]:
    """List every file and directory below the static directory.

    Parents always come before their children. Hidden entries (any path
    component starting with a dot) are skipped along with their contents.

    Args:
        static_dir: Directory holding static assets.

    Returns:
        Sorted list of paths. Empty if the directory is missing.
    """
    if not static_dir.is_dir():
        return []
    return sorted(
        path
        for path in static_dir.rglob("*")
        if not any(part.startswith(".") for part in path.relative_to(static_dir).parts)
    )
