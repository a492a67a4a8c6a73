"""Site building functionality for Folio.

This module contains the core logic for building a static site from source files.
It loads configuration, collects timestamps, prepares templates and the output
directory, bundles scripts and writes one HTML page per content file.

Key functions:
- build_site: Main function to build the entire site.
- load_config: Loads site configuration from folio.yaml.
"""

from __future__ import annotations

import shlex
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from .assets import OutputInitializer
from .bundler import ScriptBundler
from .content import discover_content, discover_static, parse_content_file
from .errors import (  # noqa: F401 - re-exported for callers of build_site
    BuildError,
    BundleError,
    DuplicateSlugError,
    FrontmatterError,
    NoContentError,
    TimestampProviderError,
    UnknownLayoutError,
)
from .routes import BuiltPage, Route, RouteBuilder, build_routes
from .templates import TemplateRegistry
from .timestamps import load_timestamps

CONFIG_FILE = "folio.yaml"

DEFAULT_CONFIG: dict[str, Any] = {
    "content_dir": "content",
    "templates_dir": "templates",
    "static_dir": "static",
    "output_dir": "public",
    "root_file": "_index.md",
    "entry_points": ["templates/index.ts", "templates/reveal.ts"],
    "timestamps_command": None,
}


@dataclass
class BuildResult:
    """Result of a site build operation.

    Attributes:
        pages: Pages written, in discovery order.
        output_dir: Directory where the site was built.
        routes: Navigation entries shared by every page.
    """

    pages: list[BuiltPage]
    output_dir: Path
    routes: list[Route]


def load_config(project_root: Path) -> dict[str, Any]:
    """Load site configuration from folio.yaml.

    Args:
        project_root: Root directory of the project.

    Returns:
        Dictionary containing configuration values, with defaults applied.
    """
    config_path = project_root / CONFIG_FILE
    config = DEFAULT_CONFIG.copy()
    if config_path.exists():
        with open(config_path, encoding="utf-8") as f:
            loaded = yaml.safe_load(f) or {}
            if isinstance(loaded, dict):
                config.update(loaded)
    return config


def timestamps_command(config: dict[str, Any]) -> list[str]:
    """Return the timestamp provider argv from configuration.

    Without a configured command the bundled git provider is used.
    """
    command = config.get("timestamps_command")
    if not command:
        return [sys.executable, "-m", "folio", "timestamps"]
    if isinstance(command, str):
        return shlex.split(command)
    return [str(part) for part in command]


def build_site(project_root: Path) -> BuildResult:
    """Build the entire static site.

    Stages run strictly in order and the first error aborts the build,
    leaving whatever was already written in place.

    Args:
        project_root: Root directory of the project.

    Returns:
        BuildResult with the written pages and the output directory.

    Raises:
        NoContentError: If the content directory holds no markdown files.
        BuildError: On invalid content, bundling or timestamp failures.
    """
    project_root = project_root.resolve()
    config = load_config(project_root)
    content_dir = project_root / config["content_dir"]
    templates_dir = project_root / config["templates_dir"]
    static_dir = project_root / config["static_dir"]
    output_dir = project_root / config["output_dir"]

    records = load_timestamps(timestamps_command(config), project_root)
    templates = TemplateRegistry(templates_dir)

    files = discover_content(content_dir)
    if not files:
        raise NoContentError(content_dir)

    OutputInitializer(static_dir, output_dir).run(discover_static(static_dir))
    ScriptBundler(project_root, output_dir, config.get("entry_points") or []).run()

    content_files = [parse_content_file(path) for path in files]
    routes = build_routes(content_files, records, project_root, config["root_file"])
    builder = RouteBuilder(templates, output_dir, project_root, routes, records)
    pages = [builder.build(content_file) for content_file in content_files]
    return BuildResult(pages=pages, output_dir=output_dir, routes=routes)
