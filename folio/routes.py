"""Route building for Folio.

This module turns parsed content files into HTML pages. It validates the
front-matter, claims a unique slug per page, renders the body according to
the declared layout and writes the page under the output directory.

Key classes:
- Route: Navigation entry for one content file.
- PageContext: Everything the layout template sees for one page.
- BuiltPage: A page written to disk.
- RouteBuilder: Renders and writes pages one at a time.

Key functions:
- normalize_slug: Slugify a declared route name, mapping ``index`` to the root.
- build_routes: Ordered navigation entries for the whole site.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from markupsafe import Markup

from .content import ContentFile, Frontmatter
from .errors import (
    BuildError,
    DuplicateSlugError,
    FrontmatterError,
    UnknownLayoutError,
)
from .renderers import Heading, RendererRegistry, default_renderer_registry
from .templates import TemplateRegistry
from .timestamps import TimestampRecord, find_timestamp
from .utils import relative_posix, slugify

ROOT_SLUG = "index"


def normalize_slug(value: Any) -> str:
    """Slugify a declared route name; ``index`` becomes the empty root slug."""
    slug = slugify(value)
    return "" if slug == ROOT_SLUG else slug


@dataclass(frozen=True)
class Route:
    """Navigation entry for one content file.

    Attributes:
        title: Declared title.
        slug: Normalized slug, empty for the site root.
        layout: Declared layout.
        extra: Remaining front-matter keys, also readable as attributes.
    """

    title: Any
    slug: Any
    layout: Any
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def url(self) -> str:
        return f"/{self.slug}/" if self.slug else "/"

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_") or name == "extra":
            raise AttributeError(name)
        try:
            return self.extra[name]
        except KeyError:
            raise AttributeError(name) from None


@dataclass
class PageContext:
    """Data handed to the layout template for one page.

    Timestamp fields override front-matter keys of the same name.

    Attributes:
        frontmatter: The page's own front-matter.
        slug: Normalized slug.
        routes: Navigation entries of the whole site.
        timestamp: Timestamp record of the source file, if any.
        body: Rendered (or raw, for slides) body.
        toc: Heading outline, markdown pages only.
        reading_time: Estimated reading time, markdown pages only.
    """

    frontmatter: Frontmatter
    slug: str
    routes: list[Route]
    timestamp: TimestampRecord | None
    body: str
    toc: list[Heading] | None = None
    reading_time: str | None = None

    def template_vars(self) -> dict[str, Any]:
        variables: dict[str, Any] = dict(self.frontmatter.extra)
        variables.update(
            title=self.frontmatter.title,
            slug=self.slug,
            layout=self.frontmatter.layout,
            routes=self.routes,
        )
        if self.timestamp is not None:
            variables.update(
                filepath=self.timestamp.filepath,
                then=self.timestamp.then,
                by=self.timestamp.by,
                created_at=self.timestamp.created_at,
                createdAt=self.timestamp.created_at,
            )
        variables["body"] = Markup(self.body)
        if self.toc is not None:
            variables["toc"] = self.toc
            variables["reading_time"] = self.reading_time
            variables["readingTime"] = self.reading_time
        return variables


@dataclass
class BuiltPage:
    """A page written to the output directory.

    Attributes:
        source: Content file the page came from.
        title: Page title.
        slug: Normalized slug.
        output_path: Path of the written HTML file.
    """

    source: Path
    title: Any
    slug: str
    output_path: Path


def build_routes(
    files: list[ContentFile],
    records: list[TimestampRecord],
    project_root: Path,
    root_file: str,
) -> list[Route]:
    """Build the ordered navigation entries of the site.

    The root file comes first. The others follow by ascending creation
    time; files without a timestamp record come last in discovery order.

    Args:
        files: Parsed content files in discovery order.
        records: Timestamp records from the provider.
        project_root: Root used to match files to records.
        root_file: File name of the site root content file.

    Returns:
        List of Route entries.
    """

    def sort_key(item: ContentFile) -> tuple[int, float]:
        if item.path.name == root_file:
            return (0, 0)
        record = find_timestamp(records, relative_posix(item.path, project_root))
        if record is None:
            return (2, 0)
        return (1, record.created_at)

    routes = []
    for item in sorted(files, key=sort_key):
        frontmatter = item.frontmatter
        slug = frontmatter.slug
        if slug:
            slug = normalize_slug(slug)
        routes.append(
            Route(
                title=frontmatter.title,
                slug=slug,
                layout=frontmatter.layout,
                extra=dict(frontmatter.extra),
            )
        )
    return routes


class RouteBuilder:
    """Renders content files through the layout and writes them to disk.

    One builder is used per run; it remembers every slug it has written.

    Attributes:
        templates: Template registry with the compiled layout.
        output_dir: Directory pages are written to.
        project_root: Root used to match files to timestamp records.
        routes: Navigation entries passed to every page.
        records: Timestamp records from the provider.
        renderer_registry: Body renderers keyed by layout.
        slugs: Slugs claimed so far in this run.
    """

    def __init__(
        self,
        templates: TemplateRegistry,
        output_dir: Path,
        project_root: Path,
        routes: list[Route],
        records: list[TimestampRecord],
        renderer_registry: RendererRegistry | None = None,
    ):
        self.templates = templates
        self.output_dir = output_dir
        self.project_root = project_root
        self.routes = routes
        self.records = records
        self.renderer_registry = renderer_registry or default_renderer_registry
        self.slugs: set[str] = set()

    def build(self, content_file: ContentFile) -> BuiltPage:
        """Validate, render and write one content file.

        Args:
            content_file: Parsed content file.

        Returns:
            The written page.

        Raises:
            FrontmatterError: If ``title`` or ``slug`` is missing.
            DuplicateSlugError: If the slug was already written in this run.
            UnknownLayoutError: If the layout is not recognized.
            BuildError: If the layout template fails to render.
        """
        path = content_file.path
        frontmatter = content_file.frontmatter
        if not frontmatter.title:
            raise FrontmatterError(path, "title")
        if not frontmatter.slug:
            raise FrontmatterError(path, "slug")

        slug = self.claim_slug(path, frontmatter.slug)
        timestamp = find_timestamp(
            self.records, relative_posix(path, self.project_root)
        )

        renderer = self.renderer_registry.get_renderer(frontmatter.layout)
        if renderer is None:
            raise UnknownLayoutError(path, frontmatter.layout)
        rendered = renderer.render(content_file.body)

        context = PageContext(
            frontmatter=frontmatter,
            slug=slug,
            routes=self.routes,
            timestamp=timestamp,
            body=rendered.body,
            toc=rendered.toc,
            reading_time=rendered.reading_time,
        )
        try:
            html = self.templates.render(context)
        except Exception as exc:
            raise BuildError(path, _format_error_message(exc), exc) from exc

        output_path = self._write_page(slug, html)
        return BuiltPage(
            source=path, title=frontmatter.title, slug=slug, output_path=output_path
        )

    def claim_slug(self, path: Path, declared: Any) -> str:
        """Normalize a slug and reserve it for this run.

        Raises:
            DuplicateSlugError: If the slug is already taken.
        """
        slug = normalize_slug(declared)
        if slug in self.slugs:
            raise DuplicateSlugError(path, slug)
        self.slugs.add(slug)
        return slug

    def _write_page(self, slug: str, html: str) -> Path:
        """Write a rendered page and return its path.

        The root page goes to ``index.html``; every other page gets its own
        single-segment directory.
        """
        if not slug:
            html_path = self.output_dir / "index.html"
        else:
            route_dir = self.output_dir / slug
            route_dir.mkdir()
            html_path = route_dir / "index.html"
        with open(html_path, "w", encoding="utf-8") as f:
            f.write(html)
        return html_path


def _format_error_message(exc: Exception) -> str:
    """Format an exception into a user-friendly error message.

    Args:
        exc: The exception to format.

    Returns:
        A human-readable error message.
    """
    error_type = type(exc).__name__
    error_msg = str(exc)

    if error_type == "UndefinedError":
        return f"Undefined variable: {error_msg}"
    if error_type == "TemplateNotFound":
        return f"Template not found: {error_msg}"
    if error_type == "TypeError":
        return f"Type error: {error_msg}"

    return f"{error_type}: {error_msg}"
