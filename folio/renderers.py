"""Body renderers for Folio.

This module contains implementations of the BodyRenderer protocol, one per
layout. Each renderer turns the body of a content file into the markup the
layout template receives.

Key classes:
- MarkdownRenderer: Renders Markdown to HTML, collecting headings and reading time.
- SlidesRenderer: Passes the raw body through for client-side slide decks.
- RendererRegistry: Looks renderers up by layout name.
"""

from __future__ import annotations

import html
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

import mistune
from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

from .utils import reading_time, slugify

if TYPE_CHECKING:
    from .protocols import BodyRenderer

DEFAULT_LAYOUT = "default"
SLIDES_LAYOUT = "slides"

_TAG_RE = re.compile(r"<[^>]+>")


@dataclass
class Heading:
    """Represents a heading extracted from markdown content for TOC generation.

    Attributes:
        id: Anchor ID for the heading (URL-friendly slug).
        text: The plain text content of the heading.
        level: Heading level (1-6).
    """

    id: str
    text: str
    level: int


@dataclass
class RenderedBody:
    """Output of a body renderer.

    Attributes:
        body: Markup handed to the layout as ``body``.
        toc: Headings found while rendering, None when the layout has no outline.
        reading_time: Estimated reading time (markdown only).
    """

    body: str
    toc: list[Heading] | None = None
    reading_time: str | None = None


class _HeadingRenderer(mistune.HTMLRenderer):
    """Markdown renderer that anchors headings and highlights code blocks.

    Attributes:
        headings: List of Heading objects extracted during rendering.
    """

    def __init__(self):
        super().__init__(escape=False)
        self.headings: list[Heading] = []
        self._heading_id_counts: dict[str, int] = {}

    def heading(self, text: str, level: int, **attrs) -> str:
        """Render a heading with auto-generated ID and track it for the TOC.

        Args:
            text: Heading text content.
            level: Heading level (1-6).
            **attrs: Additional attributes.

        Returns:
            HTML heading tag with id attribute.
        """
        plain = html.unescape(_TAG_RE.sub("", text)).strip()
        base_id = slugify(plain) or "section"

        if base_id in self._heading_id_counts:
            self._heading_id_counts[base_id] += 1
            heading_id = f"{base_id}-{self._heading_id_counts[base_id]}"
        else:
            self._heading_id_counts[base_id] = 0
            heading_id = base_id

        self.headings.append(Heading(id=heading_id, text=plain, level=level))

        return f'<h{level} id="{heading_id}">{text}</h{level}>\n'

    def block_code(self, code: str, info: str | None = None) -> str:
        """Render a code block with Pygments syntax highlighting.

        Args:
            code: The code content.
            info: Language identifier (e.g., 'python', 'javascript').

        Returns:
            HTML string with highlighted code.
        """
        lang = info.split()[0] if info else ""
        if lang:
            try:
                lexer = get_lexer_by_name(lang, stripall=True)
            except ClassNotFound:
                lexer = None
            if lexer is not None:
                formatter = HtmlFormatter(nowrap=False, cssclass="highlight")
                return highlight(code, lexer, formatter)
        escaped = html.escape(code, quote=False)
        lang_class = f' class="language-{html.escape(lang)}"' if lang else ""
        return f"<pre><code{lang_class}>{escaped}</code></pre>\n"


class MarkdownRenderer:
    """Renders Markdown content to HTML.

    Used for the ``default`` layout and for content without a layout.
    """

    @property
    def layout(self) -> str:
        return DEFAULT_LAYOUT

    def render(self, content: str) -> RenderedBody:
        """Render Markdown content to HTML.

        Args:
            content: Markdown source content.

        Returns:
            RenderedBody with HTML, heading outline and reading time.
        """
        renderer = _HeadingRenderer()
        markdown = mistune.create_markdown(
            renderer=renderer, plugins=["strikethrough", "footnotes", "table", "url"]
        )
        body = markdown(content)
        return RenderedBody(
            body=body, toc=renderer.headings, reading_time=reading_time(content)
        )


class SlidesRenderer:
    """Passes slide deck source through unchanged.

    The deck is turned into slides in the browser by the bundled script.
    """

    @property
    def layout(self) -> str:
        return SLIDES_LAYOUT

    def render(self, content: str) -> RenderedBody:
        return RenderedBody(body=content)


class RendererRegistry:
    """Registry of body renderers keyed by layout name."""

    def __init__(self):
        """Initialize the registry with the built-in renderers."""
        self._renderers: dict[str, BodyRenderer] = {}
        self.register(MarkdownRenderer())
        self.register(SlidesRenderer())

    def register(self, renderer: BodyRenderer) -> None:
        """Register a renderer under its layout name.

        Args:
            renderer: A BodyRenderer implementation.
        """
        self._renderers[renderer.layout] = renderer

    def get_renderer(self, layout: object) -> BodyRenderer | None:
        """Get the renderer for a layout.

        A missing layout selects the default renderer.

        Args:
            layout: Layout declared in front-matter.

        Returns:
            The matching renderer, or None if the layout is unknown.
        """
        if layout is None or layout == "":
            layout = DEFAULT_LAYOUT
        if not isinstance(layout, str):
            return None
        return self._renderers.get(layout)


default_renderer_registry = RendererRegistry()
