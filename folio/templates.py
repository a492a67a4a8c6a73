"""Template registry for Folio.

This module uses Jinja2 to load the layout and partial templates of a
project and to render pages through the layout.

Key class:
- TemplateRegistry: Owns the Jinja environment for one build.

Templates can use:
- ``{% include "name" %}`` for any partial in ``templates/partials``.
- ``if_equals(a, b, then, otherwise)`` and the ``equals`` test, which
  compare strictly (``1`` does not equal ``True`` or ``"1"``).
- ``render_toc(toc)`` to turn the heading outline into nested lists.
"""

from __future__ import annotations

from numbers import Number
from pathlib import Path
from typing import TYPE_CHECKING, Any

from jinja2 import (
    ChoiceLoader,
    DictLoader,
    Environment,
    FileSystemLoader,
    select_autoescape,
)
from markupsafe import Markup, escape

if TYPE_CHECKING:
    from .renderers import Heading
    from .routes import PageContext

__all__ = ["TemplateRegistry", "if_equals", "render_toc", "strict_equals"]

LAYOUT_TEMPLATE = "layout.jinja"
PARTIAL_SUFFIX = ".jinja"


def strict_equals(left: Any, right: Any) -> bool:
    """Compare two values without cross-type coercion.

    Strings compare by value, numbers compare by value, booleans only
    equal booleans and anything else must share a type.
    """
    if isinstance(left, bool) or isinstance(right, bool):
        return type(left) is type(right) and left == right
    if isinstance(left, str) and isinstance(right, str):
        return str(left) == str(right)
    if isinstance(left, Number) and isinstance(right, Number):
        return left == right
    return type(left) is type(right) and left == right


def if_equals(left: Any, right: Any, then: Any, otherwise: Any = "") -> Any:
    """Pick ``then`` when both values are strictly equal, else ``otherwise``."""
    return then if strict_equals(left, right) else otherwise


def render_toc(toc: list[Heading] | None) -> Markup:
    """Render a table of contents as nested HTML from page headings.

    Generates properly nested `<ul><li><a href="#id">text</a></li></ul>` structure
    based on heading levels.

    Args:
        toc: List of Heading objects.

    Returns:
        Markup-safe HTML string of the nested TOC, or empty Markup if no headings.
    """
    if not toc:
        return Markup("")

    html_parts: list[str] = []
    level_stack: list[int] = []

    for heading in toc:
        level = heading.level

        # Close nested lists when going to a shallower level
        while level_stack and level_stack[-1] > level:
            level_stack.pop()
            html_parts.append("</li></ul>")

        if level_stack and level_stack[-1] == level:
            html_parts.append("</li>")
        else:
            html_parts.append("<ul>")
            level_stack.append(level)

        html_parts.append(
            f'<li><a href="#{escape(heading.id)}">{escape(heading.text)}</a>'
        )

    while level_stack:
        level_stack.pop()
        html_parts.append("</li></ul>")

    return Markup("".join(html_parts))


class TemplateRegistry:
    """Layout and partial templates for one build.

    Every template is compiled when the registry is created, so a missing
    layout or a syntax error surfaces before any page is written.

    Attributes:
        templates_dir: Directory holding ``layout.jinja``.
        partials_dir: Directory holding partial templates.
        partials: Partial sources keyed by name.
        env: Jinja2 environment.
        layout: Compiled layout template.
    """

    def __init__(self, templates_dir: Path):
        """Load partials and the layout.

        Args:
            templates_dir: Directory with the layout and a ``partials`` folder.

        Raises:
            jinja2.TemplateNotFound: If the layout is missing.
            jinja2.TemplateSyntaxError: If any template is malformed.
        """
        self.templates_dir = templates_dir
        self.partials_dir = templates_dir / "partials"
        self.partials = self._load_partials()
        self.env = Environment(
            loader=ChoiceLoader(
                [DictLoader(self.partials), FileSystemLoader(str(templates_dir))]
            ),
            autoescape=select_autoescape(["html", "xml", "jinja"], default=True),
            keep_trailing_newline=True,
        )
        self._install_globals()
        for name in self.partials:
            self.env.get_template(name)
        self.layout = self.env.get_template(LAYOUT_TEMPLATE)

    def _load_partials(self) -> dict[str, str]:
        """Read partial sources keyed by file name without extension."""
        partials: dict[str, str] = {}
        if not self.partials_dir.is_dir():
            return partials
        for path in sorted(self.partials_dir.glob(f"*{PARTIAL_SUFFIX}")):
            name = path.name[: -len(PARTIAL_SUFFIX)]
            partials[name] = path.read_text(encoding="utf-8")
        return partials

    def _install_globals(self) -> None:
        """Install helpers in the Jinja environment."""
        self.env.globals["if_equals"] = if_equals
        self.env.globals["render_toc"] = render_toc
        self.env.tests["equals"] = strict_equals

    def render(self, context: PageContext) -> str:
        """Render a page through the layout.

        Args:
            context: Assembled page context.

        Returns:
            Rendered HTML string.
        """
        return self.layout.render(context.template_vars())

    def render_string(self, template: str, context: dict[str, Any]) -> str:
        """Render a template string with the registry's helpers.

        Args:
            template: Template string to render.
            context: Variables to make available in the template.

        Returns:
            Rendered string.
        """
        return self.env.from_string(template).render(context)
