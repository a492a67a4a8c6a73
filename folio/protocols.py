"""Protocol definitions for Folio.

The body renderer protocol is the seam of the rendering stage, so that
renderers can be swapped in tests and new layouts added to a registry.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .renderers import RenderedBody


@runtime_checkable
class BodyRenderer(Protocol):
    """Protocol for turning a content body into layout markup.

    Each implementation handles exactly one layout.
    """

    @property
    @abstractmethod
    def layout(self) -> str:
        """Return the layout name this renderer handles."""
        ...

    @abstractmethod
    def render(self, content: str) -> RenderedBody:
        """Render a content body.

        Args:
            content: Body text following the front-matter.

        Returns:
            RenderedBody for the layout template.
        """
        ...
