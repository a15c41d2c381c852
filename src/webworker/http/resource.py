"""
Resolved resources.

A request target is mapped once to a ResolvedResource and every later stage
reads from it:

    "/photo.jpg"  ──►  ResolvedResource(IMAGE,     /srv/site/photo.jpg)
    "/notes.txt"  ──►  ResolvedResource(FORBIDDEN, /srv/site/notes.txt)
    "/missing"    ──►  ResolvedResource(NOT_FOUND, /srv/site/www/404.html)

The category, not the file name, decides the status line and which body
variant the writer sends.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from .status_codes import HTTPStatus


class ResourceCategory(Enum):
    """What kind of response a resolved path produces."""
    HTML = "html"
    IMAGE = "image"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not-found"

    @property
    def status(self) -> HTTPStatus:
        """Status code for responses in this category."""
        if self is ResourceCategory.NOT_FOUND:
            return HTTPStatus.NOT_FOUND
        return HTTPStatus.OK


@dataclass(frozen=True)
class ResolvedResource:
    """
    Outcome of resolving a request target.

    Attributes:
        category: Response category for this target.
        path: File to read. For NOT_FOUND this is the not-found page;
              for everything else it is the requested path itself.
    """
    category: ResourceCategory
    path: Path

    @property
    def status(self) -> HTTPStatus:
        return self.category.status
