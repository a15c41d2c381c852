"""
=============================================================================
PATH RESOLUTION
=============================================================================

Maps a request target to a ResolvedResource.

=============================================================================
RESOLUTION RULES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │  Target                   Result                                    │
    ├─────────────────────────────────────────────────────────────────────┤
    │  /index.html, /, ""       index page      (category by extension)   │
    │  /docs/page.html          base/docs/page.html         HTML          │
    │  /photo.jpg               base/photo.jpg              IMAGE         │
    │  /notes.txt               base/notes.txt              FORBIDDEN     │
    │  /docs/                   base/docs                   FORBIDDEN     │
    │  /missing.html            not-found page              NOT_FOUND     │
    │  /../../etc/passwd        not-found page              NOT_FOUND     │
    └─────────────────────────────────────────────────────────────────────┘

Targets are taken literally, relative to the base directory. The resolver
only decides whether something exists there; the extension decides the rest.

=============================================================================
SECURITY: PATH TRAVERSAL
=============================================================================

    GET /../../../etc/passwd HTTP/1.1

Joined naively this escapes the base directory. We resolve() the joined
path (collapsing ".." and following symlinks) and check that it is still
inside the base directory. If it is not, the target is treated as missing:
the client gets the ordinary 404 page and learns nothing about the rest of
the filesystem.

=============================================================================
"""

import logging
from pathlib import Path
from typing import Optional

from ..config import ServerConfig
from .mime_types import category_for
from .request import DEFAULT_TARGET
from .resource import ResolvedResource, ResourceCategory


logger = logging.getLogger(__name__)


class PathResolver:
    """
    Resolves request targets against a base directory.

    Never raises: anything that cannot be resolved to an existing entry
    inside the base directory becomes the not-found page.
    """

    def __init__(
        self,
        root_dir: str = ".",
        index_page: str = "www/index.html",
        not_found_page: str = "www/404.html",
    ):
        """
        Initialize the resolver.

        Args:
            root_dir: Base directory for request targets.
            index_page: Served for the default target, relative to root_dir.
            not_found_page: Path carried by NOT_FOUND results, relative
                            to root_dir.
        """
        # Resolve to absolute path (needed for the traversal check)
        self.root_dir = Path(root_dir).resolve()
        self.index_page = self.root_dir / index_page
        self.not_found_page = self.root_dir / not_found_page

    @classmethod
    def from_config(cls, config: ServerConfig) -> "PathResolver":
        """Create a resolver from server configuration."""
        return cls(
            root_dir=config.base_dir,
            index_page=config.index_page,
            not_found_page=config.not_found_page,
        )

    def resolve(self, target: str) -> ResolvedResource:
        """
        Resolve a request target.

        Args:
            target: Target from the request line, e.g. "/photo.jpg".

        Returns:
            The resolved resource.
        """
        path = self._filesystem_path(target)
        if path is None:
            return self.not_found()

        try:
            if not path.exists():
                return self.not_found()
            if path.is_dir():
                # No directory listing
                return ResolvedResource(ResourceCategory.FORBIDDEN, path)
        except OSError as e:
            # Name too long, no search permission on a parent, ...
            logger.warning(f"Cannot stat target {target!r}: {e}")
            return self.not_found()

        return ResolvedResource(category_for(path), path)

    def not_found(self) -> ResolvedResource:
        """The resource returned for every missing target."""
        return ResolvedResource(ResourceCategory.NOT_FOUND, self.not_found_page)

    def _filesystem_path(self, target: str) -> Optional[Path]:
        """
        Map a target to an absolute path inside the base directory.

        Returns:
            The path, or None if the target escapes the base directory
            or cannot be represented on this filesystem.
        """
        relative = target.strip().lstrip("/")
        if not relative or target == DEFAULT_TARGET:
            return self.index_page

        try:
            path = (self.root_dir / relative).resolve()
            path.relative_to(self.root_dir)
        except ValueError:
            # Outside root_dir, or an embedded NUL byte
            logger.warning(f"Rejected target outside base directory: {target!r}")
            return None
        except OSError as e:
            logger.warning(f"Cannot resolve target {target!r}: {e}")
            return None

        return path
