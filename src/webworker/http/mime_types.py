"""
=============================================================================
MIME TYPE DETECTION
=============================================================================

Maps a resolved path to the Content-Type header value and to a response
category.

=============================================================================
WHAT DO WE SERVE?
=============================================================================

The worker is deliberately narrow. It serves HTML pages and a handful of
image formats, and nothing else:

    ┌───────────────────────────────────────────────────────────────────┐
    │  Extension        Category     Content-Type                       │
    ├───────────────────────────────────────────────────────────────────┤
    │  .html            HTML         text/html                          │
    │  .png             IMAGE        image/png                          │
    │  .jpg             IMAGE        image/jpg                          │
    │  .gif             IMAGE        image/gif                          │
    │  .jpeg            IMAGE        image/jpeg                         │
    │  .ico             IMAGE        image/ico                          │
    │  anything else    FORBIDDEN    text/html  (body is the 403 page)  │
    └───────────────────────────────────────────────────────────────────┘

The image type is always "image/" + the extension without its dot, which is
why .jpg is sent as image/jpg rather than the registered image/jpeg.

=============================================================================
MATCHING
=============================================================================

Every candidate in IMAGE_EXTENSIONS is compared against the end of the path.
The comparison is case-insensitive, so PHOTO.JPG is an image too, but the
Content-Type always uses the lower-case extension from the table.

=============================================================================
"""

from pathlib import Path
from typing import Optional, Union

from .resource import ResolvedResource, ResourceCategory


# =============================================================================
# EXTENSION TABLES
# =============================================================================

HTML_EXTENSION = ".html"
HTML_TYPE = "text/html"

# Ordered; the first entry that matches wins
IMAGE_EXTENSIONS = (".png", ".jpg", ".gif", ".jpeg", ".ico")

# The forbidden and not-found pages are HTML
DEFAULT_MIME_TYPE = HTML_TYPE


# =============================================================================
# PUBLIC FUNCTIONS
# =============================================================================

def image_extension(path: Union[str, Path]) -> Optional[str]:
    """
    Find the image extension a path ends with.

    Args:
        path: File path or name.

    Returns:
        The matching entry from IMAGE_EXTENSIONS, or None.

    Examples:
        >>> image_extension("photo.jpg")
        '.jpg'

        >>> image_extension("icons/favicon.ICO")
        '.ico'

        >>> image_extension("notes.txt") is None
        True
    """
    name = str(path).lower()
    for extension in IMAGE_EXTENSIONS:
        if name.endswith(extension):
            return extension
    return None


def is_html(path: Union[str, Path]) -> bool:
    """Check if a path names an HTML page."""
    return str(path).lower().endswith(HTML_EXTENSION)


def category_for(path: Union[str, Path]) -> ResourceCategory:
    """
    Categorize an existing file by its extension.

    Args:
        path: Path of a file known to exist.

    Returns:
        HTML, IMAGE, or FORBIDDEN for every other extension.
    """
    if is_html(path):
        return ResourceCategory.HTML
    if image_extension(path) is not None:
        return ResourceCategory.IMAGE
    return ResourceCategory.FORBIDDEN


def get_mime_type(path: Union[str, Path]) -> str:
    """
    Get the MIME type for a path based on its extension.

    Examples:
        >>> get_mime_type("index.html")
        'text/html'

        >>> get_mime_type("photo.jpg")
        'image/jpg'

        >>> get_mime_type("notes.txt")
        'text/html'
    """
    if is_html(path):
        return HTML_TYPE

    extension = image_extension(path)
    if extension is not None:
        return f"image/{extension[1:]}"

    return DEFAULT_MIME_TYPE


def get_content_type(resource: ResolvedResource) -> str:
    """
    Get the Content-Type header value for a resolved resource.

    Only HTML and IMAGE resources are sent as themselves. The not-found and
    forbidden pages are always HTML, whatever the request asked for.
    """
    if resource.category in (ResourceCategory.HTML, ResourceCategory.IMAGE):
        return get_mime_type(resource.path)
    return HTML_TYPE
