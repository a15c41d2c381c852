"""
=============================================================================
HTTP MODULE
=============================================================================

The four stages of the per-connection pipeline:

    ┌──────────────┐   target   ┌──────────────┐  resource  ┌──────────────┐
    │ RequestParser│ ─────────► │ PathResolver │ ─────────► │  mime_types  │
    │  request.py  │            │  resolver.py │            │ content type │
    └──────────────┘            └──────────────┘            └──────┬───────┘
                                                                   │
                                                                   ▼
                                                           ┌──────────────┐
                                                           │ResponseWriter│
                                                           │  response.py │
                                                           └──────────────┘

Each stage only consumes the previous stage's output. None of them keep
state between connections.

=============================================================================
"""

from .request import IncomingRequest, RequestParser, DEFAULT_TARGET, read_target
from .resource import ResolvedResource, ResourceCategory
from .resolver import PathResolver
from .mime_types import (
    IMAGE_EXTENSIONS,
    category_for,
    get_content_type,
    get_mime_type,
    image_extension,
)
from .response import ResponseHeader, ResponseWriter, format_http_date
from .status_codes import HTTPStatus

# Public API - what you get when you do:
# from webworker.http import *
__all__ = [
    # Request reading
    "IncomingRequest",
    "RequestParser",
    "DEFAULT_TARGET",
    "read_target",

    # Resolution
    "ResolvedResource",
    "ResourceCategory",
    "PathResolver",

    # Content types
    "IMAGE_EXTENSIONS",
    "category_for",
    "get_content_type",
    "get_mime_type",
    "image_extension",

    # Response writing
    "ResponseHeader",
    "ResponseWriter",
    "format_http_date",

    # Status codes
    "HTTPStatus",
]
