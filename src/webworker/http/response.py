"""
=============================================================================
HTTP RESPONSE WRITING
=============================================================================

Writes the status line, header block and body for a resolved resource.

=============================================================================
RESPONSE STRUCTURE
=============================================================================

    HTTP/1.1 200 OK\r\n                       ← Status line
    Date: Sun, 18 Oct 2026 12:00:00 GMT\r\n   ← Header block
    Server: WebWorker/1.0\r\n
    Connection: close\r\n
    Content-Type: image/jpg\r\n
    \r\n                                      ← Blank line
    <exact bytes of photo.jpg>                ← Body

There is no Content-Length header. "Connection: close" tells the client the
body ends when the connection does.

=============================================================================
CHOOSING THE BODY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │  Category     Status          Body                                  │
    ├─────────────────────────────────────────────────────────────────────┤
    │  HTML         200 OK          file bytes, unchanged                 │
    │  IMAGE        200 OK          file bytes, unchanged                 │
    │  FORBIDDEN    200 OK          forbidden page bytes                  │
    │  NOT_FOUND    404 NOT FOUND   not-found page bytes                  │
    └─────────────────────────────────────────────────────────────────────┘

HTML is copied as raw bytes too. Reading it line by line would drop or
rewrite the original line terminators.

=============================================================================
READ FIRST, THEN WRITE
=============================================================================

The body is read completely BEFORE the first header byte is sent:

    1. load body      ← may fail (permissions, file vanished, I/O error)
    2. build header   ← status and Content-Type match the body we HAVE
    3. send both

If step 1 fails for an HTML or image file, the failure is logged and the
forbidden page is sent instead, labelled text/html. Because nothing has been
written yet, the header always describes the body that follows.

Every file is opened in a "with" block, so the handle is released on every
exit path, including exceptions.

=============================================================================
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import BinaryIO, Callable, Optional, Tuple

from ..config import ServerConfig
from .mime_types import HTML_TYPE, get_content_type
from .resource import ResolvedResource, ResourceCategory
from .status_codes import HTTPStatus


logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    """Current time in UTC (the default response clock)."""
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ResponseHeader:
    """
    Status line plus header block of one response.

    Built once, serialized once.
    """
    status: HTTPStatus
    date: datetime
    server: str
    content_type: str
    connection: str = "close"
    version: str = "HTTP/1.1"

    @property
    def status_line(self) -> str:
        """
        Get the HTTP status line.

        Example: "HTTP/1.1 404 NOT FOUND"
        """
        return f"{self.version} {self.status.value} {self.status.phrase}"

    def to_bytes(self) -> bytes:
        """Serialize the status line and headers, ending with a blank line."""
        lines = [
            self.status_line,
            f"Date: {format_http_date(self.date)}",
            f"Server: {self.server}",
            f"Connection: {self.connection}",
            f"Content-Type: {self.content_type}",
            "",
        ]
        return "\r\n".join(lines).encode("utf-8") + b"\r\n"


class ResponseWriter:
    """
    Writes complete responses for resolved resources.

    Usage:
        writer = ResponseWriter(forbidden_page=Path("www/403.html"))
        writer.write(conn.wfile, resource, get_content_type(resource))
    """

    def __init__(
        self,
        forbidden_page: Path,
        server_name: str = "WebWorker/1.0",
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Initialize the response writer.

        Args:
            forbidden_page: Body for resources we refuse to serve.
            server_name: Value of the Server header.
            clock: Returns the time for the Date header. Tests pass a
                   fixed clock to get byte-identical responses.
        """
        self.forbidden_page = Path(forbidden_page)
        self.server_name = server_name
        self.clock = clock

    @classmethod
    def from_config(
        cls,
        config: ServerConfig,
        clock: Callable[[], datetime] = utc_now,
    ) -> "ResponseWriter":
        """Create a writer from server configuration."""
        return cls(
            forbidden_page=config.page_path(config.forbidden_page),
            server_name=config.server_name,
            clock=clock,
        )

    def write(
        self,
        stream: BinaryIO,
        resource: ResolvedResource,
        content_type: Optional[str] = None,
        log_prefix: str = "",
    ) -> ResponseHeader:
        """
        Write the full response for a resource.

        Args:
            stream: Writable binary stream of the connection.
            resource: Result of PathResolver.resolve().
            content_type: Content-Type for the resource; derived from the
                          resource when omitted.
            log_prefix: Prepended to log messages.

        Returns:
            The header that was sent.

        Raises:
            OSError: If the forbidden or not-found page cannot be read, or
                     the stream cannot be written. Nothing has been written
                     in the first case.
        """
        if content_type is None:
            content_type = get_content_type(resource)

        status = resource.status
        body, fell_back = self._load_body(resource, log_prefix)
        if fell_back:
            content_type = HTML_TYPE

        header = self.build_header(status, content_type)
        stream.write(header.to_bytes())
        stream.write(body)
        stream.flush()
        return header

    def build_header(self, status: HTTPStatus, content_type: str) -> ResponseHeader:
        """Build the header for a response sent now."""
        return ResponseHeader(
            status=status,
            date=self.clock(),
            server=self.server_name,
            content_type=content_type,
        )

    def _load_body(self, resource: ResolvedResource, log_prefix: str) -> Tuple[bytes, bool]:
        """
        Read the body bytes for a resource.

        Returns:
            (body, fell_back) where fell_back is True if the resource's own
            file could not be read and the forbidden page was used instead.
        """
        category = resource.category

        if category in (ResourceCategory.HTML, ResourceCategory.IMAGE):
            try:
                body = read_file(resource.path)
            except OSError as e:
                logger.error(f"{log_prefix}Failed to read {resource.path}: {e}")
                return read_file(self.forbidden_page), True

            logger.debug(f"{log_prefix}Served {category.value} file: {resource.path}")
            return body, False

        if category is ResourceCategory.NOT_FOUND:
            logger.debug(f"{log_prefix}Not found, sending {resource.path}")
            return read_file(resource.path), False

        logger.debug(f"{log_prefix}Forbidden file: {resource.path}")
        return read_file(self.forbidden_page), False


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================

def read_file(path: Path) -> bytes:
    """
    Read a whole file as bytes.

    The file is closed before returning, also when the read fails.
    """
    with open(path, "rb") as f:
        return f.read()


def format_http_date(dt: datetime) -> str:
    """
    Format a datetime as an HTTP-date (RFC 7231).

    Format: Day, DD Mon YYYY HH:MM:SS GMT
    Example: Sun, 18 Oct 2026 12:00:00 GMT

    Aware datetimes are converted to UTC; naive ones are taken as UTC.
    """
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc)

    # Weekday names (0=Monday in Python's datetime)
    days = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
    months = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
              "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

    return (
        f"{days[dt.weekday()]}, "
        f"{dt.day:02d} {months[dt.month - 1]} {dt.year} "
        f"{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d} GMT"
    )


# =============================================================================
# MODULE SUMMARY
# =============================================================================
#
# 1. Status comes from the resource category, never from the file name
# 2. The body is loaded before the header is sent, so a failed read can
#    still change the Content-Type
# 3. Bodies are byte-exact copies of the files on disk
# 4. The clock is injectable for reproducible output
# =============================================================================
