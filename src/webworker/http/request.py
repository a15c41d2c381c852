"""
=============================================================================
HTTP REQUEST READING
=============================================================================

Reads the request header block of one connection and extracts the target.

=============================================================================
WHAT ARRIVES ON THE WIRE
=============================================================================

    GET /docs/page.html HTTP/1.1\r\n      ← Request line
    Host: localhost:8080\r\n              ← Header lines (read, not used)
    User-Agent: curl/8.0\r\n
    \r\n                                  ← Blank line = end of headers

The request line is split on whitespace into three tokens:

    GET        /docs/page.html        HTTP/1.1
    ───        ───────────────        ────────
    method     request target         protocol

Only GET requests carry a target. Any other method, or a line that does not
split into exactly three tokens, is read and ignored, and the connection
falls back to the index page.

=============================================================================
BLOCKING, NOT POLLING
=============================================================================

The client may send its headers slowly, one packet at a time. readline()
on a socket file blocks until a full line (or EOF) is available, so the
worker thread sleeps in the kernel instead of spinning:

    ┌─────────────────────────────────────────────────────────────────┐
    │   while True:                                                   │
    │       line = stream.readline()   ← blocks until "\\n" or EOF     │
    │       if not line: break         ← client closed                │
    │       if line is blank: break    ← end of header block          │
    └─────────────────────────────────────────────────────────────────┘

A read error part way through is not fatal. Whatever was parsed so far is
kept, and the response is built from that.

=============================================================================
"""

import logging
from dataclasses import dataclass, field
from typing import BinaryIO, List, Optional
from urllib.parse import unquote


logger = logging.getLogger(__name__)


DEFAULT_TARGET = "/index.html"


@dataclass
class IncomingRequest:
    """
    The request line of one connection, plus the raw header lines.

    Attributes:
        method: Method token (always "GET" for a parsed request).
        target: Request target exactly as sent, e.g. "/docs/page.html".
        version: Protocol token, e.g. "HTTP/1.1".
        header_lines: Header lines that followed the request line.
    """
    method: str
    target: str
    version: str = "HTTP/1.1"
    header_lines: List[str] = field(default_factory=list)


class RequestParser:
    """
    Reads the header block of a connection and extracts the request.

    Usage:
        parser = RequestParser()
        request = parser.read_request(conn.rfile)
        target = parser.requested_target(request)   # never empty
    """

    def __init__(self, method: str = "GET", log_prefix: str = ""):
        """
        Initialize the parser.

        Args:
            method: The only method whose request line sets a target.
            log_prefix: Prepended to log messages (usually "[conn-id] ").
        """
        self.method = method
        self.log_prefix = log_prefix

    def read_request(self, stream: BinaryIO) -> Optional[IncomingRequest]:
        """
        Read lines until the blank line ending the header block.

        Stops early at end of stream or on a read error. The first line
        shaped like "GET <target> HTTP/<version>" becomes the request.

        Args:
            stream: Readable binary stream of the connection.

        Returns:
            The parsed request, or None if no GET request line was seen.
        """
        request: Optional[IncomingRequest] = None
        header_lines: List[str] = []

        while True:
            try:
                raw = stream.readline()
            except (OSError, ValueError) as e:
                logger.warning(f"{self.log_prefix}Request error: {e}")
                break

            if not raw:
                break  # Client closed before the blank line

            # ISO-8859-1 maps every byte, so decoding never fails
            line = raw.decode("iso-8859-1").rstrip("\r\n")
            logger.debug(f"{self.log_prefix}Request line: ({line})")

            if not line:
                break  # End of header block

            if request is None:
                request = self.parse_request_line(line)
                if request is not None:
                    continue

            header_lines.append(line)

        if request is not None:
            request.header_lines = header_lines
        return request

    def parse_request_line(self, line: str) -> Optional[IncomingRequest]:
        """
        Parse a single request line.

        Args:
            line: One decoded line without its terminator.

        Returns:
            IncomingRequest if the line is "<method> <target> HTTP/x",
            otherwise None.
        """
        parts = line.split()
        if len(parts) != 3:
            return None

        method, target, version = parts
        if method != self.method or not version.startswith("HTTP/"):
            return None

        return IncomingRequest(method=method, target=target, version=version)

    def requested_target(self, request: Optional[IncomingRequest]) -> str:
        """
        Get the target to resolve, falling back to the index page.

        The query string and fragment are dropped and percent-escapes
        decoded. A target with nothing left after its leading slash
        ("/", "") means the index page.

        Args:
            request: Result of read_request(), possibly None.

        Returns:
            A target beginning with "/".
        """
        if request is None:
            return DEFAULT_TARGET

        target = request.target.split("?", 1)[0].split("#", 1)[0]
        target = unquote(target).strip()

        if len(target.lstrip("/")) == 0:
            return DEFAULT_TARGET

        if not target.startswith("/"):
            target = "/" + target
        return target


def read_target(stream: BinaryIO, log_prefix: str = "") -> str:
    """
    Read a connection's header block and return the target to serve.

    Convenience wrapper around RequestParser.
    """
    parser = RequestParser(log_prefix=log_prefix)
    return parser.requested_target(parser.read_request(stream))


# =============================================================================
# MODULE SUMMARY
# =============================================================================
#
# 1. Header lines are read with a blocking readline(), never polled
# 2. The request line is tokenized on whitespace, not sliced by offset
# 3. Malformed input never raises; it falls back to /index.html
# 4. Header lines are kept on the request but not interpreted
# =============================================================================
