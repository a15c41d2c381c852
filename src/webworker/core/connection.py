"""
=============================================================================
CONNECTION
=============================================================================

One client connection: a byte stream in, a byte stream out.

=============================================================================
ONE REQUEST, THEN CLOSE
=============================================================================

A Connection lives for exactly one request/response cycle:

    NEW ──► READING ──► WRITING ──► CLOSED
              │                       ▲
              └──── (any error) ──────┘

There is no keep-alive. The response says "Connection: close" and the
socket is closed right after it, whether or not the response was complete.
Reading a second request from the same Connection is a programming error
and raises RuntimeError.

=============================================================================
STREAMS, NOT SOCKETS
=============================================================================

The pipeline never touches the socket directly. It reads from `rfile` and
writes to `wfile`, which are ordinary binary file objects:

    ┌───────────────────────────────────────────────────────────────────┐
    │   Production            rfile = sock.makefile("rb")               │
    │                         wfile = sock.makefile("wb")               │
    │                                                                   │
    │   Tests                 rfile = io.BytesIO(b"GET / HTTP/1.1...")  │
    │                         wfile = io.BytesIO()                      │
    └───────────────────────────────────────────────────────────────────┘

sock.makefile("rb") is buffered, so readline() blocks until a full line
arrives instead of returning half a line.

=============================================================================
"""

import logging
import socket
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import BinaryIO, Optional, Tuple


logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """Connection lifecycle states."""
    NEW = "new"            # Just accepted, nothing read yet
    READING = "reading"    # Reading the request header block
    WRITING = "writing"    # Sending the response
    CLOSED = "closed"      # Streams and socket released


@dataclass
class Connection:
    """
    Represents one client connection.

    Attributes:
        rfile: Readable binary stream (request bytes).
        wfile: Writable binary stream (response bytes).
        address: Client's (ip, port) tuple.
        sock: Underlying socket, if any. Closed together with the streams.
        id: Short identifier used as a log prefix.
        state: Current connection state.
    """

    rfile: BinaryIO
    wfile: BinaryIO
    address: Tuple[str, int] = ("-", 0)
    sock: Optional[socket.socket] = field(default=None, repr=False)

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW

    _request_read: bool = field(default=False, repr=False)

    @classmethod
    def from_socket(
        cls,
        sock: socket.socket,
        address: Tuple[str, int],
        timeout: Optional[float] = None,
    ) -> "Connection":
        """
        Wrap an accepted client socket.

        Args:
            sock: Socket returned by accept().
            address: Client address returned by accept().
            timeout: Optional socket timeout in seconds. None blocks.
        """
        sock.settimeout(timeout)
        return cls(
            rfile=sock.makefile("rb"),
            wfile=sock.makefile("wb"),
            address=address,
            sock=sock,
        )

    @property
    def log_prefix(self) -> str:
        """Prefix for log messages about this connection."""
        return f"[{self.id}] "

    @property
    def client_ip(self) -> str:
        """Get the client IP address."""
        return self.address[0]

    @property
    def closed(self) -> bool:
        return self.state == ConnectionState.CLOSED

    def begin_read(self) -> BinaryIO:
        """
        Claim the input stream for the single request of this connection.

        Returns:
            The readable stream.

        Raises:
            RuntimeError: If a request was already read, or the connection
                          is closed.
        """
        if self._request_read:
            raise RuntimeError(f"{self.log_prefix}Request already read from this connection")
        if self.closed:
            raise RuntimeError(f"{self.log_prefix}Connection is closed")

        self._request_read = True
        self.state = ConnectionState.READING
        return self.rfile

    def begin_write(self) -> BinaryIO:
        """Switch to writing and return the output stream."""
        if self.closed:
            raise RuntimeError(f"{self.log_prefix}Connection is closed")

        self.state = ConnectionState.WRITING
        return self.wfile

    def close(self):
        """
        Close both streams and the socket.

        Safe to call more than once. Errors while closing are ignored: the
        client may already be gone, and there is nothing left to send.
        """
        if self.closed:
            return

        for stream in (self.wfile, self.rfile):
            try:
                stream.close()
            except (OSError, ValueError):
                pass  # Flush of a dead connection

        if self.sock is not None:
            try:
                # Send FIN so the client sees the end of the body
                self.sock.shutdown(socket.SHUT_RDWR)
            except OSError:
                pass  # Already disconnected
            try:
                self.sock.close()
            except OSError:
                pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"{self.log_prefix}Connection closed")

    # =========================================================================
    # CONTEXT MANAGER: For use with 'with' statement
    # =========================================================================

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - ensure connection is closed."""
        self.close()
        return False  # Don't suppress exceptions
