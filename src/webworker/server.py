"""
=============================================================================
WEB SERVER
=============================================================================

Ties the acceptor to the per-connection worker.

=============================================================================
REQUEST FLOW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                     │
    │   SocketServer.accept()                                             │
    │          │                                                          │
    │          ▼                                                          │
    │   WebServer._handle_connection(conn)     (acceptor thread)          │
    │          │                                                          │
    │          ├── wait for a free worker slot (max_workers)              │
    │          └── start thread ─────────┐                                │
    │                                    ▼                                │
    │                      WebServer._run_worker(conn)  (new thread)      │
    │                                    │                                │
    │                                    ├── WebWorker.handle(conn)       │
    │                                    └── release the slot             │
    │                                                                     │
    └─────────────────────────────────────────────────────────────────────┘

When all slots are busy the acceptor simply stops calling accept(). New
clients wait in the kernel's listen backlog instead of piling up threads.
The wait is re-checked every SLOT_WAIT_INTERVAL seconds so that shutdown()
is still noticed while every slot is held.

=============================================================================
"""

import logging
import threading
from datetime import datetime
from typing import Callable, Optional, Tuple

from .config import ServerConfig
from .core import Connection, SocketServer, WebWorker
from .http.response import utc_now


logger = logging.getLogger(__name__)

# Seconds between shutdown checks while waiting for a free worker slot
SLOT_WAIT_INTERVAL = 1.0


class WebServer:
    """
    Static web server: one thread per connection, one request per thread.

    Usage:
        server = WebServer(ServerConfig(port=8080, base_dir="/srv/site"))
        server.run()   # Blocks until Ctrl+C
    """

    def __init__(
        self,
        config: Optional[ServerConfig] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Initialize the server.

        Args:
            config: Server configuration. Uses defaults if not provided.
            clock: Time source for Date headers.
        """
        self.config = config or ServerConfig()
        self.config.validate()  # Fail-fast on invalid config

        self._socket_server = SocketServer(self.config)
        self._worker = WebWorker.from_config(self.config, clock=clock)

        # Bounds the number of connections in flight
        self._slots = threading.BoundedSemaphore(self.config.max_workers)

        self._threads_lock = threading.Lock()
        self._threads: set = set()

    @property
    def address(self) -> Optional[Tuple[str, int]]:
        """The bound (ip, port), once running."""
        return self._socket_server.bound_address

    # =========================================================================
    # SERVER LIFECYCLE
    # =========================================================================

    def run(self):
        """
        Start the server (blocking).

        Returns after shutdown() is called or SIGINT/SIGTERM is received.
        """
        self._setup_logging()
        logger.info(
            f"Starting {self.config.server_name} on {self.config.host}:{self.config.port}, "
            f"serving {self.config.root}"
        )

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Wait until the server is accepting connections."""
        return self._socket_server.wait_until_ready(timeout)

    def shutdown(self):
        """Ask the accept loop to stop. Safe to call from any thread."""
        self._socket_server.shutdown()

    def _setup_logging(self):
        """Configure logging based on config."""
        level = self.config.level

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        logging.getLogger("webworker").setLevel(level)

    def _shutdown(self, timeout: float = 5.0):
        """Stop accepting and give in-flight connections time to finish."""
        logger.info("Shutting down server...")

        with self._threads_lock:
            threads = list(self._threads)

        for thread in threads:
            thread.join(timeout=timeout)

        logger.info("Server stopped")

    # =========================================================================
    # CONNECTION HANDLING
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """
        Start a worker thread for a new connection.

        Called on the acceptor thread. Blocks while all worker slots are
        in use.
        """
        while not self._slots.acquire(timeout=SLOT_WAIT_INTERVAL):
            if not self._socket_server.is_running:
                logger.warning(f"{conn.log_prefix}Server stopping, dropping connection")
                conn.close()
                return

        thread = threading.Thread(
            target=self._run_worker,
            args=(conn,),
            name=f"WebWorker-{conn.id}",
            daemon=True,
        )

        with self._threads_lock:
            self._threads.add(thread)

        try:
            thread.start()
        except RuntimeError as e:
            # Could not start a thread (resource exhaustion)
            logger.error(f"{conn.log_prefix}Cannot start worker thread: {e}")
            with self._threads_lock:
                self._threads.discard(thread)
            self._slots.release()
            conn.close()

    def _run_worker(self, conn: Connection):
        """Worker thread body."""
        try:
            self._worker.handle(conn)
        finally:
            with self._threads_lock:
                self._threads.discard(threading.current_thread())
            self._slots.release()

