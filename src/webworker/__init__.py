"""
=============================================================================
WEBWORKER - A Minimal Static Web Server
=============================================================================

Serves HTML pages and images from a directory over HTTP/1.1, one request
per connection, one thread per connection.

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    webworker/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m webworker)
    ├── server.py            # WebServer: acceptor + worker threads
    ├── config.py            # ServerConfig dataclass
    ├── core/
    │   ├── socket_server.py # TCP accept loop
    │   ├── connection.py    # One client's streams
    │   └── worker.py        # Per-connection pipeline
    └── http/
        ├── request.py       # RequestParser: header block → target
        ├── resolver.py      # PathResolver: target → resource
        ├── resource.py      # ResolvedResource, ResourceCategory
        ├── mime_types.py    # Content types and categories
        ├── response.py      # ResponseWriter: status, headers, body
        └── status_codes.py  # 200 OK / 404 NOT FOUND

=============================================================================
QUICK START
=============================================================================

    from webworker import WebServer, ServerConfig

    server = WebServer(ServerConfig(port=8080, base_dir="/srv/site"))
    server.run()

Or from the shell:

    python -m webworker --root /srv/site --port 8080

=============================================================================
"""

__version__ = "1.0.0"

from .server import WebServer
from .config import ServerConfig

__all__ = ["WebServer", "ServerConfig", "__version__"]
