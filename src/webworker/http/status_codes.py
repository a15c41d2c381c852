"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The worker only ever answers with two statuses:

    ┌─────────────────────────────────────────────────────────────────────┐
    │  200 OK          The target exists (HTML, image, or a file type    │
    │                  we refuse to serve, which gets the 403 page)       │
    │                                                                     │
    │  404 NOT FOUND   Nothing exists at the target                       │
    └─────────────────────────────────────────────────────────────────────┘

The reason phrases are upper case, exactly as they appear on the wire:

    HTTP/1.1 404 NOT FOUND
             ─── ─────────
              │      │
              │      └── Reason phrase
              └───────── Status code

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    Statuses the worker can send.

    IntEnum, so HTTPStatus.OK == 200 and f"{HTTPStatus.OK:d}" == "200".
    """

    OK = 200
    NOT_FOUND = 404

    @property
    def phrase(self) -> str:
        """Reason phrase used in the status line."""
        return _PHRASES[self]


_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.NOT_FOUND: "NOT FOUND",
}
