"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The worker only ever answers with two statuses:

    ┌────────┬───────────────────────────────────────────────────────────┐
    │  200   │ OK         - the requested file exists and is served     │
    ├────────┼───────────────────────────────────────────────────────────┤
    │  404   │ NOT FOUND  - missing file, directory, or no path at all  │
    └────────┴───────────────────────────────────────────────────────────┘

The reason phrase for 404 is sent upper-case ("NOT FOUND") on the wire,
so the phrases live here instead of coming from http.HTTPStatus.

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes and reason phrases.

        >>> HTTPStatus.OK == 200
        True
        >>> HTTPStatus.NOT_FOUND.phrase
        'NOT FOUND'
    """

    OK = 200            # Resource found and streamed
    NOT_FOUND = 404     # Resolution miss of any kind

    @property
    def phrase(self) -> str:
        """Reason phrase used in the status line."""
        return _PHRASES[self]


_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.NOT_FOUND: "NOT FOUND",
}
