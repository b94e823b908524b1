"""
=============================================================================
HTTP STATUS CODES
=============================================================================

Status codes used by ``response(http_code)`` when writing the CGI
``Status:`` line.

A CGI script does not write an ``HTTP/1.1 200 OK`` line itself. The web
server builds that from the ``Status`` header the script emits:

    Status: 404 Not Found\r\n
            ─┬─ ────┬────
             │      │
             │      └── Reason phrase (from _STATUS_PHRASES)
             └───────── Status code

When the header is missing the server assumes ``200 OK``.

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes and reason phrases.

    Members compare equal to plain ints, so handlers can pass either:

        >>> HTTPStatus.NOT_FOUND == 404
        True
        >>> HTTPStatus.NOT_FOUND.phrase
        'Not Found'
    """

    # 2xx SUCCESS
    OK = 200
    CREATED = 201
    ACCEPTED = 202
    NO_CONTENT = 204

    # 3xx REDIRECTION
    MOVED_PERMANENTLY = 301
    FOUND = 302
    SEE_OTHER = 303
    NOT_MODIFIED = 304
    TEMPORARY_REDIRECT = 307
    PERMANENT_REDIRECT = 308

    # 4xx CLIENT ERRORS
    BAD_REQUEST = 400
    UNAUTHORIZED = 401
    FORBIDDEN = 403
    NOT_FOUND = 404
    METHOD_NOT_ALLOWED = 405
    NOT_ACCEPTABLE = 406
    CONFLICT = 409
    GONE = 410
    PAYLOAD_TOO_LARGE = 413
    UNSUPPORTED_MEDIA_TYPE = 415
    UNPROCESSABLE_ENTITY = 422
    TOO_MANY_REQUESTS = 429

    # 5xx SERVER ERRORS
    INTERNAL_SERVER_ERROR = 500
    NOT_IMPLEMENTED = 501
    BAD_GATEWAY = 502
    SERVICE_UNAVAILABLE = 503
    GATEWAY_TIMEOUT = 504

    @property
    def phrase(self) -> str:
        """Reason phrase for the ``Status:`` line."""
        return _STATUS_PHRASES.get(self, "Unknown")

    @classmethod
    def phrase_for(cls, code: int) -> str:
        """
        Reason phrase for any integer code.

        Applications may answer with codes this enum does not list
        (e.g. 418). Those still render, with the phrase "Unknown".
        """
        try:
            return cls(code).phrase
        except ValueError:
            return "Unknown"


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.CREATED: "Created",
    HTTPStatus.ACCEPTED: "Accepted",
    HTTPStatus.NO_CONTENT: "No Content",
    HTTPStatus.MOVED_PERMANENTLY: "Moved Permanently",
    HTTPStatus.FOUND: "Found",
    HTTPStatus.SEE_OTHER: "See Other",
    HTTPStatus.NOT_MODIFIED: "Not Modified",
    HTTPStatus.TEMPORARY_REDIRECT: "Temporary Redirect",
    HTTPStatus.PERMANENT_REDIRECT: "Permanent Redirect",
    HTTPStatus.BAD_REQUEST: "Bad Request",
    HTTPStatus.UNAUTHORIZED: "Unauthorized",
    HTTPStatus.FORBIDDEN: "Forbidden",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.METHOD_NOT_ALLOWED: "Method Not Allowed",
    HTTPStatus.NOT_ACCEPTABLE: "Not Acceptable",
    HTTPStatus.CONFLICT: "Conflict",
    HTTPStatus.GONE: "Gone",
    HTTPStatus.PAYLOAD_TOO_LARGE: "Payload Too Large",
    HTTPStatus.UNSUPPORTED_MEDIA_TYPE: "Unsupported Media Type",
    HTTPStatus.UNPROCESSABLE_ENTITY: "Unprocessable Entity",
    HTTPStatus.TOO_MANY_REQUESTS: "Too Many Requests",
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
    HTTPStatus.NOT_IMPLEMENTED: "Not Implemented",
    HTTPStatus.BAD_GATEWAY: "Bad Gateway",
    HTTPStatus.SERVICE_UNAVAILABLE: "Service Unavailable",
    HTTPStatus.GATEWAY_TIMEOUT: "Gateway Timeout",
}
