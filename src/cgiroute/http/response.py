"""
=============================================================================
JSON RESPONSES
=============================================================================

``response(http_code)`` returns a writer. Calling the writer with a value
sends that value as the whole JSON response and ends the request:

    response(201)({"id": 7})
    # nothing after this line runs

=============================================================================
CGI RESPONSE FORMAT
=============================================================================

A CGI script writes headers, a blank line, then the body, to stdout. The
web server turns the ``Status`` header into the real status line:

    Status: 201 Created\r\n
    Content-Type: application/json\r\n
    Content-Length: 9\r\n
    \r\n
    {"id": 7}

=============================================================================
ENDING THE REQUEST
=============================================================================

After writing, the writer raises ResponseSent. It subclasses SystemExit
with exit code 0, so:

- in a CGI script, the process exits cleanly right there;
- ``except Exception`` blocks in handlers do not swallow it;
- a long-lived process (or a test) can catch it and read ``.response``.

=============================================================================
"""

import json
import logging
import sys
from dataclasses import dataclass, field
from typing import Any, BinaryIO, Callable, Dict, NoReturn, Optional, Union

from ..config import get_config
from .status_codes import HTTPStatus


logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"


@dataclass
class JSONResponse:
    """
    A status code plus a JSON-serializable payload.

    ``body`` is computed on construction, so an unserializable payload
    fails with TypeError before anything is written.

    Example:
        JSONResponse(404, {"error": "not found"}).to_bytes()
        # b'Status: 404 Not Found\\r\\nContent-Type: application/json\\r\\n...'
    """

    status: int = HTTPStatus.OK
    data: Any = None
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = field(init=False, repr=False)

    def __post_init__(self):
        self.body = json.dumps(
            self.data, indent=get_config().json_indent, ensure_ascii=False
        ).encode("utf-8")
        self.headers["Content-Type"] = JSON_CONTENT_TYPE
        self.headers["Content-Length"] = str(len(self.body))

    @property
    def status_line(self) -> str:
        """The CGI status header, e.g. "Status: 200 OK"."""
        return f"Status: {int(self.status)} {HTTPStatus.phrase_for(self.status)}"

    def to_bytes(self) -> bytes:
        """Serialize as a CGI response: headers, blank line, body."""
        lines = [self.status_line]
        for name, value in self.headers.items():
            lines.append(f"{name}: {value}")

        # Empty line separates headers from body
        lines.append("")

        header_bytes = "\r\n".join(lines).encode("utf-8") + b"\r\n"
        return header_bytes + self.body


class ResponseSent(SystemExit):
    """
    Raised once a response has been written; nothing else may run.

    Exit code 0, so an uncaught ResponseSent ends a CGI script normally.
    """

    def __init__(self, response: JSONResponse):
        super().__init__(0)
        self.response = response


def response(
    http_code: Union[int, HTTPStatus] = HTTPStatus.OK,
    stream: Optional[BinaryIO] = None,
) -> Callable[[Any], NoReturn]:
    """
    Return a writer that sends its argument as JSON with ``http_code``.

    Args:
        http_code: Status to send (default 200)
        stream: Where to write (default sys.stdout.buffer, read at call
                time so redirected stdout is honoured)

    Returns:
        A function taking any JSON-serializable value. It writes the
        response, then raises ResponseSent.

    Example:
        not_found = response(HTTPStatus.NOT_FOUND)
        not_found({"error": "no such user"})
    """
    def send(data: Any) -> NoReturn:
        resp = JSONResponse(status=http_code, data=data)

        out = stream if stream is not None else sys.stdout.buffer
        out.write(resp.to_bytes())
        out.flush()

        logger.debug("Sent %s (%d bytes)", resp.status_line, len(resp.body))
        raise ResponseSent(resp)

    return send
