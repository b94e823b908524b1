"""
=============================================================================
REQUEST CONTEXT
=============================================================================

Captures the three things a route needs to know about the current request:

    method   "GET", "POST", ...          (REQUEST_METHOD)
    uri      "/users/42?verbose=1"       (REQUEST_URI, raw path + query)
    input    {"name": "Ada"}             (JSON body, always a dict)

=============================================================================
WHERE THE DATA COMES FROM
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │  CGI                              │  WSGI                            │
    ├───────────────────────────────────┼──────────────────────────────────┤
    │  os.environ["REQUEST_METHOD"]     │  environ["REQUEST_METHOD"]       │
    │  os.environ["REQUEST_URI"]        │  SCRIPT_NAME + PATH_INFO         │
    │    (Apache, nginx fcgiwrap)       │    + "?" + QUERY_STRING          │
    │  sys.stdin, CONTENT_LENGTH bytes  │  environ["wsgi.input"]           │
    └─────────────────────────────────────────────────────────────────────┘

The body is only ever read up to CONTENT_LENGTH. Without a length there
is no body: reading stdin to EOF can block forever behind some servers.

=============================================================================
ONE PROCESS, ONE REQUEST
=============================================================================

``RequestContext.instance()`` builds the context from the process
environment on first call and returns that same object afterwards. That
is correct for CGI, where the process dies with the request.

A long-lived process (WSGI server, test suite) serves many requests, so
it must not rely on the memoized instance. Either build a context per
request and pass it explicitly:

    ctx = RequestContext.from_environ(environ)
    route("GET")("/users/{id}", show_user, request=ctx)

or swap the process-wide one at the start of every request:

    RequestContext.install(RequestContext.from_environ(environ))

=============================================================================
"""

import json
import logging
import os
import sys
from collections import abc
from dataclasses import dataclass, field
from typing import Any, BinaryIO, ClassVar, Dict, Iterable, List, Mapping, Optional, Union

from ..config import get_config


logger = logging.getLogger(__name__)

# A single key or a collection of keys
Keys = Union[str, Iterable[str]]


@dataclass(frozen=True)
class RequestContext:
    """
    The current request's method, URI and parsed JSON input.

    Instances are frozen: routing reads them, nothing rewrites them.

    Example:
        ctx = RequestContext("POST", "/users", {"name": "Ada", "age": 36})

        ctx.has("name")               # True
        ctx.has(["name", "email"])    # False
        ctx.is_missing("email")       # True
        ctx.only(["name", "email"])   # {"name": "Ada"}
    """

    method: str
    uri: str
    input: Dict[str, Any] = field(default_factory=dict)

    _instance: ClassVar[Optional["RequestContext"]] = None

    # =========================================================================
    # CONSTRUCTION
    # =========================================================================

    @classmethod
    def from_environ(
        cls,
        environ: Mapping[str, Any],
        stream: Optional[BinaryIO] = None,
    ) -> "RequestContext":
        """
        Build a context from a CGI or WSGI environ.

        Args:
            environ: CGI environment (os.environ) or a WSGI environ dict
            stream: Body stream for CGI (sys.stdin.buffer). Ignored when
                    the environ carries its own ``wsgi.input``.

        Returns:
            A new RequestContext. Never raises for a bad body: malformed
            or oversized JSON simply produces empty input.
        """
        method = str(environ.get("REQUEST_METHOD") or "GET").upper()
        uri = _request_uri(environ)
        body = _read_body(environ, stream)
        return cls(method=method, uri=uri, input=_parse_json_object(body))

    @classmethod
    def instance(cls) -> "RequestContext":
        """
        Return the process-wide request, building it on first call.

        Later calls return the same object even if the environment has
        changed since. Use reset() or install() to start over.
        """
        if cls._instance is None:
            cls._instance = cls.from_environ(
                os.environ, getattr(sys.stdin, "buffer", None)
            )
            logger.debug("Request context created: %s %s", cls._instance.method, cls._instance.uri)
        return cls._instance

    @classmethod
    def install(cls, context: "RequestContext") -> "RequestContext":
        """Make ``context`` the process-wide request."""
        cls._instance = context
        return context

    @classmethod
    def reset(cls) -> None:
        """Forget the process-wide request; the next instance() rebuilds it."""
        cls._instance = None

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def path(self) -> str:
        """The URI without its query string."""
        return self.uri.split("?", 1)[0]

    # =========================================================================
    # INPUT QUERIES
    # =========================================================================

    def has(self, keys: Keys) -> bool:
        """
        Check that every key is present in the input.

        Accepts a single key or a collection of keys, so
        ``has("a")`` and ``has(["a"])`` are the same check.
        An empty collection is trivially present.
        """
        return all(key in self.input for key in _as_key_list(keys))

    def is_missing(self, keys: Keys) -> bool:
        """True when at least one of ``keys`` is absent from the input."""
        return not self.has(keys)

    def only(self, keys: Keys) -> Dict[str, Any]:
        """
        Return the input restricted to ``keys``.

        Keys that are not in the input are skipped. The result keeps the
        input's key order.

        Example:
            # input == {"name": "Name", "age": 38}
            request.only(["name"])   # {"name": "Name"}
        """
        wanted = set(_as_key_list(keys))
        return {key: value for key, value in self.input.items() if key in wanted}


def request() -> RequestContext:
    """Return the process-wide request context."""
    return RequestContext.instance()


# =============================================================================
# HELPERS
# =============================================================================

def _as_key_list(keys: Keys) -> List[str]:
    # Strings are iterable too; a bare str is one key, not a list of chars
    if isinstance(keys, str) or not isinstance(keys, abc.Iterable):
        return [keys]
    return list(keys)


def _request_uri(environ: Mapping[str, Any]) -> str:
    uri = environ.get("REQUEST_URI")
    if uri:
        return str(uri)

    path = (environ.get("SCRIPT_NAME") or "") + (environ.get("PATH_INFO") or "")
    query = environ.get("QUERY_STRING")
    uri = path or "/"
    if query:
        uri += "?" + query
    return uri


def _content_length(environ: Mapping[str, Any]) -> Optional[int]:
    try:
        length = int(environ.get("CONTENT_LENGTH") or "")
    except ValueError:
        return None
    return length if length >= 0 else None


def _read_body(environ: Mapping[str, Any], stream: Optional[BinaryIO]) -> bytes:
    source = environ.get("wsgi.input")
    if source is None:
        source = stream
    if source is None:
        return b""

    length = _content_length(environ)
    if not length:
        return b""

    max_size = get_config().max_body_size
    if length > max_size:
        logger.warning(
            "Ignoring request body of %d bytes (max_body_size=%d)", length, max_size
        )
        return b""

    return source.read(length)


def _parse_json_object(body: bytes) -> Dict[str, Any]:
    """Decode a JSON object body; anything else becomes an empty dict."""
    if not body:
        return {}

    try:
        data = json.loads(body.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as e:
        logger.debug("Request body is not valid JSON, treating as empty: %s", e)
        return {}

    if not isinstance(data, dict):
        logger.debug("Request body is JSON %s, not an object; treating as empty", type(data).__name__)
        return {}

    return data
