"""
=============================================================================
METHOD-SCOPED ROUTING
=============================================================================

A CGI script handles exactly one request, so there is no route table to
build. Each route declaration is checked against the request the moment
it runs, and the script simply lists its routes top to bottom:

    get = route("GET")
    post = route("POST")

    get("/users", list_users)
    get("/users/{id}", show_user)          # show_user("42") for /users/42
    post("/users", create_user)
    route_chain("DELETE")("/users/{id}", [require_admin, delete_user])

    response(404)({"error": "not found"})  # reached only if nothing answered

=============================================================================
DISPATCH
=============================================================================

    route("GET")("/users/{id}", show_user)
         │
         ▼
    ┌──────────────┐  no   ┌────────────────────┐
    │ method gate  │──────►│ METHOD_MISMATCH    │  (nothing runs)
    └──────┬───────┘       └────────────────────┘
           │ yes
           ▼
    ┌──────────────┐  no   ┌────────────────────┐
    │ path gate    │──────►│ NOT_MATCHED        │  (nothing runs)
    └──────┬───────┘       └────────────────────┘
           │ yes
           ▼
    show_user(*args)  ───► DISPATCHED

Chains call every callback with the same arguments, in order. There is
no short-circuit: the only way to stop a chain is to raise (or to send a
response, which raises ResponseSent).

The outcome is returned so callers can tell "no route matched" from "a
route matched and its handler chose to do nothing". Ignoring it is fine.

=============================================================================
"""

import inspect
import logging
from enum import Enum
from typing import Any, Callable, Optional, Sequence

from .matcher import match_path, placeholder_names
from .request import RequestContext, request as current_request


logger = logging.getLogger(__name__)

# Route callbacks receive the path captures as positional strings
Callback = Callable[..., Any]


class RouteOutcome(Enum):
    """What a route declaration did with the current request."""

    METHOD_MISMATCH = "method_mismatch"
    NOT_MATCHED = "not_matched"
    DISPATCHED = "dispatched"

    def __bool__(self) -> bool:
        return self is RouteOutcome.DISPATCHED


class RouteDefinitionError(TypeError):
    """
    A route callback cannot accept the pattern's captures.

    Raised when the route is declared, whatever the request, so a typo in
    a rarely-hit route shows up on the first request instead of the first
    matching one.
    """

    def __init__(self, pattern: str, callback: Callback, arity: int):
        name = getattr(callback, "__qualname__", repr(callback))
        super().__init__(
            f"Route {pattern!r} captures {arity} argument(s) "
            f"but callback {name} cannot accept them"
        )
        self.pattern = pattern
        self.callback = callback
        self.arity = arity


class Router:
    """
    Routes for one HTTP method.

    The object form of route()/route_chain(). Handy when the request is
    passed around explicitly instead of read from the process-wide one:

        ctx = RequestContext.from_environ(environ)
        get = Router("GET", request=ctx)

        get.register("/users/{id}", show_user)
        get.register_chain("/users/{id}/avatar", [load_user, send_avatar])
    """

    def __init__(self, method: str, request: Optional[RequestContext] = None):
        self.method = method.upper()
        self._request = request

    def __repr__(self) -> str:
        return f"Router({self.method!r})"

    @property
    def request(self) -> RequestContext:
        """The request being routed (process-wide one unless injected)."""
        return self._request if self._request is not None else current_request()

    def register(self, pattern: str, callback: Callback) -> RouteOutcome:
        """
        Run ``callback`` if the request's method and URI match.

        Args:
            pattern: Route pattern, e.g. "/users/{id}"
            callback: Called with one positional string per placeholder

        Returns:
            The RouteOutcome for this declaration
        """
        return self.register_chain(pattern, [callback])

    def register_chain(self, pattern: str, callbacks: Sequence[Callback]) -> RouteOutcome:
        """
        Run every callback, in order, if the request's method and URI match.

        All callbacks receive the same captures. An exception from one of
        them propagates and the rest are skipped.
        """
        callbacks = list(callbacks)
        arity = len(placeholder_names(pattern))
        for callback in callbacks:
            _check_arity(pattern, callback, arity)

        request = self.request
        if request.method != self.method:
            return RouteOutcome.METHOD_MISMATCH

        match = match_path(pattern, request.uri)
        if not match:
            return RouteOutcome.NOT_MATCHED

        logger.debug("Dispatching %s %s to %s %s", request.method, request.uri, pattern, list(match.args))

        for callback in callbacks:
            try:
                callback(*match.args)
            except Exception:
                logger.debug(
                    "Route callback %s failed for %s %s",
                    getattr(callback, "__qualname__", repr(callback)),
                    self.method,
                    pattern,
                )
                raise

        return RouteOutcome.DISPATCHED


def route(method: str) -> Callable[..., RouteOutcome]:
    """
    Return a registrar for ``method``.

    The registrar takes ``(pattern, callback)`` and calls the callback
    with the path captures when method and pattern both match.

    Example:
        get = route("GET")
        get("/users/{id}", lambda user_id: show(user_id))
    """
    def registrar(
        pattern: str,
        callback: Callback,
        request: Optional[RequestContext] = None,
    ) -> RouteOutcome:
        return Router(method, request=request).register(pattern, callback)

    return registrar


def route_chain(method: str) -> Callable[..., RouteOutcome]:
    """
    Return a chain registrar for ``method``.

    Like route(), but the registrar takes a list of callbacks and calls
    each of them with the same captures.
    """
    def registrar(
        pattern: str,
        callbacks: Sequence[Callback],
        request: Optional[RequestContext] = None,
    ) -> RouteOutcome:
        return Router(method, request=request).register_chain(pattern, callbacks)

    return registrar


def _check_arity(pattern: str, callback: Callback, arity: int) -> None:
    if not callable(callback):
        raise RouteDefinitionError(pattern, callback, arity)

    try:
        signature = inspect.signature(callback)
    except (TypeError, ValueError):
        # Some builtins have no introspectable signature
        return

    try:
        signature.bind(*(["_"] * arity))
    except TypeError:
        raise RouteDefinitionError(pattern, callback, arity) from None
