"""
HTTP layer: request context, path matching, routing and JSON responses.

    request.py       RequestContext, request()
    matcher.py       path_to_regex, path_args, path_matches_uri, match_path
    router.py        route, route_chain, Router, RouteOutcome
    response.py      response, JSONResponse, ResponseSent
    status_codes.py  HTTPStatus
"""

from .request import RequestContext, request
from .matcher import (
    NO_MATCH,
    PathMatch,
    compile_path,
    has_placeholders,
    match_path,
    path_args,
    path_matches_uri,
    path_to_regex,
    placeholder_names,
)
from .router import Router, RouteDefinitionError, RouteOutcome, route, route_chain
from .response import JSONResponse, ResponseSent, response
from .status_codes import HTTPStatus

__all__ = [
    # Request
    "RequestContext",
    "request",

    # Path matching
    "NO_MATCH",
    "PathMatch",
    "compile_path",
    "has_placeholders",
    "match_path",
    "path_args",
    "path_matches_uri",
    "path_to_regex",
    "placeholder_names",

    # Routing
    "Router",
    "RouteDefinitionError",
    "RouteOutcome",
    "route",
    "route_chain",

    # Responses
    "JSONResponse",
    "ResponseSent",
    "response",

    # Status codes
    "HTTPStatus",
]
