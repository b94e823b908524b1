"""
=============================================================================
CGIROUTE - Route a single HTTP request to plain Python callbacks
=============================================================================

For scripts that handle one request per process (CGI, fcgiwrap, serverless
shims). The script reads the request once, declares its routes top to
bottom, and the first route that answers ends the process.

    cgiroute/
    ├── __init__.py          # This file - package exports
    ├── config.py            # RouterConfig, logging setup
    ├── pipe.py              # pipe(value)(f)(g).value
    └── http/
        ├── request.py       # RequestContext singleton, has/only queries
        ├── matcher.py       # "{param}" patterns → anchored regexes
        ├── router.py        # route(), route_chain(), Router
        ├── response.py      # response(code)(data) → JSON, then exit
        └── status_codes.py  # HTTPStatus

=============================================================================
QUICK START
=============================================================================

    #!/usr/bin/env python3
    from cgiroute import request, response, route, route_chain

    def show_user(user_id):
        response()({"id": user_id})

    def create_user():
        if request().is_missing(["name", "email"]):
            response(422)({"error": "name and email are required"})
        response(201)(request().only(["name", "email"]))

    route("GET")("/users/{id}", show_user)
    route("POST")("/users", create_user)

    response(404)({"error": "not found"})

=============================================================================
"""

from .config import RouterConfig, configure_logging, get_config, set_config
from .pipe import Pipe, pipe
from .http import (
    HTTPStatus,
    JSONResponse,
    PathMatch,
    RequestContext,
    ResponseSent,
    RouteDefinitionError,
    RouteOutcome,
    Router,
    match_path,
    path_args,
    path_matches_uri,
    path_to_regex,
    request,
    response,
    route,
    route_chain,
)

__version__ = "1.0.0"

__all__ = [
    # Configuration
    "RouterConfig",
    "configure_logging",
    "get_config",
    "set_config",

    # Request / response
    "RequestContext",
    "request",
    "response",
    "JSONResponse",
    "ResponseSent",
    "HTTPStatus",

    # Routing
    "route",
    "route_chain",
    "Router",
    "RouteOutcome",
    "RouteDefinitionError",
    "PathMatch",
    "match_path",
    "path_args",
    "path_matches_uri",
    "path_to_regex",

    # Utilities
    "Pipe",
    "pipe",
]
