"""
pytest configuration and fixtures.
"""

import io
import json
from typing import Any, Callable, Dict
import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from cgiroute import RequestContext, set_config


@pytest.fixture(autouse=True)
def fresh_process():
    """Each test behaves like a new CGI process: no memoized request or config."""
    RequestContext.reset()
    set_config(None)
    yield
    RequestContext.reset()
    set_config(None)


@pytest.fixture
def make_environ() -> Callable[..., Dict[str, Any]]:
    """Factory for CGI environ dicts; ``body`` may be bytes, str or JSON data."""

    def _make(
        method: str = "GET",
        uri: str = "/",
        body: Any = None,
        wsgi: bool = False,
    ) -> Dict[str, Any]:
        if body is None:
            raw = b""
        elif isinstance(body, bytes):
            raw = body
        elif isinstance(body, str):
            raw = body.encode("utf-8")
        else:
            raw = json.dumps(body).encode("utf-8")

        environ: Dict[str, Any] = {
            "REQUEST_METHOD": method,
            "CONTENT_LENGTH": str(len(raw)) if raw else "",
        }
        if wsgi:
            path, _, query = uri.partition("?")
            environ["PATH_INFO"] = path
            environ["QUERY_STRING"] = query
            environ["wsgi.input"] = io.BytesIO(raw)
        else:
            environ["REQUEST_URI"] = uri
            environ["_stdin"] = io.BytesIO(raw)
        return environ

    return _make


@pytest.fixture
def make_request(make_environ) -> Callable[..., RequestContext]:
    """Build a RequestContext the way a CGI script would see it."""

    def _make(method: str = "GET", uri: str = "/", body: Any = None) -> RequestContext:
        environ = make_environ(method, uri, body)
        return RequestContext.from_environ(environ, environ.pop("_stdin"))

    return _make


@pytest.fixture
def cgi_process(monkeypatch, make_environ) -> Callable[..., None]:
    """
    Point os.environ and stdin at a fake request so that the lazy
    RequestContext.instance() picks it up.
    """

    def _setup(method: str = "GET", uri: str = "/", body: Any = None) -> None:
        environ = make_environ(method, uri, body)
        stdin = environ.pop("_stdin")
        for key, value in environ.items():
            monkeypatch.setenv(key, value)
        monkeypatch.setattr(sys, "stdin", io.TextIOWrapper(stdin))

    return _setup
