"""
Unit tests for the request context.
"""

import io

import pytest

from cgiroute import RequestContext, RouterConfig, request, set_config


class TestFromEnviron:
    """Tests for building a context from CGI and WSGI environs."""

    def test_cgi_request(self, make_environ):
        """Test method, URI and JSON body from a CGI environ."""
        environ = make_environ("POST", "/users?notify=1", {"name": "Ada"})
        ctx = RequestContext.from_environ(environ, environ["_stdin"])

        assert ctx.method == "POST"
        assert ctx.uri == "/users?notify=1"
        assert ctx.input == {"name": "Ada"}

    def test_wsgi_request(self, make_environ):
        """Test that WSGI environs rebuild the URI and read wsgi.input."""
        environ = make_environ("PUT", "/users/7?x=1", {"age": 40}, wsgi=True)
        ctx = RequestContext.from_environ(environ)

        assert ctx.method == "PUT"
        assert ctx.uri == "/users/7?x=1"
        assert ctx.input == {"age": 40}

    def test_script_name_prefix(self):
        """Test that SCRIPT_NAME is kept in front of PATH_INFO."""
        ctx = RequestContext.from_environ(
            {"REQUEST_METHOD": "GET", "SCRIPT_NAME": "/api.cgi", "PATH_INFO": "/users"}
        )
        assert ctx.uri == "/api.cgi/users"

    def test_defaults(self):
        """Test an empty environ."""
        ctx = RequestContext.from_environ({})

        assert ctx.method == "GET"
        assert ctx.uri == "/"
        assert ctx.input == {}

    def test_method_is_uppercased(self):
        """Test that the method is normalized."""
        ctx = RequestContext.from_environ({"REQUEST_METHOD": "post"})
        assert ctx.method == "POST"

    def test_path_strips_query(self, make_request):
        """Test the path property."""
        assert make_request(uri="/users/1?verbose=1").path == "/users/1"
        assert make_request(uri="/users/1").path == "/users/1"


class TestBodyParsing:
    """Tests for the permissive JSON body policy."""

    def test_malformed_json_is_empty_input(self, make_request):
        """Test that broken JSON degrades to no input."""
        assert make_request("POST", "/", '{"name": ').input == {}

    def test_empty_body_is_empty_input(self, make_request):
        """Test a request without a body."""
        assert make_request("POST", "/").input == {}

    def test_non_object_json_is_empty_input(self, make_request):
        """Test that a JSON list or scalar never becomes input."""
        assert make_request("POST", "/", [1, 2, 3]).input == {}
        assert make_request("POST", "/", "42").input == {}

    def test_invalid_utf8_is_empty_input(self, make_request):
        """Test undecodable bytes."""
        assert make_request("POST", "/", b"\xff\xfe{}").input == {}

    def test_reads_only_content_length(self):
        """Test that trailing bytes past CONTENT_LENGTH are ignored."""
        body = b'{"a": 1}'
        stream = io.BytesIO(body + b"garbage")
        ctx = RequestContext.from_environ(
            {"REQUEST_METHOD": "POST", "CONTENT_LENGTH": str(len(body))}, stream
        )
        assert ctx.input == {"a": 1}

    def test_missing_content_length_means_no_body(self):
        """Test that the stream is not read without a length."""
        stream = io.BytesIO(b'{"a": 1}')
        ctx = RequestContext.from_environ({"REQUEST_METHOD": "POST"}, stream)

        assert ctx.input == {}
        assert stream.tell() == 0

    def test_invalid_content_length(self):
        """Test a non-numeric CONTENT_LENGTH."""
        ctx = RequestContext.from_environ(
            {"REQUEST_METHOD": "POST", "CONTENT_LENGTH": "abc"}, io.BytesIO(b"{}")
        )
        assert ctx.input == {}

    def test_oversized_body_is_ignored(self, make_request):
        """Test that bodies over max_body_size are not parsed."""
        set_config(RouterConfig(max_body_size=8))
        assert make_request("POST", "/", {"name": "a long value"}).input == {}


class TestInputQueries:
    """Tests for has / is_missing / only."""

    @pytest.fixture
    def ctx(self) -> RequestContext:
        return RequestContext("POST", "/", {"a": 1, "b": 2})

    def test_has_scalar_and_list_agree(self, ctx):
        """Test that a single key and a one-element list behave the same."""
        assert ctx.has("a") is True
        assert ctx.has(["a"]) is True
        assert ctx.has("c") is False
        assert ctx.has(["c"]) is False

    def test_has_requires_every_key(self, ctx):
        """Test multi-key presence."""
        assert ctx.has(["a", "b"]) is True
        assert ctx.has(["a", "c"]) is False
        assert ctx.has(("a", "b")) is True

    def test_has_any_iterable(self, ctx):
        """Test dict views and generators as key collections."""
        assert ctx.has({"a": 0}.keys()) is True
        assert ctx.has(key for key in ["a", "b"]) is True
        assert ctx.has(key for key in ["a", "c"]) is False

    def test_only_any_iterable(self, ctx):
        """Test only() with a dict view and a generator."""
        assert ctx.only({"b": None, "c": None}.keys()) == {"b": 2}
        assert ctx.only(key for key in ["a"]) == {"a": 1}

    def test_has_empty_list(self, ctx):
        """Test that no keys are trivially present."""
        assert ctx.has([]) is True

    def test_is_missing(self, ctx):
        """Test the negation of has."""
        assert ctx.is_missing("c") is True
        assert ctx.is_missing(["a", "c"]) is True
        assert ctx.is_missing(["a", "b"]) is False

    def test_only_drops_absent_keys(self, ctx):
        """Test that only() silently skips keys that are not present."""
        assert ctx.only(["a", "c"]) == {"a": 1}

    def test_only_scalar(self, ctx):
        """Test only() with a single key."""
        assert ctx.only("b") == {"b": 2}

    def test_only_keeps_input_order(self, ctx):
        """Test that the result follows the input order."""
        assert list(ctx.only(["b", "a"])) == ["a", "b"]

    def test_only_returns_a_copy(self, ctx):
        """Test that mutating the result does not touch the input."""
        subset = ctx.only(["a"])
        subset["a"] = 99
        assert ctx.input["a"] == 1


class TestSingleton:
    """Tests for the process-wide request."""

    def test_instance_reads_process_environment(self, cgi_process):
        """Test that instance() reads os.environ and stdin."""
        cgi_process("POST", "/users", {"name": "Ada"})
        ctx = RequestContext.instance()

        assert ctx.method == "POST"
        assert ctx.uri == "/users"
        assert ctx.input == {"name": "Ada"}

    def test_instance_is_memoized(self, cgi_process):
        """Test that later environment changes are not seen."""
        cgi_process("GET", "/first")
        first = RequestContext.instance()

        cgi_process("POST", "/second")
        assert RequestContext.instance() is first
        assert request() is first

    def test_reset_rebuilds(self, cgi_process):
        """Test that reset() forgets the memoized request."""
        cgi_process("GET", "/first")
        first = RequestContext.instance()

        RequestContext.reset()
        cgi_process("GET", "/second")

        assert RequestContext.instance() is not first
        assert request().uri == "/second"

    def test_install(self):
        """Test replacing the process-wide request."""
        ctx = RequestContext("DELETE", "/users/1")
        assert RequestContext.install(ctx) is ctx
        assert request() is ctx

    def test_context_is_frozen(self):
        """Test that fields cannot be reassigned."""
        ctx = RequestContext("GET", "/")
        with pytest.raises(AttributeError):
            ctx.method = "POST"
