"""
=============================================================================
PATH MATCHING
=============================================================================

Turns route patterns into regexes and tests them against the request URI.

=============================================================================
ROUTE PATTERNS
=============================================================================

1. STATIC PATTERNS: no braces, compared with ==

   Pattern: /health.json
   Matches: /health.json
   Doesn't match: /healthxjson, /health.json?x=1

   No regex is involved, so "." and other metacharacters are literal.

2. PLACEHOLDER PATTERNS: each {name} captures one or more characters

   Pattern: /a/{x}/b/{y}
   Matches: /a/1/b/2 → ["1", "2"]

   Captures are positional, in the order the placeholders appear. The
   names inside the braces are documentation only.

=============================================================================
PATTERN COMPILATION
=============================================================================

    Pattern:  /users/{id}/posts/{post_id}
                      │           │
                      ▼           ▼
    Regex:    ^/users/(.+?)/posts/(.+?)$

Each placeholder is replaced up to its NEAREST closing brace, so two
placeholders never merge into one. The captures are lazy, but the
anchors force the whole URI to match, so a capture can still span a "/"
when nothing else fits:

    /files/{path}   vs   /files/css/site.css   → ["css/site.css"]

The literal text between placeholders is inserted into the regex as-is,
NOT escaped. A "." in a placeholder pattern therefore matches any
character:

    /v{n}.json      vs   /v2xjson              → ["2"]

Static patterns are unaffected because they never reach the regex.

The regex is applied with fullmatch(), not match(). A bare "$" also
matches just before a trailing newline, so "/users/42\n" would otherwise
route to /users/{id} with "42".

=============================================================================
"""

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import List, Optional, Tuple

from .request import RequestContext, request as current_request


# Lazy so "{a}{b}" yields two placeholders, not one spanning "a}{b"
_PLACEHOLDER = re.compile(r"\{(.+?)\}")

_BRACES = re.compile(r"[{}]")


@dataclass(frozen=True)
class PathMatch:
    """
    Outcome of testing a pattern against a URI.

    Truthy only when the pattern matched, so callers can write
    ``if match_path(p, uri): ...`` and still get at ``.args``.

    Example:
        match_path("/users/{id}", "/users/42")
        # PathMatch(matched=True, args=("42",))
    """

    matched: bool
    args: Tuple[str, ...] = ()

    def __bool__(self) -> bool:
        return self.matched


NO_MATCH = PathMatch(matched=False)


def has_placeholders(pattern: str) -> bool:
    """True when the pattern contains a "{" or "}" anywhere."""
    return _BRACES.search(pattern) is not None


def placeholder_names(pattern: str) -> List[str]:
    """Placeholder names in left-to-right order: "/a/{x}/b/{y}" → ["x", "y"]."""
    return _PLACEHOLDER.findall(pattern)


def path_to_regex(pattern: str) -> str:
    """
    Convert a route pattern into an anchored regex source string.

    Example:
        path_to_regex("/path/to/route/{id}")   # "^/path/to/route/(.+?)$"
    """
    return "^" + _PLACEHOLDER.sub("(.+?)", pattern) + "$"


@lru_cache(maxsize=256)
def compile_path(pattern: str) -> "re.Pattern[str]":
    """Compiled form of path_to_regex(), cached per pattern."""
    return re.compile(path_to_regex(pattern))


def match_path(pattern: str, uri: str) -> PathMatch:
    """
    Test ``pattern`` against ``uri`` without touching any request state.

    Patterns without braces are compared for exact equality. Everything
    else goes through the compiled regex.
    """
    if not has_placeholders(pattern):
        return PathMatch(matched=True) if uri == pattern else NO_MATCH

    # fullmatch: "$" alone would also accept a trailing "\n"
    m = compile_path(pattern).fullmatch(uri)
    if m is None:
        return NO_MATCH
    return PathMatch(matched=True, args=m.groups())


def path_args(pattern: str, request: Optional[RequestContext] = None) -> List[str]:
    """
    Return the placeholder captures of ``pattern`` against the request URI.

    An empty list when the pattern does not match. Callers normally
    check path_matches_uri() first.
    """
    return list(match_path(pattern, _uri_of(request)).args)


def path_matches_uri(pattern: str, request: Optional[RequestContext] = None) -> bool:
    """Check whether ``pattern`` matches the request URI."""
    return match_path(pattern, _uri_of(request)).matched


def _uri_of(request: Optional[RequestContext]) -> str:
    return (request if request is not None else current_request()).uri
