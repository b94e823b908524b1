"""
Value pipelines.

    pipe(10)(lambda x: x * 2)(lambda x: x + 1).value   # 21

Each call applies a function to the held value and hands back the same
pipe, so a whole transformation reads left to right in one expression.
"""

from typing import Any, Callable


class Pipe:
    """
    Holds a value and replaces it with ``fn(value)`` on every call.

    A pipe is meant to live for one expression. If a function raises, the
    exception propagates and the pipe keeps the last value that was
    successfully produced.
    """

    __slots__ = ("value",)

    def __init__(self, value: Any):
        self.value = value

    def __call__(self, fn: Callable[[Any], Any]) -> "Pipe":
        if not callable(fn):
            raise TypeError(f"pipe step must be callable, got {type(fn).__name__}")
        self.value = fn(self.value)
        return self

    def __repr__(self) -> str:
        return f"Pipe({self.value!r})"


def pipe(value: Any) -> Pipe:
    """Start a pipe on ``value``."""
    return Pipe(value)
