"""App-wide middleware chain and the ``next`` continuation.

A middleware is any callable matching::

    def my_mw(request: Request, response: Response, next: Continuation) -> None: ...

It may also be ``async``. Calling ``next()`` hands control to the following
entry once the current one returns; not calling it halts the chain.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from replicax.errors import ChainError

if TYPE_CHECKING:
    from collections.abc import Iterator

    from replicax._types import Handler


class Continuation:
    """Explicit ``next`` cursor handed to a single middleware or handler call."""

    __slots__ = ("_closed", "called")

    def __init__(self) -> None:
        self.called = False
        self._closed = False

    def __call__(self) -> None:
        if self._closed:
            raise ChainError("next() called after the handler returned")
        if self.called:
            raise ChainError("next() called more than once")
        self.called = True

    def close(self) -> None:
        self._closed = True


class MiddlewareChain:
    """Ordered sequence of middleware run for every request before routing."""

    __slots__ = ("_entries",)

    def __init__(self) -> None:
        self._entries: list[Handler] = []

    def use(self, middleware: Handler) -> None:
        self._entries.append(middleware)

    def __iter__(self) -> Iterator[Handler]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)
