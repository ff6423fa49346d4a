"""ASGI and handler type definitions."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, MutableMapping
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from replicax.middleware import Continuation
    from replicax.request import Request
    from replicax.response import Response

Scope = MutableMapping[str, Any]
Receive = Callable[[], Awaitable[dict[str, Any]]]
Send = Callable[[dict[str, Any]], Awaitable[None]]
ASGIApp = Callable[[Scope, Receive, Send], Awaitable[None]]

# Middleware and route handlers share this shape; the result may be awaitable.
Handler = Callable[["Request", "Response", "Continuation"], Any]
