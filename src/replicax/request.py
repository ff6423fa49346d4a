"""Per-request context built from an ASGI scope."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any
from urllib.parse import parse_qs

from replicax.errors import ReplicaxError
from replicax.routing import normalize_path

if TYPE_CHECKING:
    from replicax._types import Receive, Scope

BODY_METHODS = frozenset({"POST", "PUT", "PATCH"})


class Request:
    """Mutable request state owned by a single dispatch.

    ``body`` holds the parsed JSON payload (``{}`` when absent or malformed)
    and ``params`` is filled in once a route matches.
    """

    __slots__ = ("_receive", "_scope", "body", "method", "params", "path", "raw_body", "state")

    def __init__(self, scope: Scope, receive: Receive) -> None:
        self._scope = scope
        self._receive = receive
        self.method: str = scope["method"]
        self.path = normalize_path(scope["path"])
        self.body: Any = {}
        self.raw_body = b""
        self.params: dict[str, str] = {}
        self.state: dict[str, Any] = {}

    @property
    def raw_path(self) -> str:
        return self._scope["path"]

    @property
    def query_string(self) -> bytes:
        return self._scope.get("query_string", b"")

    @property
    def query_params(self) -> dict[str, list[str]]:
        return parse_qs(self.query_string.decode("latin-1"))

    @property
    def headers(self) -> dict[str, str]:
        """Headers as a lowercase-keyed dict (last value wins for dupes)."""
        return {k.decode("latin-1").lower(): v.decode("latin-1") for k, v in self._scope.get("headers", [])}

    async def load_body(self) -> None:
        """Read and parse the payload of body-bearing methods.

        Other methods never touch ``receive``.
        """
        if self.method not in BODY_METHODS:
            return

        chunks: list[bytes] = []
        while True:
            message = await self._receive()
            if message["type"] == "http.disconnect":
                raise ReplicaxError("Client disconnected before the request body was complete")
            chunk = message.get("body", b"")
            if chunk:
                chunks.append(chunk)
            if not message.get("more_body", False):
                break
        self.raw_body = b"".join(chunks)

        try:
            self.body = json.loads(self.raw_body)
        except ValueError:
            self.body = {}

    def __repr__(self) -> str:
        return f"Request({self.method!r}, {self.path!r})"
