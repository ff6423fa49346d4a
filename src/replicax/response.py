"""Response construction handle passed to middleware and handlers."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

from pydantic import BaseModel

logger = logging.getLogger("replicax.dispatch")


class Response:
    """Buffered response; finalized by :meth:`json` or :meth:`end`.

    Writes after finalization are ignored with a warning, so the first
    finalized response is the one sent.
    """

    __slots__ = ("_done", "body", "headers", "status_code")

    def __init__(self) -> None:
        self.status_code = 200
        self.headers: dict[str, str] = {}
        self.body = b""
        self._done = asyncio.Event()

    @property
    def finalized(self) -> bool:
        return self._done.is_set()

    def status(self, code: int) -> Response:
        if not self._writable("status"):
            return self
        if isinstance(code, bool) or not isinstance(code, int):
            msg = f"Status code must be an int, got {code!r}"
            raise TypeError(msg)
        self.status_code = code
        return self

    def set_header(self, name: str, value: str) -> Response:
        if not self._writable("set_header"):
            return self
        if not isinstance(name, str) or not isinstance(value, str):
            msg = f"Header name and value must be str, got {name!r}: {value!r}"
            raise TypeError(msg)
        # Must be latin-1 encodable.
        name.encode("latin-1")
        value.encode("latin-1")
        self.headers[name.lower()] = value
        return self

    def json(self, value: Any) -> None:
        """Serialize *value* as JSON and finalize the response."""
        if not self._writable("json"):
            return
        if isinstance(value, BaseModel):
            value = value.model_dump(mode="json")
        # NaN and Infinity raise ValueError.
        body = json.dumps(value, separators=(",", ":"), ensure_ascii=False, allow_nan=False).encode("utf-8")
        self.headers["content-type"] = "application/json"
        self._finish(body)

    def end(self, body: bytes | str = b"") -> None:
        """Finalize the response with a raw body."""
        if not self._writable("end"):
            return
        if isinstance(body, str):
            body = body.encode("utf-8")
        elif not isinstance(body, bytes):
            msg = f"Response body must be bytes or str, got {type(body).__name__}"
            raise TypeError(msg)
        self._finish(body)

    async def wait(self) -> None:
        """Block until some code path finalizes the response."""
        await self._done.wait()

    def start_message(self) -> dict[str, Any]:
        """Build the ASGI ``http.response.start`` message."""
        headers = [
            (k.encode("latin-1"), v.encode("latin-1")) for k, v in self.headers.items() if k != "content-length"
        ]
        headers.append((b"content-length", str(len(self.body)).encode("latin-1")))
        return {"type": "http.response.start", "status": self.status_code, "headers": headers}

    def _finish(self, body: bytes) -> None:
        self.body = body
        self._done.set()

    def _writable(self, operation: str) -> bool:
        if self._done.is_set():
            logger.warning("Ignoring %s() on a response that was already finalized", operation)
            return False
        return True

    def __repr__(self) -> str:
        return f"Response({self.status_code}, finalized={self.finalized})"
