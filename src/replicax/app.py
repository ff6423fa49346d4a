"""Replicax ASGI application: routing plus middleware dispatch."""

from __future__ import annotations

import asyncio
import inspect
import logging
import traceback
from typing import TYPE_CHECKING, Any

from replicax.config import ListenOptions
from replicax.middleware import Continuation, MiddlewareChain
from replicax.request import Request
from replicax.response import Response
from replicax.routing import Route, Router
from replicax.validation import validate_handler_signature

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from replicax._types import Handler, Receive, Scope, Send

logger = logging.getLogger("replicax.dispatch")


class Replicax:
    """ASGI 3.0 web application.

    Every request goes through the same stages: the body is parsed, the
    app-wide middleware runs in registration order, the route table is
    consulted, and the matched route's handlers run in registration order.
    Each middleware and handler is called as ``fn(request, response, next)``
    and keeps the pipeline going only by calling ``next()``.

    Parameters
    ----------
    strict:
        When ``True``, middleware and handler signatures are validated at
        registration time.
    debug:
        When ``True``, handler 500 responses include the full traceback.
    request_timeout:
        Per-request deadline in seconds.  ``None`` waits indefinitely for a
        response to be finalized.
    """

    def __init__(
        self,
        *,
        strict: bool = False,
        debug: bool = False,
        request_timeout: float | None = None,
    ) -> None:
        self.router = Router()
        self.middleware = MiddlewareChain()
        self.strict = strict
        self.debug = debug
        self.request_timeout = request_timeout

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def use(self, middleware: Handler) -> None:
        """Append an app-wide middleware, run for every request before routing."""
        if self.strict:
            validate_handler_signature(middleware, "*", "use")
        self.middleware.use(middleware)

    def route(self, method: str, path: str, *handlers: Handler) -> Any:
        """Register *handlers* for ``method path``.

        Without handlers, returns a decorator registering the decorated
        function as the route's only handler.
        """
        if handlers:
            return self._add_route(method, path, handlers)

        def decorator(handler: Handler) -> Handler:
            self._add_route(method, path, (handler,))
            return handler

        return decorator

    def _add_route(self, method: str, path: str, handlers: tuple[Handler, ...]) -> Route:
        if self.strict:
            for handler in handlers:
                validate_handler_signature(handler, path, method)
        return self.router.add_route(method, path, handlers)

    def get(self, path: str, *handlers: Handler) -> Any:
        return self.route("GET", path, *handlers)

    def post(self, path: str, *handlers: Handler) -> Any:
        return self.route("POST", path, *handlers)

    def put(self, path: str, *handlers: Handler) -> Any:
        return self.route("PUT", path, *handlers)

    def delete(self, path: str, *handlers: Handler) -> Any:
        return self.route("DELETE", path, *handlers)

    def patch(self, path: str, *handlers: Handler) -> Any:
        return self.route("PATCH", path, *handlers)

    def options(self, path: str, *handlers: Handler) -> Any:
        return self.route("OPTIONS", path, *handlers)

    def head(self, path: str, *handlers: Handler) -> Any:
        return self.route("HEAD", path, *handlers)

    # ------------------------------------------------------------------
    # ASGI interface
    # ------------------------------------------------------------------

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "lifespan":
            await _handle_lifespan(receive, send)
            return
        if scope["type"] != "http":
            return

        response = Response()
        deadline = asyncio.timeout(self.request_timeout)
        try:
            async with deadline:
                await self._dispatch(scope, receive, response)
                await response.wait()
        except Exception as exc:
            if isinstance(exc, TimeoutError) and deadline.expired():
                logger.warning("%s %s timed out after %ss", scope["method"], scope["path"], self.request_timeout)
                if not response.finalized:
                    response.status(504).json({"error": "Request timed out"})
            else:
                logger.exception("Unhandled error while serving %s %s", scope.get("method"), scope.get("path"))
                if not response.finalized:
                    response.status(500).json({"error": "Server error", "message": str(exc)})

        await _send_response(response, send)

    async def _dispatch(self, scope: Scope, receive: Receive, response: Response) -> None:
        request = Request(scope, receive)
        await request.load_body()

        # Middleware errors are not contained here; they reach __call__.
        if not await _run_chain(self.middleware, request, response):
            return

        result = self.router.match(request.method, request.path)
        if result is None:
            logger.debug("404 %s %s", request.method, request.path)
            response.status(404).json({"error": "Route not found"})
            return

        route, request.params = result
        try:
            await _run_chain(route.handlers, request, response)
        except Exception:
            logger.exception("Handler error in %s %s", route.method, route.path)
            if response.finalized:
                return
            body: dict[str, Any] = {"error": "Internal Server Error"}
            if self.debug:
                body["traceback"] = traceback.format_exc()
            response.status(500).json(body)

    # ------------------------------------------------------------------
    # Server
    # ------------------------------------------------------------------

    def listen(
        self,
        port: int,
        on_ready: Callable[[], Any] | None = None,
        options: ListenOptions | dict[str, Any] | None = None,
    ) -> None:
        """Serve this app with uvicorn; blocks until the server stops.

        *on_ready* is called once the listening socket is bound.  Pass
        ``options={"https": True, "cert_file": ..., "key_file": ...}`` for TLS.
        """
        from replicax._server import serve_app

        if not isinstance(options, ListenOptions):
            options = ListenOptions.model_validate(options or {})
        serve_app(self, port, options, on_ready)

    def __repr__(self) -> str:
        return f"Replicax(routes={len(self.router.routes)}, middleware={len(self.middleware)})"


# ------------------------------------------------------------------
# Module-level helpers
# ------------------------------------------------------------------


async def _run_chain(entries: Iterable[Handler], request: Request, response: Response) -> bool:
    """Run *entries* in order until one returns without calling ``next()``.

    Returns ``True`` when every entry handed control on.
    """
    for entry in entries:
        proceed = Continuation()
        try:
            result = entry(request, response, proceed)
            if inspect.isawaitable(result):
                await result
        finally:
            proceed.close()
        if not proceed.called:
            return False
    return True


async def _send_response(response: Response, send: Send) -> None:
    try:
        start = response.start_message()
    except (AttributeError, TypeError, UnicodeEncodeError) as exc:
        logger.exception("Cannot encode response headers")
        response = Response()
        response.status(500).json({"error": "Server error", "message": str(exc)})
        start = response.start_message()
    await send(start)
    await send({"type": "http.response.body", "body": response.body})


async def _handle_lifespan(receive: Receive, send: Send) -> None:
    """Minimal lifespan responder — accept startup/shutdown with no-ops."""
    while True:
        message = await receive()
        if message["type"] == "lifespan.startup":
            await send({"type": "lifespan.startup.complete"})
        elif message["type"] == "lifespan.shutdown":
            await send({"type": "lifespan.shutdown.complete"})
            return


def create_app(**kwargs: Any) -> Replicax:
    """Create a new, independent :class:`Replicax` application."""
    return Replicax(**kwargs)
