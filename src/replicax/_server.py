from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, Any

import uvicorn

if TYPE_CHECKING:
    import socket
    from collections.abc import Callable

    from replicax._types import ASGIApp
    from replicax.config import ListenOptions

logger = logging.getLogger("replicax.server")


def serve(
    target: str,
    *,
    host: str = "127.0.0.1",
    port: int = 8000,
    dev: bool = False,
    reload: bool | None = None,
    workers: int = 1,
    log_level: str = "info",
    ssl_certfile: str | None = None,
    ssl_keyfile: str | None = None,
    uvicorn_kwargs: dict[str, Any] | None = None,
) -> None:
    """Start a uvicorn server for the given *target* import path.

    Parameters
    ----------
    target:
        ``"module:var"`` import path understood by uvicorn.
    dev:
        When ``True``, applies dev-friendly defaults (reload, debug logs,
        access logs) unless explicitly overridden.
    reload:
        Enable auto-reload.  ``None`` means follow *dev* flag.
    """
    # Dev-mode defaults
    access_log = False
    if dev:
        if reload is None:
            reload = True
        log_level = "debug"
        access_log = True

    if reload is None:
        reload = False

    _print_banner(
        "development" if dev else "production",
        [
            ("app", target),
            ("server", f"uvicorn on {_url(host, port, tls=bool(ssl_certfile))}"),
            ("workers", "1 (reload)" if reload else str(workers)),
            ("reload", "enabled" if reload else "disabled"),
            ("tls", ssl_certfile or "off"),
        ],
    )

    kw: dict[str, Any] = uvicorn_kwargs or {}
    uvicorn.run(
        target,
        host=host,
        port=port,
        workers=None if reload else workers,
        reload=reload,
        log_level=log_level,
        access_log=access_log,
        ssl_certfile=ssl_certfile,
        ssl_keyfile=ssl_keyfile,
        **kw,
    )


def serve_app(
    app: ASGIApp,
    port: int,
    options: ListenOptions,
    on_ready: Callable[[], Any] | None = None,
) -> None:
    """Run *app* in this process and call *on_ready* once the socket is bound."""
    config = uvicorn.Config(
        app,
        host=options.host,
        port=port,
        log_level=options.log_level,
        ssl_certfile=str(options.cert_file) if options.https else None,
        ssl_keyfile=str(options.key_file) if options.https else None,
        ssl_keyfile_password=options.key_password if options.https else None,
    )
    ready_name = getattr(on_ready, "__qualname__", repr(on_ready)) if on_ready else "none"
    _print_banner(
        "in-process",
        [
            ("app", repr(app)),
            ("server", f"uvicorn on {_url(options.host, port, tls=options.https)}"),
            ("tls", str(options.cert_file) if options.https else "off"),
            ("on_ready", ready_name),
        ],
    )
    logger.debug("Serving %r on port %d", app, port)
    _ReadyServer(config, on_ready).run()


class _ReadyServer(uvicorn.Server):
    """uvicorn server that reports when it starts accepting connections."""

    def __init__(self, config: uvicorn.Config, on_ready: Callable[[], Any] | None) -> None:
        super().__init__(config)
        self._on_ready = on_ready

    async def startup(self, sockets: list[socket.socket] | None = None) -> None:
        await super().startup(sockets=sockets)
        if self.started and self._on_ready is not None:
            self._on_ready()


# ------------------------------------------------------------------
# Startup banner
# ------------------------------------------------------------------

_CYAN = "\033[36m"
_GREEN = "\033[32m"
_BOLD = "\033[1m"
_RESET = "\033[0m"


def _url(host: str, port: int, *, tls: bool) -> str:
    return f"{'https' if tls else 'http'}://{host}:{port}"


def _print_banner(mode: str, rows: list[tuple[str, str]]) -> None:
    color = sys.stdout.isatty()

    def c(code: str, text: str) -> str:
        return f"{code}{text}{_RESET}" if color else text

    width = max(len(label) for label, _ in rows) + 2
    lines = [f"{c(_BOLD + _CYAN, 'Replicax')}   Starting {mode} server", ""]
    lines.extend(f"{c(_GREEN, label.ljust(width))} {value}" for label, value in rows)
    lines.append("")
    print("\n".join(lines), flush=True)
