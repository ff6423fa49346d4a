"""Replicax command-line interface powered by Typer."""

import importlib
import sys
from pathlib import Path
from types import ModuleType
from typing import Annotated, NoReturn

import typer

app = typer.Typer(name="replicax", add_completion=False, no_args_is_help=True)

_PREFERRED_NAMES = ("app", "application")


# ------------------------------------------------------------------
# Target resolution
# ------------------------------------------------------------------


def _fail(message: str) -> NoReturn:
    typer.echo(f"Error: {message}", err=True)
    raise typer.Exit(1)


def _resolve_cli_target(path: str) -> str:
    """Turn a CLI *path* argument into the ``"module:var"`` string uvicorn imports.

    ``module:var`` is passed through. A ``.py`` file or a dotted module name
    is imported and scanned for a single Replicax instance.
    """
    if ":" in path:
        return path

    if path.endswith(".py"):
        file = Path(path)
        if not file.exists():
            _fail(f"file {path!r} not found.")
        # uvicorn workers import the target by name, so its directory must stay on sys.path.
        parent = str(file.resolve().parent)
        if parent not in sys.path:
            sys.path.insert(0, parent)
        module_name = file.stem
    else:
        module_name = path

    try:
        mod = importlib.import_module(module_name)
    except Exception as exc:
        typer.echo(f"Error importing {module_name!r}: {exc}", err=True)
        raise typer.Exit(1) from exc

    return f"{module_name}:{_pick_app_name(mod, path)}"


def _pick_app_name(mod: ModuleType, path: str) -> str:
    names = _replicax_names(mod)
    if not names:
        _fail(f"no Replicax instance found in {path!r}. Provide an explicit target, e.g. main:app")
    for preferred in _PREFERRED_NAMES:
        if preferred in names:
            return preferred
    if len(names) > 1:
        _fail(f"several Replicax instances in {path!r} ({', '.join(names)}). Pick one, e.g. {mod.__name__}:{names[0]}")
    return names[0]


def _replicax_names(mod: ModuleType) -> list[str]:
    """Public module attributes bound to a ``Replicax`` instance, sorted."""
    from replicax.app import Replicax

    return sorted(name for name, val in vars(mod).items() if not name.startswith("_") and isinstance(val, Replicax))


def _check_tls(cert_file: Path | None, key_file: Path | None) -> None:
    if (cert_file is None) != (key_file is None):
        _fail("--cert-file and --key-file must be given together.")


# ------------------------------------------------------------------
# Commands
# ------------------------------------------------------------------


@app.command()
def dev(
    path: Annotated[str, typer.Argument(help="Python file, module, or module:var target.")] = "main.py",
    host: Annotated[str, typer.Option(help="Bind address.")] = "127.0.0.1",
    port: Annotated[int, typer.Option(help="Bind port.")] = 3000,
    reload: Annotated[bool | None, typer.Option("--reload/--no-reload", help="Auto-reload on code changes.")] = None,
    cert_file: Annotated[Path | None, typer.Option(help="PEM certificate for HTTPS.")] = None,
    key_file: Annotated[Path | None, typer.Option(help="PEM private key for HTTPS.")] = None,
) -> None:
    """Start a development server with auto-reload and debug logging."""
    from replicax._server import serve

    _check_tls(cert_file, key_file)
    target = _resolve_cli_target(path)
    serve(
        target,
        host=host,
        port=port,
        dev=True,
        reload=reload,
        ssl_certfile=str(cert_file) if cert_file else None,
        ssl_keyfile=str(key_file) if key_file else None,
    )


@app.command()
def run(
    path: Annotated[str, typer.Argument(help="Python file, module, or module:var target.")] = "main.py",
    host: Annotated[str, typer.Option(help="Bind address.")] = "127.0.0.1",
    port: Annotated[int, typer.Option(help="Bind port.")] = 3000,
    workers: Annotated[int, typer.Option(help="Number of worker processes.")] = 1,
    cert_file: Annotated[Path | None, typer.Option(help="PEM certificate for HTTPS.")] = None,
    key_file: Annotated[Path | None, typer.Option(help="PEM private key for HTTPS.")] = None,
) -> None:
    """Start a production server."""
    from replicax._server import serve

    _check_tls(cert_file, key_file)
    target = _resolve_cli_target(path)
    serve(
        target,
        host=host,
        port=port,
        workers=workers,
        ssl_certfile=str(cert_file) if cert_file else None,
        ssl_keyfile=str(key_file) if key_file else None,
    )
