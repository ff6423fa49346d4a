"""Handler signature validation for strict mode."""

from __future__ import annotations

import inspect
from typing import Any

_ARGS = (object(), object(), object())


def validate_handler_signature(func: Any, path: str, method: str) -> None:
    """Check that *func* can be called as ``func(request, response, next)``.

    Raises :class:`TypeError` with an actionable message at registration
    time instead of failing on the first request.
    """
    name = getattr(func, "__name__", repr(func))

    # --- Rule 1: Must be callable ---
    if not callable(func):
        raise TypeError(
            f"\n\nStrict-mode violation in handler {name!r} "
            f"[{method} {path}]\n"
            f"  Problem: Object of type {type(func).__name__} is not callable.\n"
            f"  Fix:     Pass a function taking (request, response, next).\n"
        )

    try:
        sig = inspect.signature(func)
    except (TypeError, ValueError):
        # Builtins without introspectable signatures are trusted.
        return

    # --- Rule 2: Must accept exactly the three positional arguments ---
    try:
        sig.bind(*_ARGS)
    except TypeError as exc:
        raise TypeError(
            f"\n\nStrict-mode violation in handler {name!r} "
            f"[{method} {path}]\n"
            f"  Current: {name}{sig}\n"
            f"  Problem: Handler cannot be called as {name}(request, response, next): {exc}.\n"
            f"  Fix:     Declare it as def {name}(request, response, next): ...\n"
        ) from None
