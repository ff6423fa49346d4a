"""URL routing with named path parameters."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from replicax._types import Handler

_PARAM_RE = re.compile(r":([A-Za-z0-9_]+)")


def normalize_path(path: str) -> str:
    """Strip trailing slashes; the empty path becomes ``/``."""
    return path.rstrip("/") or "/"


class PathMatcher:
    """Segment matcher compiled from a pattern such as ``/users/:id``.

    Each segment is either a literal, compared verbatim, or a named capture
    (stored as ``None`` in ``_literals``) matching any non-empty segment.
    """

    __slots__ = ("_literals", "_names", "param_names", "pattern")

    def __init__(self, pattern: str, segments: list[tuple[str, bool]]) -> None:
        self.pattern = pattern
        self._literals: tuple[str | None, ...] = tuple(None if is_param else text for text, is_param in segments)
        self._names: tuple[str | None, ...] = tuple(text if is_param else None for text, is_param in segments)
        self.param_names: tuple[str, ...] = tuple(name for name in self._names if name is not None)

    def match(self, path: str) -> dict[str, str] | None:
        """Return captured params if the normalized *path* matches, else ``None``."""
        parts = path.split("/")
        if len(parts) != len(self._literals):
            return None

        params: dict[str, str] = {}
        for part, literal, name in zip(parts, self._literals, self._names):
            if name is None:
                if part != literal:
                    return None
            elif not part:
                return None
            else:
                params[name] = part
        return params

    def __repr__(self) -> str:
        return f"PathMatcher({self.pattern!r})"


def compile_path(pattern: str) -> PathMatcher:
    """Compile ``/users/:id/posts/:post_id`` into a :class:`PathMatcher`."""
    normalized = normalize_path(pattern)
    segments: list[tuple[str, bool]] = []
    seen: set[str] = set()

    for part in normalized.split("/"):
        m = _PARAM_RE.fullmatch(part)
        if m is None:
            segments.append((part, False))
            continue

        name = m.group(1)
        if name in seen:
            msg = f"Duplicate path parameter {name!r} in {pattern!r}"
            raise ValueError(msg)
        seen.add(name)
        segments.append((name, True))

    return PathMatcher(normalized, segments)


class Route:
    """A single route mapping a method + path pattern to a handler chain."""

    __slots__ = ("handlers", "matcher", "method", "path")

    def __init__(
        self,
        method: str,
        path: str,
        handlers: tuple[Handler, ...],
    ) -> None:
        self.method = method
        self.path = path
        self.handlers = handlers
        self.matcher = compile_path(path)

    def match(self, path: str) -> dict[str, str] | None:
        """Return path params if *path* matches, else ``None``."""
        return self.matcher.match(path)

    def __repr__(self) -> str:
        return f"Route({self.method!r}, {self.path!r})"


class Router:
    """Ordered collection of routes with first-match-wins lookup."""

    __slots__ = ("routes",)

    def __init__(self) -> None:
        self.routes: list[Route] = []

    def add_route(
        self,
        method: str,
        path: str,
        handlers: list[Handler] | tuple[Handler, ...],
    ) -> Route:
        if not handlers:
            msg = f"Route {method} {path!r} needs at least one handler"
            raise ValueError(msg)
        route = Route(method, path, tuple(handlers))
        self.routes.append(route)
        return route

    def match(
        self,
        method: str,
        path: str,
    ) -> tuple[Route, dict[str, str]] | None:
        """Return ``(route, params)`` for the first match, or ``None``.

        *method* is compared exactly, so ``"get"`` never hits a ``GET`` route.
        """
        for route in self.routes:
            if route.method != method:
                continue
            params = route.match(path)
            if params is not None:
                return route, params
        return None
