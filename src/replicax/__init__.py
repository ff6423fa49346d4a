"""Minimal ASGI request routing and middleware dispatch."""

__version__ = "0.1.0"

from replicax.app import Replicax, create_app
from replicax.config import ListenOptions
from replicax.errors import ChainError, ReplicaxError
from replicax.middleware import Continuation, MiddlewareChain
from replicax.request import Request
from replicax.response import Response
from replicax.routing import PathMatcher, Route, Router, compile_path, normalize_path

__all__ = [
    "ChainError",
    "Continuation",
    "ListenOptions",
    "MiddlewareChain",
    "PathMatcher",
    "Replicax",
    "ReplicaxError",
    "Request",
    "Response",
    "Route",
    "Router",
    "compile_path",
    "create_app",
    "normalize_path",
]
