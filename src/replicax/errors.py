"""Exceptions raised by replicax."""


class ReplicaxError(Exception):
    """Base class for framework errors."""


class ChainError(ReplicaxError, RuntimeError):
    """A continuation was invoked more than once or after its entry returned."""
