# fieldroute/errors.py
from __future__ import annotations


class FieldRouteError(Exception):
    """Base class for every error raised by the routing core."""


class NotFound(FieldRouteError, LookupError):
    """A well, field, flow station or route id/name did not resolve."""

    def __init__(self, kind: str, key: str):
        self.kind = kind
        self.key = key
        super().__init__(f"{kind} not found: {key}")


class InvalidInput(FieldRouteError, ValueError):
    """Structurally degenerate input (bad coordinates, too few wells, ...)."""


class AmbiguousName(FieldRouteError, LookupError):
    def __init__(self, kind: str, name: str, count: int):
        self.kind = kind
        self.name = name
        self.count = count
        super().__init__(f"{count} {kind}s share the name '{name}'")
