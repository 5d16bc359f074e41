"""
Middleware Resolver

Turns middleware identifiers into handlers. An identifier registered in
the container resolves to the container's service; anything else is
used as-is (typically a plain handler function).
"""

from __future__ import annotations

from typing import Any, List, NamedTuple, Union
import logging

from ..di import Container


logger = logging.getLogger("routewire.controller.resolver")


class Resolved(NamedTuple):
    """Identifier found in the container."""
    identifier: Any
    service: Any

    @property
    def handler(self) -> Any:
        return self.service


class Raw(NamedTuple):
    """Identifier not registered; used unchanged."""
    identifier: Any

    @property
    def handler(self) -> Any:
        return self.identifier


Resolution = Union[Resolved, Raw]


class MiddlewareResolver:
    """Resolve middleware identifiers against a container, preserving order."""

    def __init__(self, container: Container):
        self.container = container

    def classify(self, identifier: Any) -> Resolution:
        if self.container.is_registered(identifier):
            return Resolved(identifier, self.container.get(identifier))
        logger.debug("Middleware %r not registered; using it as a handler", identifier)
        return Raw(identifier)

    def resolve(self, *identifiers: Any) -> List[Any]:
        """Return one handler per identifier, in input order. Never raises for unknown identifiers."""
        return [self.classify(identifier).handler for identifier in identifiers]
