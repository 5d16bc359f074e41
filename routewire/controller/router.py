"""
ControllerRouter - wraps a Router and fills it with every controller
route found in a container.
"""

from __future__ import annotations

from typing import Optional

from ..di import Container
from ..routing import Router
from .compiler import RouteCompiler, RouteTable
from .metadata import MetadataRegistry


class ControllerRouter:
    """
    Applies all controller routes to a router.

    Example:
        router = ControllerRouter(container).build()
        app.use("/api", router)
    """

    def __init__(
        self,
        container: Container,
        router: Optional[Router] = None,
        registry: Optional[MetadataRegistry] = None,
    ):
        self.container = container
        self.router = router if router is not None else Router()
        self.compiler = RouteCompiler(
            container,
            registry,
            case_sensitive=self.router.case_sensitive,
            strict=self.router.strict,
        )
        self.table: Optional[RouteTable] = None

    def build(self) -> Router:
        """Compile and register controller routes, returning the wrapped router."""
        self.table = self.compiler.register(self.router)
        return self.router
