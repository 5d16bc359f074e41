"""
Route Compiler - turns registered controllers into an ordered route table.

For every controller in the container (in registration order) the
compiler reads its metadata from the registry, resolves middleware once
per controller and per method, and builds one dispatcher per routed
method. The resulting table is immutable; registering it into a router
preserves its order, which is the routing priority.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Tuple
import logging

from ..constants import CONTROLLER
from ..di import Container
from ..faults import RouteCompileFault
from ..middleware import handler_name
from ..routing import Router
from .dispatcher import DispatcherFactory
from .metadata import ControllerMetadata, MetadataRegistry, default_registry
from .resolver import MiddlewareResolver


logger = logging.getLogger("routewire.controller.compiler")


@dataclass(frozen=True)
class CompiledRoute:
    """A compiled controller route: verb, full path and its handler chain."""

    method: str
    path: str
    controller: str
    key: str
    handlers: Tuple[Callable, ...] = field(default_factory=tuple)

    @property
    def dispatcher(self) -> Callable:
        return self.handlers[-1]

    @property
    def middleware(self) -> Tuple[Callable, ...]:
        return self.handlers[:-1]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "method": self.method.upper(),
            "path": self.path,
            "handler": f"{self.controller}.{self.key}",
            "middleware": [handler_name(h) for h in self.middleware],
        }


@dataclass(frozen=True)
class CompiledController:
    """All routes of one controller, in metadata order."""

    metadata: ControllerMetadata
    routes: Tuple[CompiledRoute, ...]

    @property
    def identity(self) -> str:
        return self.metadata.identity


class RouteTable:
    """Immutable, ordered collection of compiled routes."""

    __slots__ = ("_controllers", "_routes")

    def __init__(self, controllers: Iterable[CompiledController] = ()):
        self._controllers: Tuple[CompiledController, ...] = tuple(controllers)
        self._routes: Tuple[CompiledRoute, ...] = tuple(
            route for compiled in self._controllers for route in compiled.routes
        )

    @property
    def controllers(self) -> Tuple[CompiledController, ...]:
        return self._controllers

    @property
    def routes(self) -> Tuple[CompiledRoute, ...]:
        return self._routes

    def __iter__(self) -> Iterator[CompiledRoute]:
        return iter(self._routes)

    def __len__(self) -> int:
        return len(self._routes)

    def __getitem__(self, index: int) -> CompiledRoute:
        return self._routes[index]

    def describe(self, prefix: str = "") -> List[str]:
        """One line per route: ``METHOD  path  Controller.key``."""
        if not self._routes:
            return []
        prefix = prefix.rstrip("/")
        width = max(len(prefix + route.path) for route in self._routes)
        return [
            f"{route.method.upper():<8}{(prefix + route.path):<{width}}  {route.controller}.{route.key}"
            for route in self._routes
        ]

    def __repr__(self) -> str:
        return f"<RouteTable controllers={len(self._controllers)} routes={len(self._routes)}>"


class RouteCompiler:
    """
    Compiles controllers resolved from a container.

    Example:
        compiler = RouteCompiler(container)
        table = compiler.register(router)
    """

    def __init__(
        self,
        container: Container,
        registry: Optional[MetadataRegistry] = None,
        *,
        case_sensitive: bool = False,
        strict: bool = False,
    ):
        self.container = container
        self.registry = registry if registry is not None else default_registry
        self.resolver = MiddlewareResolver(container)
        self.dispatchers = DispatcherFactory(container)
        self.case_sensitive = case_sensitive
        self.strict = strict

    def compile(self, controllers: Optional[Iterable[Any]] = None) -> RouteTable:
        """
        Compile controller instances (default: every controller bound in the container).

        Controllers without controller or method metadata are skipped.
        """
        if controllers is None:
            controllers = self.container.get_all(CONTROLLER)

        compiled: List[CompiledController] = []
        for instance in controllers:
            result = self.compile_controller(instance)
            if result is not None:
                compiled.append(result)

        table = RouteTable(compiled)
        logger.info("Compiled %d routes from %d controllers", len(table), len(compiled))
        return table

    def compile_controller(self, controller: Any) -> Optional[CompiledController]:
        target = type(controller)
        metadata = self.registry.controller_metadata(target)
        methods = self.registry.method_metadata(target)

        if metadata is None or methods is None:
            logger.debug("Skipping %s: no controller or method metadata", target.__name__)
            return None

        parameters = self.registry.parameter_metadata(target)
        controller_middleware = self.resolver.resolve(*metadata.middleware)

        routes: List[CompiledRoute] = []
        for method in methods:
            func = getattr(target, method.key, None)
            if not callable(func):
                raise RouteCompileFault(metadata.identity, method.key)

            dispatcher = self.dispatchers.create(
                metadata.identity,
                method.key,
                parameters.get(method.key, ()),
                func,
            )
            method_middleware = self.resolver.resolve(*method.middleware)

            routes.append(CompiledRoute(
                method=method.method,
                path=f"{metadata.path}{method.path}",
                controller=metadata.identity,
                key=method.key,
                handlers=tuple(controller_middleware + method_middleware + [dispatcher]),
            ))

        return CompiledController(metadata, tuple(routes))

    def register(self, router: Router, table: Optional[RouteTable] = None) -> RouteTable:
        """
        Register a table (compiled now if not given) into ``router``.

        Each controller gets its own sub-router, mounted in table order.
        """
        if table is None:
            table = self.compile()

        for compiled in table.controllers:
            group = Router(case_sensitive=self.case_sensitive, strict=self.strict)
            for route in compiled.routes:
                group.route(route.method, route.path, *route.handlers)
            router.use(group)
            logger.debug("Registered %d routes for %s", len(compiled.routes), compiled.identity)

        return table
