"""
Controller Metadata

Read-only descriptors for controllers, their routed methods and the
argument bindings of those methods, plus the registry that stores them.

The registry is the only place the route compiler looks: metadata is
written once at startup (by the decorators or by an explicit
``registry.register(...)`` call) and never read off the classes at
request time.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Type
from dataclasses import dataclass, field
import logging

from ..constants import HTTP_METHODS, ParameterType


logger = logging.getLogger("routewire.controller.metadata")


@dataclass(frozen=True)
class ControllerMetadata:
    """
    Controller-level routing intent.

    Attributes:
        target: Controller class
        path: Base path prepended to every method path (may be empty)
        middleware: Middleware identifiers applied to every method
        name: Binding name in the container (defaults to the class name)
    """
    target: Type
    path: str = ""
    middleware: Tuple[Any, ...] = field(default_factory=tuple)
    name: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "middleware", tuple(self.middleware))

    @property
    def identity(self) -> str:
        return self.name or self.target.__name__


@dataclass(frozen=True)
class MethodMetadata:
    """
    One routed controller method.

    ``path`` is concatenated after the controller path as-is.
    """
    method: str
    path: str
    key: str
    middleware: Tuple[Any, ...] = field(default_factory=tuple)

    def __post_init__(self):
        verb = self.method.lower()
        if verb not in HTTP_METHODS and verb != "all":
            raise ValueError(f"Unsupported HTTP method {self.method!r} on {self.key!r}")
        object.__setattr__(self, "method", verb)
        object.__setattr__(self, "middleware", tuple(self.middleware))


@dataclass(frozen=True)
class ParameterMetadata:
    """
    Binding of a request field to a positional method argument.

    Attributes:
        index: Position in the final argument list
        type: Source of the value (unknown values bind the response)
        name: Optional sub-key inside the source
    """
    index: int
    type: Any
    name: Optional[str] = None

    def __post_init__(self):
        if self.index < 0:
            raise ValueError(f"Parameter index must be >= 0, got {self.index}")
        try:
            object.__setattr__(self, "type", ParameterType(self.type))
        except ValueError:
            pass


class MetadataRegistry:
    """
    Store of controller, method and parameter metadata keyed by controller class.

    Example:
        registry.register(
            ControllerMetadata(ItemsController, "/items"),
            methods=[MethodMetadata("get", "/:id", "get_one")],
            parameters={"get_one": [ParameterMetadata(0, ParameterType.PARAMS, "id")]},
        )
    """

    def __init__(self):
        self._controllers: Dict[type, ControllerMetadata] = {}
        self._methods: Dict[type, List[MethodMetadata]] = {}
        self._parameters: Dict[type, Dict[str, List[ParameterMetadata]]] = {}

    def register(
        self,
        controller: ControllerMetadata,
        methods: Iterable[MethodMetadata] = (),
        parameters: Optional[Mapping[str, Iterable[ParameterMetadata]]] = None,
    ) -> ControllerMetadata:
        """
        Record the full metadata of one controller.

        Methods staged earlier with :meth:`add_methods` come first.

        Raises:
            ValueError: If the class is already registered
        """
        target = controller.target
        if target in self._controllers:
            raise ValueError(f"Controller {target.__name__} is already registered")

        self._controllers[target] = controller
        self._methods.setdefault(target, []).extend(methods)
        self._parameters[target] = {
            key: list(params) for key, params in (parameters or {}).items()
        }
        logger.debug(
            "Registered controller %s with %d methods",
            target.__name__, len(self._methods[target]),
        )
        return controller

    def controller_metadata(self, target: type) -> Optional[ControllerMetadata]:
        return self._controllers.get(target)

    def method_metadata(self, target: type) -> Optional[List[MethodMetadata]]:
        """Method metadata in registration order, or None if never registered."""
        methods = self._methods.get(target)
        return list(methods) if methods is not None else None

    def parameter_metadata(self, target: type) -> Dict[str, List[ParameterMetadata]]:
        return dict(self._parameters.get(target, {}))

    def add_methods(self, target: type, *methods: MethodMetadata) -> None:
        """
        Stage method metadata for a controller not registered yet.

        Raises:
            ValueError: If the class is already registered
        """
        if target in self._controllers:
            raise ValueError(f"Controller {target.__name__} is already registered")
        self._methods.setdefault(target, []).extend(methods)

    def controllers(self) -> List[type]:
        return list(self._controllers)

    def clear(self) -> None:
        self._controllers.clear()
        self._methods.clear()
        self._parameters.clear()

    def __contains__(self, target: type) -> bool:
        return target in self._controllers

    def __len__(self) -> int:
        return len(self._controllers)


# Registry used by the decorators when none is given
default_registry = MetadataRegistry()
