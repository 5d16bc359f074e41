"""
Controller Decorators

Method decorators attach routing intent to functions while the class
body executes; the ``@controller`` class decorator then collects it
and writes literal descriptors into a :class:`MetadataRegistry`.

Example:
    @controller("/items", "auth")
    class ItemsController:
        @http_get("/:id")
        @bind(request_param("id"))
        def get_one(self, item_id, req, res, next):
            return {"id": item_id}
"""

from __future__ import annotations

from typing import Any, Callable, List, NamedTuple, Optional, TypeVar, Union

from ..constants import ParameterType
from .metadata import (
    ControllerMetadata,
    MetadataRegistry,
    MethodMetadata,
    ParameterMetadata,
    default_registry,
)


F = TypeVar("F", bound=Callable[..., Any])

ROUTES_ATTR = "__routewire_routes__"
BINDINGS_ATTR = "__routewire_bindings__"


class Binding(NamedTuple):
    """A parameter source waiting for its position (assigned by ``@bind``)."""
    type: ParameterType
    name: Optional[str] = None


# ============================================================================
# Method decorators
# ============================================================================

class RouteDecorator:
    """
    Base route decorator.

    Records ``(verb, path, middleware)`` on the function; stacked
    decorators keep their top-to-bottom order.
    """

    method: str = "all"

    def __init__(self, path: str = "", *middleware: Any):
        self.path = path
        self.middleware = middleware

    def __call__(self, func: F) -> F:
        routes = getattr(func, ROUTES_ATTR, None)
        if routes is None:
            routes = []
            setattr(func, ROUTES_ATTR, routes)
        # Decorators apply bottom-up
        routes.insert(0, (self.method, self.path, self.middleware))
        return func


class http_get(RouteDecorator):
    method = "get"


class http_post(RouteDecorator):
    method = "post"


class http_put(RouteDecorator):
    method = "put"


class http_patch(RouteDecorator):
    method = "patch"


class http_delete(RouteDecorator):
    method = "delete"


class http_head(RouteDecorator):
    method = "head"


class http_options(RouteDecorator):
    method = "options"


class http_all(RouteDecorator):
    method = "all"


# ============================================================================
# Parameter bindings
# ============================================================================

def request(name: Optional[str] = None) -> Binding:
    return Binding(ParameterType.REQUEST, name)


def response() -> Binding:
    return Binding(ParameterType.RESPONSE)


def next_function() -> Binding:
    return Binding(ParameterType.NEXT)


def request_param(name: Optional[str] = None) -> Binding:
    """Bind a path parameter (``request.params``)."""
    return Binding(ParameterType.PARAMS, name)


def query_param(name: Optional[str] = None) -> Binding:
    """Bind a query-string value; a missing name yields None."""
    return Binding(ParameterType.QUERY, name)


def request_body(name: Optional[str] = None) -> Binding:
    return Binding(ParameterType.BODY, name)


def request_headers(name: Optional[str] = None) -> Binding:
    return Binding(ParameterType.HEADERS, name)


def cookies(name: Optional[str] = None) -> Binding:
    return Binding(ParameterType.COOKIES, name)


def bind(*bindings: Union[Binding, ParameterMetadata]) -> Callable[[F], F]:
    """
    Declare the leading positional arguments of a controller method.

    A :class:`Binding` takes the index of its position in the call; a
    :class:`ParameterMetadata` keeps its own index.
    """
    params: List[ParameterMetadata] = []
    for index, item in enumerate(bindings):
        if isinstance(item, ParameterMetadata):
            params.append(item)
        elif isinstance(item, Binding):
            params.append(ParameterMetadata(index, item.type, item.name))
        else:
            raise TypeError(f"bind() expects Binding or ParameterMetadata, got {item!r}")

    def decorator(func: F) -> F:
        setattr(func, BINDINGS_ATTR, getattr(func, BINDINGS_ATTR, []) + params)
        return func

    return decorator


# ============================================================================
# Class decorator
# ============================================================================

def controller(
    path: str = "",
    *middleware: Any,
    name: Optional[str] = None,
    registry: Optional[MetadataRegistry] = None,
) -> Callable[[type], type]:
    """
    Register a class as a controller.

    Collects every method decorated with a route decorator (including
    inherited ones, in definition order) into ``registry``.
    """
    target_registry = registry if registry is not None else default_registry

    def decorator(cls: type) -> type:
        members = {}
        for klass in reversed(cls.__mro__):
            if klass is object:
                continue
            members.update(vars(klass))

        methods: List[MethodMetadata] = []
        parameters = {}
        for key, attr in members.items():
            func = getattr(attr, "__func__", attr)
            routes = getattr(func, ROUTES_ATTR, None)
            if not routes:
                continue
            for verb, suffix, method_middleware in routes:
                methods.append(MethodMetadata(verb, suffix, key, method_middleware))
            bindings = getattr(func, BINDINGS_ATTR, None)
            if bindings:
                parameters[key] = list(bindings)

        target_registry.register(
            ControllerMetadata(cls, path, middleware, name),
            methods=methods,
            parameters=parameters,
        )
        return cls

    return decorator
