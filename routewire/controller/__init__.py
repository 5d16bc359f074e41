"""
routewire controllers - metadata, decorators and the route compiler.

Controllers are plain classes. Their routing intent is recorded in a
MetadataRegistry (by the decorators or an explicit ``register`` call),
their instances come from the DI container, and the compiler turns both
into handler chains on a Router.
"""

from .metadata import (
    ControllerMetadata,
    MethodMetadata,
    ParameterMetadata,
    MetadataRegistry,
    default_registry,
)
from .decorators import (
    Binding,
    RouteDecorator,
    controller,
    bind,
    http_get,
    http_post,
    http_put,
    http_patch,
    http_delete,
    http_head,
    http_options,
    http_all,
    request,
    response,
    next_function,
    request_param,
    query_param,
    request_body,
    request_headers,
    cookies,
)
from .resolver import MiddlewareResolver, Resolved, Raw
from .params import get_field, extract_parameters
from .dispatcher import (
    DispatcherFactory,
    Immediate,
    Pending,
    Empty,
    is_empty,
    reconcile,
    request_container,
)
from .compiler import RouteCompiler, CompiledRoute, CompiledController, RouteTable
from .router import ControllerRouter

__all__ = [
    # Metadata
    "ControllerMetadata",
    "MethodMetadata",
    "ParameterMetadata",
    "MetadataRegistry",
    "default_registry",
    # Decorators
    "Binding",
    "RouteDecorator",
    "controller",
    "bind",
    "http_get",
    "http_post",
    "http_put",
    "http_patch",
    "http_delete",
    "http_head",
    "http_options",
    "http_all",
    "request",
    "response",
    "next_function",
    "request_param",
    "query_param",
    "request_body",
    "request_headers",
    "cookies",
    # Resolution & dispatch
    "MiddlewareResolver",
    "Resolved",
    "Raw",
    "get_field",
    "extract_parameters",
    "DispatcherFactory",
    "request_container",
    "Immediate",
    "Pending",
    "Empty",
    "is_empty",
    "reconcile",
    # Compilation
    "RouteCompiler",
    "CompiledRoute",
    "CompiledController",
    "RouteTable",
    "ControllerRouter",
]
