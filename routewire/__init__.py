"""
routewire - controller-based routing over an express-style ASGI layer.

Controllers are registered in a DI container, their routing intent in a
metadata registry; RoutewireServer compiles both into an Application.
"""

__version__ = "0.1.0"

from .application import Application
from .request import Request
from .response import Response
from .routing import Router, Route
from .middleware import NextFunction, NEXT_ROUTE
from .constants import CONTROLLER, ParameterType
from .di import Container, ServiceScope
from .faults import Fault, FaultDomain, HTTPFault, BadRequestFault, NotFoundFault
from .config import ConfigLoader, ConfigError, RoutingConfig, ServerConfig
from .server import RoutewireServer, configure_logging
from .controller import (
    ControllerMetadata,
    MethodMetadata,
    ParameterMetadata,
    MetadataRegistry,
    ControllerRouter,
    RouteCompiler,
    RouteTable,
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
)

__all__ = [
    "__version__",
    "Application",
    "Request",
    "Response",
    "Router",
    "Route",
    "NextFunction",
    "NEXT_ROUTE",
    "CONTROLLER",
    "ParameterType",
    "Container",
    "ServiceScope",
    "Fault",
    "FaultDomain",
    "HTTPFault",
    "BadRequestFault",
    "NotFoundFault",
    "ConfigLoader",
    "ConfigError",
    "RoutingConfig",
    "ServerConfig",
    "RoutewireServer",
    "configure_logging",
    "ControllerMetadata",
    "MethodMetadata",
    "ParameterMetadata",
    "MetadataRegistry",
    "ControllerRouter",
    "RouteCompiler",
    "RouteTable",
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
]
