"""
routewire DI - a small synchronous dependency-injection container.

Controllers, middleware services and their collaborators are registered
here; the route compiler enumerates controllers with ``get_all`` and the
dispatcher re-resolves them by name with ``get_named`` on every request.
"""

from .core import Container, Provider, ProviderMeta, ResolveCtx
from .providers import ClassProvider, FactoryProvider, ValueProvider
from .scopes import ServiceScope
from .decorators import Inject, inject
from .errors import (
    DIError,
    ProviderNotFoundError,
    DependencyCycleError,
    DuplicateProviderError,
)

__all__ = [
    "Container",
    "Provider",
    "ProviderMeta",
    "ResolveCtx",
    "ClassProvider",
    "FactoryProvider",
    "ValueProvider",
    "ServiceScope",
    "Inject",
    "inject",
    "DIError",
    "ProviderNotFoundError",
    "DependencyCycleError",
    "DuplicateProviderError",
]
