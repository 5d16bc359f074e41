"""
Core DI types and the Container.

The container is synchronous: resolving a controller or a middleware
service never suspends the request that asked for it.
"""

from typing import (
    Any,
    Callable,
    Dict,
    List,
    Optional,
    Protocol,
    Type,
    TypeVar,
    runtime_checkable,
)
from dataclasses import dataclass, field
import logging

from .errors import DependencyCycleError, DuplicateProviderError, ProviderNotFoundError
from .scopes import CACHEABLE_SCOPES, ROOT_SCOPES, ServiceScope


T = TypeVar("T")

# Module-level cache: type -> "module.qualname" string
_type_key_cache: Dict[type, str] = {}

logger = logging.getLogger("routewire.di")


@dataclass(frozen=True)
class ProviderMeta:
    """Compact provider metadata."""

    name: str
    token: str
    scope: str
    tags: tuple = field(default_factory=tuple)
    module: str = ""
    qualname: str = ""


class ResolveCtx:
    """
    Context for one resolution operation.

    Tracks the resolution stack for cycle detection and diagnostics.
    """
    __slots__ = ("container", "stack")

    def __init__(self, container: "Container"):
        self.container = container
        self.stack: List[str] = []

    def push(self, key: str) -> None:
        if key in self.stack:
            raise DependencyCycleError(self.stack + [key])
        self.stack.append(key)

    def pop(self) -> None:
        self.stack.pop()

    def resolve(self, token: Any, *, tag: Optional[str] = None, optional: bool = False) -> Any:
        """Resolve a nested dependency within this context."""
        return self.container._resolve(token, tag, optional, self)


@runtime_checkable
class Provider(Protocol):
    """
    Provider protocol - how to instantiate a dependency.
    """

    @property
    def meta(self) -> ProviderMeta:
        ...

    def instantiate(self, ctx: ResolveCtx) -> Any:
        ...


def token_to_key(token: Any) -> str:
    """Convert a type or string token to its registry key."""
    if isinstance(token, str):
        return token
    if isinstance(token, type):
        key = _type_key_cache.get(token)
        if key is None:
            key = f"{token.__module__}.{token.__qualname__}"
            _type_key_cache[token] = key
        return key
    return str(token)


def make_cache_key(token_key: str, tag: Optional[str]) -> str:
    return f"{token_key}#{tag}" if tag else token_key


class Container:
    """
    DI Container - manages providers, instance caches and scopes.

    Providers are stored in registration order; ``get_all`` returns
    instances in that order.

    Example:
        container = Container()
        container.bind(UserRepo, SqlUserRepo, scope="singleton")
        container.bind_controller(UsersController)
        repo = container.get(UserRepo)
    """

    __slots__ = ("_providers", "_tags", "_cache", "_scope", "_parent")

    def __init__(self, scope: str = "app", parent: Optional["Container"] = None):
        self._providers: Dict[str, Provider] = {}  # {cache_key: provider}
        self._tags: Dict[str, List[Optional[str]]] = {}  # {token_key: [tag, ...]}
        self._cache: Dict[str, Any] = {}  # {cache_key: instance}
        self._scope = scope
        self._parent = parent

    @property
    def scope(self) -> str:
        return self._scope

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(self, provider: Provider, tag: Optional[str] = None, token: Any = None) -> None:
        """
        Register a provider.

        Args:
            provider: Provider instance
            tag: Optional tag for disambiguation (the binding "name")
            token: Register under this token instead of ``provider.meta.token``
        """
        token_key = token_to_key(token) if token is not None else provider.meta.token
        key = make_cache_key(token_key, tag)

        existing = self._providers.get(key)
        if existing is not None:
            if existing is provider:
                return
            raise DuplicateProviderError(token_key, tag, existing.meta.name)

        self._providers[key] = provider
        self._tags.setdefault(token_key, []).append(tag)
        logger.debug("Registered provider %s for %s", provider.meta.name, key)

    def bind(
        self,
        token: Any,
        implementation: Optional[type] = None,
        *,
        scope: str = ServiceScope.TRANSIENT,
        tag: Optional[str] = None,
    ) -> None:
        """
        Bind a token to an implementation class.

        Example:
            container.bind(UserRepository, SqlUserRepository)
            container.bind("auth", AuthMiddleware, scope="singleton")
        """
        from .providers import ClassProvider

        if implementation is None:
            if not isinstance(token, type):
                raise TypeError("bind() without an implementation requires a class token")
            implementation = token
        self.register(ClassProvider(implementation, scope=scope), tag=tag, token=token)

    def bind_value(self, token: Any, value: Any, *, tag: Optional[str] = None) -> None:
        """Bind a token to a pre-built value."""
        from .providers import ValueProvider

        self.register(ValueProvider(value, token=token), tag=tag)

    def bind_factory(
        self,
        token: Any,
        factory: Callable[..., Any],
        *,
        scope: str = ServiceScope.TRANSIENT,
        tag: Optional[str] = None,
    ) -> None:
        """Bind a token to a factory function whose annotated parameters are injected."""
        from .providers import FactoryProvider

        self.register(FactoryProvider(factory, scope=scope), tag=tag, token=token)

    def bind_controller(
        self,
        controller_class: type,
        name: Optional[str] = None,
        *,
        scope: str = ServiceScope.TRANSIENT,
    ) -> None:
        """
        Register a controller under the shared controller token.

        The binding name defaults to the class name, which is the identity
        the dispatcher re-resolves on every request.
        """
        from ..constants import CONTROLLER

        self.bind(CONTROLLER, controller_class, scope=scope, tag=name or controller_class.__name__)

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def get(self, token: Type[T] | str, *, tag: Optional[str] = None, optional: bool = False) -> T:
        """
        Resolve a dependency.

        Raises:
            ProviderNotFoundError: If provider not found and not optional
        """
        return self._resolve(token, tag, optional, ResolveCtx(self))

    resolve = get

    def get_named(self, token: Type[T] | str, name: str) -> T:
        """Resolve the provider bound to ``token`` under ``name``."""
        return self.get(token, tag=name)

    def get_all(self, token: Type[T] | str) -> List[T]:
        """
        Resolve every provider bound to ``token``, in registration order.

        Returns an empty list when nothing is bound.
        """
        token_key = token_to_key(token)
        return [self.get(token_key, tag=tag) for tag in self._all_tags(token_key)]

    def is_registered(self, token: Any, tag: Optional[str] = None) -> bool:
        """Check if a provider is registered for the token."""
        try:
            token_key = token_to_key(token)
        except Exception:
            return False
        return self._lookup_provider(token_key, tag) is not None

    def _resolve(self, token: Any, tag: Optional[str], optional: bool, ctx: ResolveCtx) -> Any:
        token_key = token_to_key(token)
        cache_key = make_cache_key(token_key, tag)

        if cache_key in self._cache:
            return self._cache[cache_key]

        provider = self._lookup_provider(token_key, tag)
        if provider is None:
            if optional:
                return None
            self._raise_not_found(token_key, tag)

        scope = provider.meta.scope
        if self._parent is not None and scope in ROOT_SCOPES:
            return self._parent._resolve(token_key, tag, optional, ctx)

        ctx.push(cache_key)
        try:
            instance = provider.instantiate(ctx)
        finally:
            ctx.pop()

        if scope in CACHEABLE_SCOPES:
            self._cache[cache_key] = instance
        return instance

    def _all_tags(self, token_key: str) -> List[Optional[str]]:
        tags: List[Optional[str]] = []
        if self._parent is not None:
            tags.extend(self._parent._all_tags(token_key))
        tags.extend(self._tags.get(token_key, ()))
        return tags

    def _lookup_provider(self, token_key: str, tag: Optional[str]) -> Optional[Provider]:
        provider = self._providers.get(make_cache_key(token_key, tag))
        if provider is None and self._parent is not None:
            return self._parent._lookup_provider(token_key, tag)
        return provider

    def _raise_not_found(self, token: str, tag: Optional[str]) -> None:
        candidates = [key for key in self._providers if token in key]
        raise ProviderNotFoundError(token=token, tag=tag, candidates=candidates)

    # ------------------------------------------------------------------
    # Scopes
    # ------------------------------------------------------------------

    def create_request_scope(self) -> "Container":
        """
        Create a request-scoped child container.

        Singleton/app providers still resolve (and cache) on the root;
        request-scoped providers cache on the child.
        """
        return Container(scope=ServiceScope.REQUEST.value, parent=self)

    def __repr__(self) -> str:
        return f"<Container scope={self._scope} providers={len(self._providers)}>"
