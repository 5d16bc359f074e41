"""
Provider implementations for different instantiation strategies.
"""

from typing import Any, Callable, Dict, Optional, get_args, get_origin, get_type_hints
from typing import Annotated
import inspect

from .core import ProviderMeta, ResolveCtx, token_to_key
from .errors import DIError
from .scopes import ServiceScope, normalize_scope


def _parse_annotation(annotation: Any) -> Dict[str, Any]:
    """Parse a type annotation for ``Inject`` metadata."""
    if get_origin(annotation) is Annotated:
        args = get_args(annotation)
        result: Dict[str, Any] = {"token": args[0]}
        for meta in args[1:]:
            if getattr(meta, "_inject_token", None) is not None:
                result["token"] = meta._inject_token
            if hasattr(meta, "_inject_tag"):
                result["tag"] = meta._inject_tag
            if getattr(meta, "_inject_optional", False):
                result["optional"] = True
        return result

    return {"token": annotation}


def _extract_dependencies(func: Callable, owner: str) -> Dict[str, Dict[str, Any]]:
    """
    Extract injectable dependencies from a callable's signature.

    Parameters without annotations are skipped when they have a default,
    and rejected otherwise.
    """
    deps: Dict[str, Dict[str, Any]] = {}

    try:
        sig = inspect.signature(func)
    except (TypeError, ValueError):
        return deps

    try:
        type_hints = get_type_hints(func, include_extras=True)
    except Exception:
        type_hints = {}

    for param_name, param in sig.parameters.items():
        if param_name in ("self", "cls"):
            continue
        if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
            continue

        annotation = type_hints.get(param_name, param.annotation)
        if annotation is inspect.Parameter.empty:
            if param.default is not inspect.Parameter.empty:
                continue
            raise DIError(f"Missing type annotation for parameter '{param_name}' in {owner}")

        dep_info = _parse_annotation(annotation)
        if param.default is not inspect.Parameter.empty:
            dep_info["optional"] = True
        deps[param_name] = dep_info

    return deps


def _resolve_dependencies(deps: Dict[str, Dict[str, Any]], ctx: ResolveCtx) -> Dict[str, Any]:
    resolved = {}
    for dep_name, dep_info in deps.items():
        value = ctx.resolve(
            dep_info["token"],
            tag=dep_info.get("tag"),
            optional=dep_info.get("optional", False),
        )
        if value is None and dep_info.get("optional"):
            continue
        resolved[dep_name] = value
    return resolved


class ClassProvider:
    """
    Provider that instantiates a class by resolving constructor dependencies.
    """

    __slots__ = ("_meta", "_cls", "_dependencies")

    def __init__(self, cls: type, scope: str = ServiceScope.TRANSIENT, tags: tuple = ()):
        self._cls = cls
        if cls.__init__ is object.__init__:
            self._dependencies: Dict[str, Dict[str, Any]] = {}
        else:
            self._dependencies = _extract_dependencies(cls.__init__, f"{cls.__qualname__}.__init__")

        self._meta = ProviderMeta(
            name=cls.__name__,
            token=token_to_key(cls),
            scope=normalize_scope(scope),
            tags=tags,
            module=cls.__module__,
            qualname=cls.__qualname__,
        )

    @property
    def meta(self) -> ProviderMeta:
        return self._meta

    def instantiate(self, ctx: ResolveCtx) -> Any:
        return self._cls(**_resolve_dependencies(self._dependencies, ctx))


class FactoryProvider:
    """
    Provider that calls a factory function to produce instances.

    Only synchronous factories are accepted: resolution never suspends.
    """

    __slots__ = ("_meta", "_factory", "_dependencies")

    def __init__(
        self,
        factory: Callable[..., Any],
        scope: str = ServiceScope.TRANSIENT,
        name: Optional[str] = None,
    ):
        if inspect.iscoroutinefunction(factory):
            raise DIError(f"Factory {factory.__qualname__} is async; container resolution is synchronous")

        self._factory = factory
        self._dependencies = _extract_dependencies(factory, factory.__qualname__)
        self._meta = ProviderMeta(
            name=name or factory.__name__,
            token=name or f"{factory.__module__}.{factory.__qualname__}",
            scope=normalize_scope(scope),
            module=factory.__module__,
            qualname=factory.__qualname__,
        )

    @property
    def meta(self) -> ProviderMeta:
        return self._meta

    def instantiate(self, ctx: ResolveCtx) -> Any:
        return self._factory(**_resolve_dependencies(self._dependencies, ctx))


class ValueProvider:
    """Provider that returns a pre-bound constant value."""

    __slots__ = ("_meta", "_value")

    def __init__(self, value: Any, token: Any, name: Optional[str] = None):
        self._value = value
        self._meta = ProviderMeta(
            name=name or "value",
            token=token_to_key(token),
            scope=ServiceScope.TRANSIENT.value,
        )

    @property
    def meta(self) -> ProviderMeta:
        return self._meta

    def instantiate(self, ctx: ResolveCtx) -> Any:
        return self._value
