"""
Scope definitions.
"""

from enum import Enum


class ServiceScope(str, Enum):
    """Service lifetime scopes."""

    SINGLETON = "singleton"  # One instance per root container
    APP = "app"              # Alias for singleton
    REQUEST = "request"      # One instance per request-scope container
    TRANSIENT = "transient"  # New instance every resolve


# Scopes whose instances live on the root container
ROOT_SCOPES = frozenset((ServiceScope.SINGLETON.value, ServiceScope.APP.value))

# Scopes that cache instances at all
CACHEABLE_SCOPES = frozenset(ROOT_SCOPES | {ServiceScope.REQUEST.value})


def normalize_scope(scope: "str | ServiceScope") -> str:
    """Return the canonical string form of a scope, validating it."""
    try:
        return ServiceScope(scope).value
    except ValueError:
        valid = ", ".join(s.value for s in ServiceScope)
        raise ValueError(f"Unknown scope {scope!r}; expected one of: {valid}") from None
