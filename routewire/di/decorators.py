"""
Injection helpers for ergonomic DI usage.
"""

from typing import Any, Optional
from dataclasses import dataclass, field


@dataclass
class Inject:
    """
    Injection metadata marker.

    Usage:
        def __init__(self, repo: Annotated[UserRepo, Inject(tag="sql")]):
            ...
    """

    token: Optional[Any] = None
    tag: Optional[str] = None
    optional: bool = False

    # Internal markers read by providers
    _inject_token: Optional[Any] = field(default=None, init=False, repr=False)
    _inject_tag: Optional[str] = field(default=None, init=False, repr=False)
    _inject_optional: bool = field(default=False, init=False, repr=False)

    def __post_init__(self):
        self._inject_token = self.token
        self._inject_tag = self.tag
        self._inject_optional = self.optional


def inject(token: Optional[Any] = None, *, tag: Optional[str] = None, optional: bool = False) -> Inject:
    """
    Create injection metadata.

    Example:
        def __init__(
            self,
            db: Annotated[Database, inject(tag="readonly")],
            cache: Annotated[Cache, inject(optional=True)],
        ):
            ...
    """
    return Inject(token=token, tag=tag, optional=optional)
