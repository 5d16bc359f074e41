"""
Faults - Core types.

Defines:
- Fault base class (structured fault objects)
- FaultDomain (where the fault happened)
- Severity levels
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional


class Severity(str, Enum):
    """Fault severity levels."""
    INFO = "info"
    WARN = "warn"
    ERROR = "error"
    FATAL = "fatal"


class FaultDomain(str, Enum):
    """Functional area a fault belongs to."""
    CONFIG = "config"
    DI = "di"
    ROUTING = "routing"
    FLOW = "flow"
    IO = "io"
    SYSTEM = "system"

    def __str__(self) -> str:
        return self.value


# Severity used when a fault does not specify one
DOMAIN_DEFAULTS: dict[FaultDomain, Severity] = {
    FaultDomain.CONFIG: Severity.FATAL,
    FaultDomain.DI: Severity.ERROR,
    FaultDomain.ROUTING: Severity.WARN,
    FaultDomain.FLOW: Severity.ERROR,
    FaultDomain.IO: Severity.WARN,
    FaultDomain.SYSTEM: Severity.FATAL,
}


class Fault(Exception):
    """
    Structured error with a stable code.

    ``code``, ``message`` and ``domain`` may be passed in or declared as
    class attributes on a subclass. Only ``public`` faults have their
    message rendered into error responses outside debug mode.

    Example:
        ```python
        raise Fault("ITEM_NOT_FOUND", "Item 7 not found", domain=FaultDomain.FLOW, public=True)
        ```
    """

    def __init__(
        self,
        code: str | None = None,
        message: str | None = None,
        *,
        domain: FaultDomain | None = None,
        severity: Optional[Severity] = None,
        public: Optional[bool] = None,
        metadata: Optional[dict[str, Any]] = None,
    ):
        cls = type(self)
        self.code = code if code is not None else getattr(cls, "code", None)
        self.message = message if message is not None else getattr(cls, "message", None)
        self.domain = domain if domain is not None else getattr(cls, "domain", None)

        if self.code is None or self.message is None or self.domain is None:
            raise TypeError(f"{cls.__name__} requires code, message and domain")

        super().__init__(self.message)

        self.severity = (
            severity
            or getattr(cls, "severity", None)
            or DOMAIN_DEFAULTS.get(self.domain, Severity.ERROR)
        )
        self.public = public if public is not None else getattr(cls, "public", False)
        self.metadata = metadata or {}

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, domain={self.domain}, public={self.public})"

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "domain": str(self.domain),
            "severity": Severity(self.severity).value,
            "public": self.public,
            "metadata": self.metadata,
        }
