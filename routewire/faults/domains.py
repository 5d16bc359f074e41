"""
Faults - Domain-specific fault types.

Provides concrete fault classes for the domains routewire raises in:
- HTTP faults (carry a response status)
- Route compilation faults (fatal, raised while building routes)
"""

from typing import Any, Optional

from .core import Fault, FaultDomain, Severity


# ============================================================================
# HTTP Faults
# ============================================================================

class HTTPFault(Fault):
    """
    Fault that maps directly onto an HTTP response status.

    The application's final handler uses ``status`` for the response code.
    """

    status: int = 500
    public = True

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        status: Optional[int] = None,
        metadata: Optional[dict[str, Any]] = None,
    ):
        if status is not None:
            self.status = status
        super().__init__(
            code=self.code,
            message=message or self.message,
            domain=self.domain,
            metadata=metadata,
        )


class BadRequestFault(HTTPFault):
    """Malformed request (400)."""
    code = "BAD_REQUEST"
    message = "Bad request"
    domain = FaultDomain.IO
    status = 400


class NotFoundFault(HTTPFault):
    """No route matched the request (404)."""
    code = "ROUTE_NOT_FOUND"
    message = "Not found"
    domain = FaultDomain.ROUTING
    status = 404

    def __init__(self, method: str = "", path: str = "", **kwargs):
        message = f"Cannot {method} {path}".strip() if method or path else None
        super().__init__(message, metadata={"method": method, "path": path}, **kwargs)


# ============================================================================
# Routing Faults
# ============================================================================

class RouteCompileFault(Fault):
    """Controller metadata names a method the controller does not define."""

    def __init__(self, controller: str, key: str):
        super().__init__(
            code="ROUTE_COMPILE_ERROR",
            message=f"Controller {controller!r} has no method {key!r}",
            domain=FaultDomain.ROUTING,
            severity=Severity.FATAL,
            metadata={"controller": controller, "key": key},
        )
