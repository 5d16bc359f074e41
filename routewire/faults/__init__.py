"""
routewire faults - structured fault objects raised and forwarded by the HTTP layer.
"""

from .core import Fault, FaultDomain, Severity, DOMAIN_DEFAULTS
from .domains import (
    HTTPFault,
    BadRequestFault,
    NotFoundFault,
    RouteCompileFault,
)

__all__ = [
    "Fault",
    "FaultDomain",
    "Severity",
    "DOMAIN_DEFAULTS",
    "HTTPFault",
    "BadRequestFault",
    "NotFoundFault",
    "RouteCompileFault",
]
