"""
routewire Testing - helpers for exercising applications in-process.
"""

from .client import TestClient, TestResponse
from .utils import make_test_scope, make_test_receive, make_test_request

__all__ = [
    "TestClient",
    "TestResponse",
    "make_test_scope",
    "make_test_receive",
    "make_test_request",
]
