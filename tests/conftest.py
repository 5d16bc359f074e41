"""
Shared test fixtures and helpers for the routewire test suite.
"""

import pytest

from routewire.controller.metadata import MetadataRegistry
from routewire.di import Container
from routewire.middleware import NextFunction
from routewire.response import Response
from routewire.testing import make_test_request


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def container():
    """Fresh root container."""
    return Container()


@pytest.fixture
def registry():
    """Isolated metadata registry (the decorators' default one is shared)."""
    return MetadataRegistry()


@pytest.fixture
def request_factory():
    """Build requests without going through an application."""
    return make_test_request


@pytest.fixture
def response():
    return Response()


@pytest.fixture
def next_fn():
    return NextFunction("test")
