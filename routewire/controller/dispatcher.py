"""
Request Dispatcher

Produces the terminal handler of every compiled route. On each request
the handler re-resolves its controller from the container, builds the
argument list, calls the method captured at compile time and turns
the result into a response (or a forwarded error).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterable, Optional, Union
import inspect
import logging
import numbers

from ..constants import CONTROLLER
from ..di import Container
from ..middleware import NextFunction
from ..request import Request
from ..response import Response
from .params import extract_parameters


logger = logging.getLogger("routewire.controller.dispatcher")


# ============================================================================
# Result kinds
# ============================================================================

@dataclass(frozen=True)
class Immediate:
    """Value returned synchronously."""
    value: Any


@dataclass(frozen=True)
class Pending:
    """Completion that settles later (an ``async def`` call or another awaitable)."""
    awaitable: Awaitable[Any]


class _Empty:
    __slots__ = ()

    def __repr__(self) -> str:
        return "Empty"


# Method returned nothing
Empty = _Empty()

Outcome = Union[Immediate, Pending, _Empty]


def is_empty(value: Any) -> bool:
    """
    Whether a method result should produce no response.

    None, False, numeric zero (and NaN), ``""`` and ``b""`` are empty;
    containers are values even when they hold nothing.
    """
    if value is None or value is False:
        return True
    if isinstance(value, (str, bytes, bytearray)):
        return len(value) == 0
    if isinstance(value, numbers.Number) and not isinstance(value, bool):
        return value == 0 or value != value
    return False


async def reconcile(outcome: Outcome, response: Response, next: NextFunction) -> None:
    """
    Apply a method outcome to the response.

    ``response.headers_sent`` is authoritative: a method that wrote the
    response itself is never answered twice.
    """
    if isinstance(outcome, Pending):
        try:
            value = await outcome.awaitable
        except Exception as exc:
            next(exc)
            return
        if not is_empty(value) and not response.headers_sent:
            response.send(value)
    elif isinstance(outcome, Immediate):
        if not is_empty(outcome.value) and not response.headers_sent:
            response.send(outcome.value)


# ============================================================================
# Dispatcher
# ============================================================================

REQUEST_SCOPES_KEY = "di_request_scopes"


def request_container(request: Request, container: Container) -> Container:
    """
    Return the request-scoped child of ``container`` for this request.

    The child is created on first use and kept in ``request.state``, so
    every controller dispatched during one request shares it.
    """
    scopes = request.state.setdefault(REQUEST_SCOPES_KEY, {})
    scoped = scopes.get(id(container))
    if scoped is None:
        scoped = scopes[id(container)] = container.create_request_scope()
    return scoped


class DispatcherFactory:
    """
    Builds per-route dispatch handlers.

    Example:
        factory = DispatcherFactory(container)
        handler = factory.create("ItemsController", "get_one", params, ItemsController.get_one)
        router.get("/items/:id", handler)
    """

    def __init__(self, container: Container):
        self.container = container

    def create(
        self,
        identity: str,
        key: str,
        parameters: Optional[Iterable[Any]],
        func: Callable[..., Any],
    ) -> Callable[[Request, Response, NextFunction], Awaitable[None]]:
        """
        Create the handler for one controller method.

        ``func`` is the unbound method; it is called with the freshly
        resolved controller instance as its first argument.
        """
        container = self.container
        params = tuple(parameters or ())
        is_async = inspect.iscoroutinefunction(func)

        def invoke(instance: Any, args: list) -> Outcome:
            if is_async:
                return Pending(func(instance, *args))
            value = func(instance, *args)
            if value is None:
                return Empty
            if inspect.isawaitable(value):
                # Plain method handing back a coroutine or future
                return Pending(value)
            return Immediate(value)

        async def dispatch(request: Request, response: Response, next: NextFunction) -> None:
            instance = request_container(request, container).get_named(CONTROLLER, identity)
            args = extract_parameters(request, response, next, params)
            await reconcile(invoke(instance, args), response, next)

        dispatch.__name__ = key
        dispatch.__qualname__ = f"{identity}.{key}"
        return dispatch
