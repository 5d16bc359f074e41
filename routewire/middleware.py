"""
Middleware system - express-style handlers with ``next`` continuations.

A request handler is any callable ``(request, response, next)``; an
error handler takes ``(error, request, response, next)``. Either may be
sync or async. Calling ``next()`` passes control to the next matching
handler, ``next(error)`` skips to the next error handler, and returning
without calling ``next`` ends the chain.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Optional, Union
import inspect
import logging

from .request import Request
from .response import Response


logger = logging.getLogger("routewire.middleware")

# Sentinel passed to next() to skip the remaining handlers of a route
NEXT_ROUTE = "route"

Handler = Callable[[Request, Response, "NextFunction"], Union[None, Awaitable[None]]]
ErrorHandler = Callable[[Any, Request, Response, "NextFunction"], Union[None, Awaitable[None]]]


class NextFunction:
    """
    Continuation handed to a handler.

    Records whether (and with what error) the handler passed control on.
    Only the first call counts.
    """

    __slots__ = ("called", "error", "_label")

    def __init__(self, label: str = ""):
        self.called = False
        self.error: Optional[Any] = None
        self._label = label

    def __call__(self, error: Optional[Any] = None) -> None:
        if self.called:
            logger.warning("next() called more than once in %s", self._label or "handler")
            return
        self.called = True
        self.error = error

    def __repr__(self) -> str:
        return f"<next called={self.called} error={self.error!r}>"


def is_error_handler(handler: Callable) -> bool:
    """Error handlers declare exactly four positional parameters."""
    try:
        sig = inspect.signature(handler)
    except (TypeError, ValueError):
        return False
    positional = [
        p for p in sig.parameters.values()
        if p.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
    ]
    return len(positional) == 4


def handler_name(handler: Any) -> str:
    return getattr(handler, "__qualname__", None) or getattr(handler, "__name__", None) or type(handler).__name__


async def call_handler(handler: Callable, *args: Any) -> NextFunction:
    """
    Invoke one handler and report how it continued.

    Exceptions raised by the handler (synchronously or while awaiting it)
    are turned into ``next(error)``.
    """
    nxt = NextFunction(handler_name(handler))
    try:
        result = handler(*args, nxt)
        if inspect.isawaitable(result):
            await result
    except Exception as exc:
        if nxt.called:
            logger.error(
                "Handler %s raised after calling next()", handler_name(handler), exc_info=True,
            )
        else:
            logger.debug("Handler %s raised %r; forwarding", handler_name(handler), exc)
            nxt(exc)
    return nxt
