"""
ASGI application - wraps a root Router and converts the handler chain's
outcome into an HTTP response.
"""

from __future__ import annotations

from typing import Any, Callable, List, Optional
import inspect
import logging

from .faults import Fault, NotFoundFault
from .request import Request
from .response import Response
from .routing import Router


Hook = Callable[[], Any]


class Application:
    """
    ASGI entry point.

    Routing calls (``use``, ``get``, ``post``...) are forwarded to the
    root router, so the application reads like an express app:

        app = Application()
        app.use(json_logger)
        app.use("/api", api_router)
        app.use(error_handler)
    """

    def __init__(
        self,
        router: Optional[Router] = None,
        *,
        case_sensitive: bool = False,
        strict: bool = False,
        debug: bool = False,
    ):
        self.router = router or Router(case_sensitive=case_sensitive, strict=strict)
        self.debug = debug
        self.startup_hooks: List[Hook] = []
        self.shutdown_hooks: List[Hook] = []
        self.logger = logging.getLogger("routewire.application")

    # ------------------------------------------------------------------
    # Routing facade
    # ------------------------------------------------------------------

    def use(self, *args: Any) -> "Application":
        self.router.use(*args)
        return self

    def route(self, method: str, path: str, *handlers: Callable):
        return self.router.route(method, path, *handlers)

    def get(self, path: str, *handlers: Callable):
        return self.router.get(path, *handlers)

    def post(self, path: str, *handlers: Callable):
        return self.router.post(path, *handlers)

    def put(self, path: str, *handlers: Callable):
        return self.router.put(path, *handlers)

    def patch(self, path: str, *handlers: Callable):
        return self.router.patch(path, *handlers)

    def delete(self, path: str, *handlers: Callable):
        return self.router.delete(path, *handlers)

    def all(self, path: str, *handlers: Callable):
        return self.router.all(path, *handlers)

    def on_startup(self, hook: Hook) -> Hook:
        self.startup_hooks.append(hook)
        return hook

    def on_shutdown(self, hook: Hook) -> Hook:
        self.shutdown_hooks.append(hook)
        return hook

    # ------------------------------------------------------------------
    # ASGI
    # ------------------------------------------------------------------

    async def __call__(self, scope: dict, receive: Callable, send: Callable):
        scope_type = scope["type"]

        if scope_type == "http":
            await self.handle_http(scope, receive, send)
        elif scope_type == "lifespan":
            await self.handle_lifespan(scope, receive, send)
        else:
            self.logger.warning(f"Unsupported ASGI scope type: {scope_type}")

    async def handle_http(self, scope: dict, receive: Callable, send: Callable):
        request = Request(scope, receive, app=self)
        response = Response()

        response = await self.handle(request, response)
        await response.send_asgi(send, include_body=request.method != "HEAD")

    async def handle(self, request: Request, response: Response) -> Response:
        """Run one request through the router and the final handler."""
        error: Optional[Any] = None
        try:
            await request.load_body()
        except Fault as exc:
            error = exc

        outcome = await self.router.handle(request, response, error)

        if outcome.called:
            self.finalize(outcome.error, request, response)
        elif not response.headers_sent:
            # Chain ended without writing anything
            response.end()
        return response

    def finalize(self, error: Optional[Any], request: Request, response: Response) -> None:
        """
        Final handler: runs when the chain falls off the end of the stack.

        No error -> 404. A ``Fault`` carrying an HTTP status uses that
        status; anything else is a 500 with a non-public message.
        """
        if response.headers_sent:
            if error is not None:
                self.logger.error(
                    "Error after response was sent for %s %s: %r",
                    request.method, request.original_path, error,
                )
            return

        if error is None:
            error = NotFoundFault(request.method, request.original_path)

        status = getattr(error, "status", None)
        if not isinstance(status, int) or not 400 <= status < 600:
            status = 500

        if status >= 500:
            self.logger.error(
                "Unhandled error for %s %s: %r",
                request.method, request.original_path, error,
                exc_info=error if isinstance(error, BaseException) else None,
            )
        else:
            self.logger.debug("%s %s -> %s", request.method, request.original_path, status)

        response.status(status).json({"error": self._error_payload(error)})

    def _error_payload(self, error: Any) -> dict:
        if isinstance(error, Fault):
            payload = {"code": error.code}
            if error.public or self.debug:
                payload["message"] = error.message
            return payload

        payload = {"code": "INTERNAL_ERROR"}
        if self.debug:
            payload["message"] = str(error)
        return payload

    async def handle_lifespan(self, scope: dict, receive: Callable, send: Callable):
        """Handle ASGI lifespan events."""
        while True:
            message = await receive()

            if message["type"] == "lifespan.startup":
                try:
                    await self._run_hooks(self.startup_hooks)
                    self.logger.debug("Application startup complete")
                    await send({"type": "lifespan.startup.complete"})
                except Exception as e:
                    self.logger.error(f"Startup error: {e}", exc_info=True)
                    await send({"type": "lifespan.startup.failed", "message": str(e)})
                    raise

            elif message["type"] == "lifespan.shutdown":
                try:
                    await self._run_hooks(self.shutdown_hooks)
                    self.logger.debug("Application shutdown complete")
                    await send({"type": "lifespan.shutdown.complete"})
                except Exception as e:
                    self.logger.error(f"Shutdown error: {e}", exc_info=True)
                    await send({"type": "lifespan.shutdown.failed", "message": str(e)})
                break

    @staticmethod
    async def _run_hooks(hooks: List[Hook]) -> None:
        for hook in hooks:
            result = hook()
            if inspect.isawaitable(result):
                await result
