"""
Router - ordered, first-match HTTP routing with middleware chains.

Routes and middleware are kept in a single stack and tried in the order
they were registered; the first layer whose path (and verb) matches gets
the request. There is no specificity sorting: registration order is the
routing priority.

Path syntax:
- ``/items/:id``   named segment, exposed as ``request.params["id"]``
- ``/items/:id?``  optional named segment
- ``/files/*``     wildcard, exposed as ``request.params["0"]``
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple
import logging
import re

from .constants import HTTP_METHODS
from .middleware import NEXT_ROUTE, NextFunction, call_handler, is_error_handler
from .request import Request
from .response import Response


logger = logging.getLogger("routewire.routing")

_TOKEN_RE = re.compile(r"(/)?:([A-Za-z_][A-Za-z0-9_]*)(\?)?|\*")


def compile_path(
    path: str,
    *,
    end: bool = True,
    case_sensitive: bool = False,
    strict: bool = False,
) -> Tuple["re.Pattern[str]", List[Tuple[str, str]]]:
    """
    Compile an express-style path into a regex.

    Returns:
        (compiled regex, [(group name, param key), ...])
    """
    pattern = ""
    keys: List[Tuple[str, str]] = []
    pos = 0
    wildcards = 0

    for m in _TOKEN_RE.finditer(path):
        pattern += re.escape(path[pos:m.start()])
        pos = m.end()

        if m.group(0) == "*":
            group = f"_w{wildcards}"
            keys.append((group, str(wildcards)))
            wildcards += 1
            pattern += f"(?P<{group}>.*)"
            continue

        slash, name, optional = m.groups()
        keys.append((name, name))
        segment = f"{'/' if slash else ''}(?P<{name}>[^/]+?)"
        pattern += f"(?:{segment})?" if optional else segment

    pattern += re.escape(path[pos:])

    if not strict and pattern.endswith("/"):
        pattern = pattern[:-1]

    if end:
        pattern += "$" if strict else "/?$"
    else:
        pattern += "(?=/|$)"

    flags = 0 if case_sensitive else re.IGNORECASE
    return re.compile("^" + pattern, flags), keys


def _flatten(handlers: Iterable[Any]) -> List[Any]:
    flat: List[Any] = []
    for handler in handlers:
        if isinstance(handler, (list, tuple)):
            flat.extend(_flatten(handler))
        else:
            flat.append(handler)
    return flat


def _passed(error: Optional[Any] = None) -> NextFunction:
    nxt = NextFunction()
    nxt(error)
    return nxt


class Layer:
    """One entry of a router stack: a path matcher plus a route, handler or sub-router."""

    __slots__ = ("path", "handler", "route", "regex", "keys", "error_handler")

    def __init__(
        self,
        path: str,
        handler: Any = None,
        *,
        route: Optional["Route"] = None,
        end: bool = True,
        case_sensitive: bool = False,
        strict: bool = False,
    ):
        self.path = path
        self.handler = handler
        self.route = route
        self.regex, self.keys = compile_path(path, end=end, case_sensitive=case_sensitive, strict=strict)
        self.error_handler = (
            handler is not None
            and not isinstance(handler, Router)
            and is_error_handler(handler)
        )

    def match(self, path: str) -> Optional[Tuple[Dict[str, str], str]]:
        """Return (params, matched prefix) or None."""
        m = self.regex.match(path)
        if m is None:
            return None
        params = {
            key: m.group(group)
            for group, key in self.keys
            if m.group(group) is not None
        }
        return params, m.group(0)


class Route:
    """
    A path with one or more verb-specific handler chains.

    ``next("route")`` inside a handler skips the rest of this route.
    """

    def __init__(self, path: str):
        self.path = path
        self.stack: List[Tuple[str, Callable]] = []
        self.methods: set = set()

    def add(self, method: str, *handlers: Callable) -> "Route":
        method = method.lower()
        for handler in _flatten(handlers):
            if not callable(handler):
                raise TypeError(f"Route.{method}() requires callable handlers, got {handler!r}")
            self.stack.append((method, handler))
        self.methods.add(method)
        return self

    def handles_method(self, method: str) -> bool:
        method = method.lower()
        if "all" in self.methods or method in self.methods:
            return True
        return method == "head" and "get" in self.methods

    async def dispatch(self, request: Request, response: Response) -> NextFunction:
        method = request.method.lower()
        if method == "head" and "head" not in self.methods:
            method = "get"

        for verb, handler in self.stack:
            if verb != "all" and verb != method:
                continue
            outcome = await call_handler(handler, request, response)
            if not outcome.called:
                return outcome
            if isinstance(outcome.error, str) and outcome.error == NEXT_ROUTE:
                return _passed()
            if outcome.error is not None:
                return outcome
        return _passed()


class Router:
    """
    Express-style router.

    Example:
        router = Router()
        router.use(log_requests)
        router.get("/items/:id", auth, get_item)
        app.use("/api", router)
    """

    def __init__(self, *, case_sensitive: bool = False, strict: bool = False):
        self.case_sensitive = case_sensitive
        self.strict = strict
        self.stack: List[Layer] = []

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def route(self, method: str, path: str, *handlers: Callable) -> Route:
        """
        Register ``handlers`` as one chain for ``method`` at ``path``.

        Raises:
            ValueError: If ``method`` is not a known HTTP verb (or ``all``)
        """
        method = method.lower()
        if method not in HTTP_METHODS and method != "all":
            raise ValueError(f"Unsupported HTTP method: {method!r}")
        if not handlers:
            raise TypeError(f"Router.{method}('{path}') requires at least one handler")

        route = Route(path).add(method, *handlers)
        self.stack.append(Layer(
            path,
            route=route,
            end=True,
            case_sensitive=self.case_sensitive,
            strict=self.strict,
        ))
        return route

    def get(self, path: str, *handlers: Callable) -> Route:
        return self.route("get", path, *handlers)

    def post(self, path: str, *handlers: Callable) -> Route:
        return self.route("post", path, *handlers)

    def put(self, path: str, *handlers: Callable) -> Route:
        return self.route("put", path, *handlers)

    def patch(self, path: str, *handlers: Callable) -> Route:
        return self.route("patch", path, *handlers)

    def delete(self, path: str, *handlers: Callable) -> Route:
        return self.route("delete", path, *handlers)

    def head(self, path: str, *handlers: Callable) -> Route:
        return self.route("head", path, *handlers)

    def options(self, path: str, *handlers: Callable) -> Route:
        return self.route("options", path, *handlers)

    def all(self, path: str, *handlers: Callable) -> Route:
        return self.route("all", path, *handlers)

    def use(self, *args: Any) -> "Router":
        """
        Mount middleware, error handlers or sub-routers.

        An optional leading string is the mount path (default ``"/"``).
        """
        path = "/"
        if args and isinstance(args[0], str):
            path, args = args[0], args[1:]

        handlers = _flatten(args)
        if not handlers:
            raise TypeError("Router.use() requires at least one handler")

        for handler in handlers:
            if not isinstance(handler, Router) and not callable(handler):
                raise TypeError(f"Router.use() requires callable handlers, got {handler!r}")
            self.stack.append(Layer(
                path,
                handler,
                end=False,
                case_sensitive=self.case_sensitive,
                strict=False,
            ))
        return self

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    async def handle(
        self,
        request: Request,
        response: Response,
        error: Optional[Any] = None,
    ) -> NextFunction:
        """
        Run the request through this router's stack.

        Returns a continuation: ``called`` is False when some handler
        ended the chain, otherwise the request fell through this router
        carrying ``error`` (if any).
        """
        path = request.path
        method = request.method

        for layer in self.stack:
            match = layer.match(path)
            if match is None:
                continue
            params, matched = match

            if layer.route is not None:
                if error is not None or not layer.route.handles_method(method):
                    continue
                request.params = params
                outcome = await layer.route.dispatch(request, response)
            elif isinstance(layer.handler, Router):
                request.params = params
                outcome = await self._mount(layer.handler, matched, request, response, error)
            elif layer.error_handler:
                if error is None:
                    continue
                request.params = params
                outcome = await call_handler(layer.handler, error, request, response)
            else:
                if error is not None:
                    continue
                request.params = params
                outcome = await call_handler(layer.handler, request, response)

            if not outcome.called:
                return outcome
            error = outcome.error

        return _passed(error)

    async def _mount(
        self,
        router: "Router",
        matched: str,
        request: Request,
        response: Response,
        error: Optional[Any],
    ) -> NextFunction:
        saved_path, saved_base = request.path, request.base_url
        prefix = matched.rstrip("/")
        request.base_url = saved_base + prefix
        request.path = saved_path[len(prefix):] or "/"
        try:
            return await router.handle(request, response, error)
        finally:
            request.path, request.base_url = saved_path, saved_base

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def routes(self, prefix: str = "") -> List[Tuple[str, str]]:
        """List ``(METHOD, path)`` pairs in registration order, including mounted routers."""
        found: List[Tuple[str, str]] = []
        for layer in self.stack:
            if layer.route is not None:
                for method in sorted(layer.route.methods):
                    found.append((method.upper(), prefix + layer.path))
            elif isinstance(layer.handler, Router):
                found.extend(layer.handler.routes(prefix + layer.path.rstrip("/")))
        return found

    def __len__(self) -> int:
        return len(self.stack)
