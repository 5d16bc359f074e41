"""
Request - ASGI request wrapper exposing express-style mappings.

Provides:
- ``params``: path parameters of the matched route
- ``query``: parsed query string (repeated keys become lists)
- ``headers``: lower-cased header mapping
- ``cookies``: parsed ``Cookie`` header
- ``body``: parsed request body (JSON / urlencoded form / raw bytes)
"""

from __future__ import annotations

import json as stdlib_json
from http.cookies import CookieError, SimpleCookie
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union
from urllib.parse import parse_qsl

from .faults import BadRequestFault


Receive = Callable[[], Awaitable[dict]]


def parse_query_string(query_string: str) -> Dict[str, Union[str, List[str]]]:
    """Parse a raw query string; repeated keys collect into a list."""
    query: Dict[str, Union[str, List[str]]] = {}
    for key, value in parse_qsl(query_string, keep_blank_values=True):
        if key in query:
            existing = query[key]
            if isinstance(existing, list):
                existing.append(value)
            else:
                query[key] = [existing, value]
        else:
            query[key] = value
    return query


def parse_cookie_header(header: str) -> Dict[str, str]:
    """Parse a ``Cookie`` header into a flat mapping."""
    cookie = SimpleCookie()
    try:
        cookie.load(header)
    except CookieError:
        return {}
    return {name: morsel.value for name, morsel in cookie.items()}


class Request:
    """
    HTTP request handed to middleware and controller methods.

    ``path`` is relative to the router currently handling the request;
    ``original_path`` never changes. The body is only available after
    :meth:`load_body` has run (the application does this before routing).
    """

    def __init__(
        self,
        scope: dict,
        receive: Optional[Receive] = None,
        *,
        app: Optional[Any] = None,
    ):
        self.scope = scope
        self._receive = receive
        self.app = app

        self.method: str = scope.get("method", "GET").upper()
        self.original_path: str = scope.get("path", "/") or "/"
        self.path: str = self.original_path
        self.base_url: str = ""

        raw_qs = scope.get("query_string", b"")
        if isinstance(raw_qs, bytes):
            raw_qs = raw_qs.decode("latin-1")
        self.query_string: str = raw_qs
        self.query: Dict[str, Any] = parse_query_string(raw_qs)

        self.headers: Dict[str, str] = {}
        for name, value in scope.get("headers", ()):
            key = name.decode("latin-1").lower()
            text = value.decode("latin-1")
            if key in self.headers:
                self.headers[key] = f"{self.headers[key]}, {text}"
            else:
                self.headers[key] = text

        self.cookies: Dict[str, str] = parse_cookie_header(self.headers.get("cookie", ""))
        self.params: Dict[str, str] = {}
        self.body: Any = {}
        self.raw_body: bytes = b""
        self.state: Dict[str, Any] = {}

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def get(self, header: str, default: Optional[str] = None) -> Optional[str]:
        """Return a request header (case-insensitive)."""
        return self.headers.get(header.lower(), default)

    @property
    def content_type(self) -> str:
        return self.headers.get("content-type", "").split(";")[0].strip().lower()

    @property
    def client(self) -> Optional[tuple]:
        return self.scope.get("client")

    # ------------------------------------------------------------------
    # Body
    # ------------------------------------------------------------------

    async def read(self) -> bytes:
        """Read the full request body from the ASGI receive channel."""
        if self._receive is None:
            return self.raw_body

        chunks = []
        more_body = True
        while more_body:
            message = await self._receive()
            if message["type"] == "http.disconnect":
                break
            chunks.append(message.get("body", b""))
            more_body = message.get("more_body", False)

        self._receive = None
        self.raw_body = b"".join(chunks)
        return self.raw_body

    async def load_body(self) -> Any:
        """
        Read and parse the body into ``self.body``.

        - ``application/json`` (and ``+json``) -> decoded JSON
        - ``application/x-www-form-urlencoded`` -> mapping
        - anything else non-empty -> raw bytes
        - empty body -> ``{}``

        Raises:
            BadRequestFault: If a JSON body cannot be decoded
        """
        raw = await self.read()
        if not raw:
            self.body = {}
            return self.body

        content_type = self.content_type
        if content_type == "application/json" or content_type.endswith("+json"):
            try:
                self.body = stdlib_json.loads(raw)
            except (ValueError, UnicodeDecodeError) as exc:
                raise BadRequestFault(f"Invalid JSON body: {exc}") from exc
        elif content_type == "application/x-www-form-urlencoded":
            self.body = parse_query_string(raw.decode("utf-8", errors="replace"))
        else:
            self.body = raw
        return self.body

    def __repr__(self) -> str:
        return f"<Request {self.method} {self.original_path}>"
