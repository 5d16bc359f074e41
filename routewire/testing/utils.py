"""
routewire Testing - ASGI scope, receive and request factories.
"""

from __future__ import annotations

import json as stdlib_json
from typing import Any, List, Optional

from routewire.request import Request


def make_test_scope(
    method: str = "GET",
    path: str = "/",
    query_string: str = "",
    headers: Optional[List[tuple]] = None,
    scheme: str = "http",
    client: Optional[tuple] = None,
) -> dict:
    """
    Build a minimal ASGI HTTP scope.

    Args:
        method: HTTP method.
        path: Request path.
        query_string: Raw query string (without ``?``).
        headers: List of ``(name, value)`` tuples (strings or bytes).
        scheme: URL scheme.
        client: ``(host, port)`` tuple.
    """
    raw_headers: list[tuple[bytes, bytes]] = []
    for name, value in headers or ():
        raw_headers.append((
            name.encode("latin-1") if isinstance(name, str) else name,
            value.encode("latin-1") if isinstance(value, str) else value,
        ))

    return {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "method": method.upper(),
        "path": path,
        "raw_path": path.encode("utf-8"),
        "query_string": query_string.encode("utf-8"),
        "headers": raw_headers,
        "scheme": scheme,
        "server": ("127.0.0.1", 8000),
        "client": client or ("127.0.0.1", 12345),
        "root_path": "",
    }


def make_test_receive(body: bytes = b"", *, chunks: Optional[List[bytes]] = None):
    """
    Create an ASGI receive callable.

    Args:
        body: Complete request body bytes.
        chunks: Optional list of body chunks (overrides *body*).
    """
    if chunks:
        messages = [
            {"type": "http.request", "body": chunk, "more_body": i < len(chunks) - 1}
            for i, chunk in enumerate(chunks)
        ]
    else:
        messages = [{"type": "http.request", "body": body, "more_body": False}]

    idx = 0

    async def receive():
        nonlocal idx
        if idx < len(messages):
            msg = messages[idx]
            idx += 1
            return msg
        return {"type": "http.disconnect"}

    return receive


def make_test_request(
    method: str = "GET",
    path: str = "/",
    *,
    query_string: str = "",
    headers: Optional[List[tuple]] = None,
    json: Any = None,
    body: bytes = b"",
    params: Optional[dict] = None,
) -> Request:
    """
    Build a :class:`Request` directly, with an optional pre-parsed body.

    The body is parsed eagerly, so the request is ready for handlers
    that read ``request.body`` without going through the application.
    """
    headers = list(headers or [])
    if json is not None:
        body = stdlib_json.dumps(json).encode("utf-8")
        headers.append(("content-type", "application/json"))

    request = Request(make_test_scope(method, path, query_string, headers))
    request.raw_body = body
    if json is not None:
        request.body = json
    elif body:
        request.body = body
    if params:
        request.params = dict(params)
    return request
