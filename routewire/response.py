"""
Response - express-style response object buffered until the chain finishes.

``send`` records the body and flips ``headers_sent``; the application
writes the buffered response to ASGI once request handling completes.
"""

from __future__ import annotations

import json as stdlib_json
from typing import Any, Awaitable, Callable, Dict, List, Optional

from .faults import Fault, FaultDomain


Send = Callable[[dict], Awaitable[None]]


def _json_default_serializer(o):
    """Default JSON serializer for non-standard types."""
    if isinstance(o, (set, frozenset, tuple)):
        return list(o)
    if hasattr(o, "isoformat"):
        return o.isoformat()
    if hasattr(o, "to_dict"):
        return o.to_dict()
    return str(o)


class HeadersSentFault(Fault):
    """A response was written twice."""
    code = "HEADERS_SENT"
    message = "Cannot send a response after headers have been sent"
    domain = FaultDomain.FLOW


class Response:
    """
    Mutable HTTP response.

    Example:
        res.status(201).set("Location", "/items/7").send({"id": "7"})
    """

    def __init__(self, encoding: str = "utf-8"):
        self.status_code: int = 200
        self.headers: Dict[str, str] = {}
        self.body: bytes = b""
        self.encoding = encoding
        self.headers_sent: bool = False
        self.locals: Dict[str, Any] = {}

    # ------------------------------------------------------------------
    # Builders
    # ------------------------------------------------------------------

    def status(self, code: int) -> "Response":
        self.status_code = code
        return self

    def set(self, name: str, value: str) -> "Response":
        self.headers[name.lower()] = str(value)
        return self

    def get(self, name: str) -> Optional[str]:
        return self.headers.get(name.lower())

    def type(self, content_type: str) -> "Response":
        return self.set("content-type", content_type)

    # ------------------------------------------------------------------
    # Terminal operations
    # ------------------------------------------------------------------

    def send(self, value: Any = None) -> "Response":
        """
        Send ``value`` as the response body.

        - ``bytes`` -> ``application/octet-stream``
        - ``str`` -> ``text/html``
        - ``None`` -> empty body
        - anything else -> JSON

        Raises:
            HeadersSentFault: If the response was already sent
        """
        if value is None:
            return self.end()
        if isinstance(value, (bytes, bytearray)):
            self.headers.setdefault("content-type", "application/octet-stream")
            return self._finish(bytes(value))
        if isinstance(value, str):
            self.headers.setdefault("content-type", f"text/html; charset={self.encoding}")
            return self._finish(value.encode(self.encoding))
        return self.json(value)

    def json(self, value: Any) -> "Response":
        """Send ``value`` JSON-encoded."""
        payload = stdlib_json.dumps(value, default=_json_default_serializer)
        self.headers.setdefault("content-type", f"application/json; charset={self.encoding}")
        return self._finish(payload.encode(self.encoding))

    def end(self, data: Optional[bytes] = None) -> "Response":
        """Finish the response without content negotiation."""
        return self._finish(data or b"")

    def _finish(self, body: bytes) -> "Response":
        if self.headers_sent:
            raise HeadersSentFault()
        self.body = body
        self.headers["content-length"] = str(len(body))
        self.headers_sent = True
        return self

    # ------------------------------------------------------------------
    # ASGI
    # ------------------------------------------------------------------

    def _prepare_headers(self) -> List[tuple]:
        return [
            (name.encode("latin-1"), value.encode("latin-1"))
            for name, value in self.headers.items()
        ]

    async def send_asgi(self, send: Send, *, include_body: bool = True) -> None:
        """Write the buffered response to an ASGI ``send`` channel."""
        await send({
            "type": "http.response.start",
            "status": self.status_code,
            "headers": self._prepare_headers(),
        })
        await send({
            "type": "http.response.body",
            "body": self.body if include_body else b"",
        })

    def __repr__(self) -> str:
        return f"<Response {self.status_code} sent={self.headers_sent} {len(self.body)}B>"
