"""
Parameter Extractor

Builds the positional argument list of a controller method call from
the request according to its parameter bindings.
"""

from __future__ import annotations

from typing import Any, Iterable, List, Mapping, Optional

from ..constants import ParameterType
from ..middleware import NextFunction
from ..request import Request
from ..response import Response


_REQUEST_ATTRS = {
    ParameterType.PARAMS: "params",
    ParameterType.QUERY: "query",
    ParameterType.BODY: "body",
    ParameterType.HEADERS: "headers",
    ParameterType.COOKIES: "cookies",
}


def get_field(source: Any, subkey: Optional[str], name: Optional[str]) -> Any:
    """
    Read ``source.<subkey>[name]``.

    A falsy or missing field falls back to the whole container, except
    under ``query`` where it yields None. Sub-objects that are not
    mappings (raw bytes, JSON lists or strings) have no fields.
    """
    container = getattr(source, subkey) if subkey else source

    if name:
        if isinstance(container, Mapping):
            value = container.get(name)
        elif subkey is None:
            value = getattr(container, name, None)
        else:
            value = None
        if value:
            return value

    if subkey == "query":
        return None
    return container


def extract_parameters(
    request: Request,
    response: Response,
    next: NextFunction,
    params: Optional[Iterable[Any]] = None,
) -> List[Any]:
    """
    Build the argument list for one controller method call.

    Without bindings the method receives ``(request, response, next)``.
    Otherwise bound values fill their indexes (gaps stay None) and
    ``request, response, next`` always follow.
    """
    params = list(params or ())
    if not params:
        return [request, response, next]

    args: List[Any] = [None] * (max(p.index for p in params) + 1)
    for param in params:
        kind = param.type
        attr = _REQUEST_ATTRS.get(kind) if isinstance(kind, ParameterType) else None
        if kind == ParameterType.REQUEST:
            args[param.index] = get_field(request, None, param.name)
        elif attr is not None:
            args[param.index] = get_field(request, attr, param.name)
        elif kind == ParameterType.NEXT:
            args[param.index] = next
        else:
            args[param.index] = response

    return args + [request, response, next]
