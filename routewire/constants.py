"""
Shared constants: container tokens, parameter sources and routing defaults.
"""

from enum import Enum


# Container token every controller is bound under
CONTROLLER = "routewire.Controller"

DEFAULT_ROUTING_ROOT_PATH = "/"

HTTP_METHODS = ("get", "post", "put", "patch", "delete", "head", "options")


class ParameterType(str, Enum):
    """Where a bound controller-method argument is read from."""

    REQUEST = "request"
    RESPONSE = "response"
    PARAMS = "params"
    QUERY = "query"
    BODY = "body"
    HEADERS = "headers"
    COOKIES = "cookies"
    NEXT = "next"
