"""Structural views over the HTTP request and response objects of a host."""

from __future__ import annotations

from typing import Any, Protocol

ORIGIN = "Origin"
VARY = "Vary"
CONTENT_LENGTH = "Content-Length"
REQUEST_METHOD = "Access-Control-Request-Method"
ALLOW_ORIGIN = "Access-Control-Allow-Origin"
ALLOW_METHODS = "Access-Control-Allow-Methods"
ALLOW_HEADERS = "Access-Control-Allow-Headers"
ALLOW_CREDENTIALS = "Access-Control-Allow-Credentials"
EXPOSE_HEADERS = "Access-Control-Expose-Headers"
MAX_AGE = "Access-Control-Max-Age"


class HeaderView(Protocol):
    """Case-insensitive header collection."""

    def get(self, key: str, default: Any = None) -> Any: ...

    def __setitem__(self, key: str, value: Any) -> None: ...

    def __contains__(self, key: object) -> bool: ...


class RequestView(Protocol):
    """What the CORS engine reads from a request.

    ``werkzeug.wrappers.Request`` (and therefore ``flask.Request``) satisfies
    this protocol as is.
    """

    method: str
    url: str
    headers: HeaderView


class ResponseView(Protocol):
    """What the CORS engine writes on a response.

    ``werkzeug.wrappers.Response`` (and therefore ``flask.Response``)
    satisfies this protocol as is.
    """

    status_code: int
    headers: HeaderView

    def set_data(self, value: str | bytes) -> None: ...
