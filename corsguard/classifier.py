"""Classify requests as same-origin, cross-origin or preflight."""

from __future__ import annotations

from corsguard.http import ORIGIN, REQUEST_METHOD, RequestView
from corsguard.origins import parse_origin, url_origin


def request_origin(request: RequestView) -> str | None:
    value = request.headers.get(ORIGIN)
    if value is None:
        return None
    return value.strip()


def is_cors_request(request: RequestView) -> bool:
    """Return True when the request carries an ``Origin`` different from its own.

    Raises:
        InvalidOriginError: If the ``Origin`` header is not an absolute origin.
    """

    origin = request_origin(request)
    if origin is None:
        return False

    requester = parse_origin(origin)
    own = url_origin(request.url)
    # scheme, host and port must all match for a same-origin request
    return own is None or requester != own


def is_preflight_request(request: RequestView) -> bool:
    return (
        request.method.upper() == "OPTIONS"
        and request.headers.get(ORIGIN) is not None
        and request.headers.get(REQUEST_METHOD) is not None
    )
