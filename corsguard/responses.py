"""Build preflight responses and decorate actual cross-origin responses."""

from __future__ import annotations

from collections.abc import Callable

from corsguard.classifier import request_origin
from corsguard.errors import DisallowedOriginError
from corsguard.http import (
    ALLOW_CREDENTIALS,
    ALLOW_HEADERS,
    ALLOW_METHODS,
    ALLOW_ORIGIN,
    CONTENT_LENGTH,
    EXPOSE_HEADERS,
    MAX_AGE,
    ORIGIN,
    VARY,
    RequestView,
    ResponseView,
)
from corsguard.options import CorsOptions
from corsguard.origins import match_origin

DENIED_ORIGIN = "null"

ResponseFactory = Callable[[], ResponseView]


def build_preflight_response(
    request: RequestView,
    options: CorsOptions,
    response_class: ResponseFactory,
) -> ResponseView:
    """Answer a preflight request.

    A denied origin is answered with ``Access-Control-Allow-Origin: null``
    rather than an error; the browser then refuses the actual request.
    """

    matched = match_origin(request_origin(request), options.patterns)

    response = response_class()
    response.status_code = 200
    response.set_data("")
    response.headers[CONTENT_LENGTH] = "0"
    response.headers[ALLOW_ORIGIN] = matched if matched is not None else DENIED_ORIGIN
    response.headers[ALLOW_METHODS] = ", ".join(options.allowed_methods)
    response.headers[ALLOW_HEADERS] = ", ".join(options.allowed_headers)

    if options.max_age is not None:
        response.headers[MAX_AGE] = str(options.max_age)
    if options.allowed_credentials and matched is not None:
        response.headers[ALLOW_CREDENTIALS] = "true"

    return response


def populate_cors_response(
    request: RequestView,
    response: ResponseView,
    options: CorsOptions,
) -> ResponseView:
    """Add CORS headers to the response of an actual cross-origin request.

    Raises:
        DisallowedOriginError: If no allow pattern matches the request origin.
    """

    origin = request_origin(request)
    matched = match_origin(origin, options.patterns)
    if matched is None:
        raise DisallowedOriginError(origin or DENIED_ORIGIN)

    response.headers[ALLOW_ORIGIN] = matched
    if options.exposed_headers:
        response.headers[EXPOSE_HEADERS] = ", ".join(options.exposed_headers)
    if options.allowed_credentials:
        response.headers[ALLOW_CREDENTIALS] = "true"

    return ensure_vary_header(response, options)


def ensure_vary_header(response: ResponseView, options: CorsOptions) -> ResponseView:
    """Make sure caches key the response on ``Origin`` unless any origin is allowed."""

    if options.allows_any_origin:
        return response

    response.headers[VARY] = merge_vary_header(_existing_vary(response), ORIGIN)
    return response


def _existing_vary(response: ResponseView) -> str | None:
    # several Vary fields are folded into one so none of their tokens are lost
    getlist = getattr(response.headers, "getlist", None)
    if getlist is None:
        return response.headers.get(VARY)
    return ", ".join(getlist(VARY)) or None


def merge_vary_header(existing: str | None, value: str) -> str:
    if not existing:
        return value
    items = [item.strip() for item in existing.split(",") if item.strip()]
    if value.lower() not in {item.lower() for item in items}:
        items.append(value)
    return ", ".join(items)
