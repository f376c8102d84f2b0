"""Flask integration: answer preflights and decorate cross-origin responses."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

from flask import Flask, Response, current_app, request

from corsguard.errors import CorsError, InvalidOriginError, error_response
from corsguard.options import ROUTE_PARAM, CorsOptions, load_options_mapping
from corsguard.service import CorsService

EXTENSION_KEY = "cors_service"
CONFIGURED_FLAG = "_cors_configured"

_View = TypeVar("_View")


def cors_route(**overrides: Any) -> Callable[[_View], _View]:
    """Attach per-route CORS overrides to a view function or ``MethodView`` class.

    Only the keys given replace the global options for that route.
    """

    load_options_mapping(overrides)

    def decorator(view: _View) -> _View:
        setattr(view, ROUTE_PARAM, dict(overrides))
        return view

    return decorator


def init_cors(app: Flask, options: CorsOptions | None = None) -> CorsService:
    """Register the CORS request hooks on ``app``."""

    if app.config.get(CONFIGURED_FLAG):
        return app.extensions[EXTENSION_KEY]

    service = CorsService(
        options if options is not None else CorsOptions.from_config(app.config),
        response_class=app.response_class,
    )
    app.extensions[EXTENSION_KEY] = service

    @app.before_request
    def handle_preflight():
        try:
            if not service.is_cors_request(request):
                return None
        except InvalidOriginError as exc:
            return error_response(exc)

        if not service.is_preflight_request(request):
            return None
        return service.create_preflight_cors_response_with_route_options(
            request, _route_match()
        )

    @app.after_request
    def apply_cors(response: Response):
        try:
            if not service.is_cors_request(request):
                return service.ensure_vary_header(
                    response, service.effective_options(_route_match())
                )
            if service.is_preflight_request(request):
                return response
            return service.populate_cors_response(request, response, _route_match())
        except CorsError as exc:
            return error_response(exc)

    app.config[CONFIGURED_FLAG] = True
    return service


def get_cors_service(app: Flask | None = None) -> CorsService:
    target = app if app is not None else current_app
    return target.extensions[EXTENSION_KEY]


def _route_match() -> dict[str, Any] | None:
    if request.endpoint is None:
        return None
    view = current_app.view_functions.get(request.endpoint)
    if view is None:
        return None

    overrides = getattr(view, ROUTE_PARAM, None)
    if overrides is None:
        overrides = getattr(getattr(view, "view_class", None), ROUTE_PARAM, None)
    if overrides is None:
        return None
    return {ROUTE_PARAM: overrides}
