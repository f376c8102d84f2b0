"""CORS service: the public entry point tying classification, matching and headers together."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from werkzeug.wrappers import Response

from corsguard import classifier, responses
from corsguard.errors import DisallowedOriginError
from corsguard.http import ALLOW_ORIGIN, REQUEST_METHOD, RequestView, ResponseView
from corsguard.logging import cors_log_extra
from corsguard.options import CorsOptions, resolve_options, route_override
from corsguard.responses import DENIED_ORIGIN, ResponseFactory

logger = logging.getLogger(__name__)


class CorsService:
    """Decide on and decorate cross-origin requests for one set of global options.

    The global options are shared read-only between requests. Route overrides
    are merged into a fresh record per call and never cached.
    """

    def __init__(
        self,
        options: CorsOptions | None = None,
        response_class: ResponseFactory = Response,
    ) -> None:
        self._options = options if options is not None else CorsOptions()
        self.response_class = response_class

    @property
    def options(self) -> CorsOptions:
        return self._options

    @options.setter
    def options(self, value: CorsOptions) -> None:
        if not isinstance(value, CorsOptions):
            raise TypeError("options must be a CorsOptions instance")
        self._options = value

    def effective_options(self, route_match: Mapping[str, Any] | None = None) -> CorsOptions:
        return resolve_options(self._options, route_override(route_match))

    def is_cors_request(self, request: RequestView) -> bool:
        return classifier.is_cors_request(request)

    def is_preflight_request(self, request: RequestView) -> bool:
        return classifier.is_preflight_request(request)

    def create_preflight_cors_response(
        self,
        request: RequestView,
        options: CorsOptions | None = None,
    ) -> ResponseView:
        effective = options if options is not None else self._options
        response = responses.build_preflight_response(request, effective, self.response_class)

        if response.headers.get(ALLOW_ORIGIN) == DENIED_ORIGIN:
            logger.info(
                "Preflight origin denied",
                extra=cors_log_extra(
                    event="cors.preflight",
                    origin=classifier.request_origin(request),
                    outcome="denied",
                    method=request.headers.get(REQUEST_METHOD),
                ),
            )
        return response

    def create_preflight_cors_response_with_route_options(
        self,
        request: RequestView,
        route_match: Mapping[str, Any] | None,
    ) -> ResponseView:
        return self.create_preflight_cors_response(request, self.effective_options(route_match))

    def populate_cors_response(
        self,
        request: RequestView,
        response: ResponseView,
        route_match: Mapping[str, Any] | None = None,
    ) -> ResponseView:
        """Decorate ``response`` for an actual cross-origin request.

        Raises:
            DisallowedOriginError: If the origin matches none of the effective
                allow patterns.
        """

        effective = self.effective_options(route_match)
        try:
            return responses.populate_cors_response(request, response, effective)
        except DisallowedOriginError as exc:
            logger.warning(
                "Cross-origin request refused",
                extra=cors_log_extra(
                    event="cors.request",
                    origin=exc.origin,
                    outcome="disallowed",
                    method=request.method,
                    error=exc.message,
                ),
            )
            raise

    def ensure_vary_header(
        self,
        response: ResponseView,
        options: CorsOptions | None = None,
    ) -> ResponseView:
        return responses.ensure_vary_header(response, options if options is not None else self._options)
