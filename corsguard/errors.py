"""Application-wide error utilities and handlers."""

from __future__ import annotations

from typing import Any

from flask import Flask, Response, jsonify


class APIError(Exception):
    """Base class for API-level errors."""

    status_code: int = 400

    def __init__(
        self, message: str, *, status_code: int | None = None, payload: dict[str, Any] | None = None
    ):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.payload = payload or {}


class CorsError(APIError):
    """Base class for CORS decision failures."""


class InvalidOriginError(CorsError):
    """Raised when the ``Origin`` header is not an absolute ``scheme://host`` origin."""

    status_code = 400

    def __init__(self, origin: str | None):
        super().__init__(
            f'The origin "{origin}" is not a valid origin',
            payload={"origin": origin},
        )
        self.origin = origin


class DisallowedOriginError(CorsError):
    """Raised when an actual cross-origin request comes from an origin no pattern allows."""

    status_code = 403

    def __init__(self, origin: str):
        super().__init__(
            f'The origin "{origin}" is not authorized',
            payload={"origin": origin},
        )
        self.origin = origin


class CorsOptionsError(ValueError):
    """Raised for invalid CORS configuration or route overrides."""

    def __init__(self, message: str, *, errors: dict[str, Any] | None = None):
        super().__init__(message)
        self.errors = errors or {}


DEFAULT_STATUS_MESSAGES: dict[int, str] = {
    400: "Request could not be processed.",
    403: "Cross-origin request refused.",
    404: "Resource not found.",
}


def error_response(error: APIError) -> Response:
    """Render an API error as a JSON response."""

    message = error.message or DEFAULT_STATUS_MESSAGES.get(error.status_code, "Request failed.")
    body = {"message": message}
    if error.payload:
        body.update(error.payload)

    response = jsonify(body)
    response.status_code = error.status_code
    return response


def register_error_handlers(app: Flask) -> None:
    """Attach error handlers to the Flask application."""

    @app.errorhandler(APIError)
    def handle_api_error(error: APIError):
        return error_response(error)
