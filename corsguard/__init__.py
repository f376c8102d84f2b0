"""Application factory for the corsguard demo service."""

from __future__ import annotations

from flask import Flask
from flask_smorest import Api

from config import get_config


def create_app(config_name: str | None = None) -> Flask:
    """Application factory adhering to the Flask app factory pattern."""

    app = Flask(__name__)
    config_class = get_config(config_name)
    app.config.from_object(config_class)

    _configure_api(app)
    api = _register_extensions(app)
    _register_blueprints(app, api)
    _register_error_handlers(app)
    return app


def _configure_api(app: Flask) -> None:
    app.config.setdefault("API_TITLE", "corsguard API")
    app.config.setdefault("API_VERSION", "v1")
    app.config.setdefault("OPENAPI_VERSION", "3.0.3")


def _register_extensions(app: Flask) -> Api:
    from .extension import init_cors
    from .logging import setup_logging

    setup_logging(app)
    init_cors(app)

    api = Api(app)
    app.extensions["smorest_api"] = api
    return api


def _register_blueprints(app: Flask, api: Api) -> None:
    from .health import blp as health_blp

    api.register_blueprint(health_blp, url_prefix="/health")


def _register_error_handlers(app: Flask) -> None:
    from .errors import register_error_handlers

    register_error_handlers(app)
