"""Shared pytest fixtures."""

from __future__ import annotations

import sys
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest
from werkzeug.test import EnvironBuilder
from werkzeug.wrappers import Request

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from corsguard import create_app  # noqa: E402
from corsguard.options import CorsOptions  # noqa: E402
from corsguard.service import CorsService  # noqa: E402


@pytest.fixture(scope="session")
def app() -> Iterator:
    """Session-wide Flask application using the testing configuration."""

    flask_app = create_app("testing")
    yield flask_app


@pytest.fixture()
def client(app):
    """Provide a Flask test client."""

    with app.test_client() as client:
        yield client


@pytest.fixture()
def make_request() -> Callable[..., Request]:
    """Build a werkzeug request view for the given method, URL and headers."""

    def _factory(
        method: str = "GET",
        url: str = "http://localhost",
        headers: dict[str, str] | None = None,
    ) -> Request:
        builder = EnvironBuilder(path="/", base_url=url, method=method, headers=headers or {})
        try:
            return builder.get_request()
        finally:
            builder.close()

    return _factory


@pytest.fixture()
def cors_options() -> CorsOptions:
    return CorsOptions(
        allowed_origins=["http://example.com"],
        allowed_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allowed_headers=["Content-Type", "Accept"],
        exposed_headers=["Location"],
        max_age=10,
        allowed_credentials=True,
    )


@pytest.fixture()
def cors_service(cors_options: CorsOptions) -> CorsService:
    return CorsService(cors_options)
