from __future__ import annotations

import logging

import pytest
from werkzeug.wrappers import Response

from corsguard.errors import DisallowedOriginError, InvalidOriginError
from corsguard.options import ROUTE_PARAM, CorsOptions
from corsguard.service import CorsService


def _origin_request(make_request, origin, **kwargs):
    headers = {"Origin": origin}
    headers.update(kwargs.pop("headers", {}))
    return make_request(headers=headers, **kwargs)


def test_detects_cors_and_preflight_requests(cors_service, make_request):
    assert cors_service.is_cors_request(make_request()) is False
    assert cors_service.is_cors_request(_origin_request(make_request, "http://example.com")) is True

    preflight = _origin_request(
        make_request,
        "http://example.com",
        method="OPTIONS",
        headers={"Access-Control-Request-Method": "POST"},
    )
    assert cors_service.is_preflight_request(preflight) is True


def test_does_not_crash_on_invalid_origin_value(cors_service, make_request):
    request = _origin_request(make_request, "file:", url="https://example.com")
    with pytest.raises(InvalidOriginError):
        cors_service.is_cors_request(request)


def test_properly_creates_preflight_response(cors_service, make_request):
    response = cors_service.create_preflight_cors_response(
        _origin_request(make_request, "http://example.com")
    )

    assert isinstance(response, Response)
    assert response.status_code == 200
    assert response.headers["Access-Control-Allow-Origin"] == "http://example.com"
    assert response.headers["Access-Control-Allow-Credentials"] == "true"


def test_does_not_add_allow_credentials_if_disabled(cors_service, make_request):
    cors_service.options = cors_service.options.replace(allowed_credentials=False)

    response = cors_service.create_preflight_cors_response(
        _origin_request(make_request, "http://example.com")
    )

    assert "Access-Control-Allow-Credentials" not in response.headers


@pytest.mark.parametrize(
    ("patterns", "origin", "expected"),
    [
        (["*"], "http://funny-origin.com", "http://funny-origin.com"),
        (["*.example.com"], "http://subdomain.example.com", "http://subdomain.example.com"),
        (["https://*.example.com"], "https://subdomain.example.com", "https://subdomain.example.com"),
        (["*.example.com"], "http://subdomain.example.org", "null"),
        (["*.example.com"], "http://example.com", "null"),
        (["http://*.example.com"], "https://example.com", "null"),
        (["http://example.com"], "http://unauthorized-origin.com", "null"),
    ],
)
def test_preflight_allow_origin_value(cors_service, make_request, patterns, origin, expected):
    cors_service.options = cors_service.options.replace(allowed_origins=patterns)

    response = cors_service.create_preflight_cors_response(_origin_request(make_request, origin))

    assert response.headers["Access-Control-Allow-Origin"] == expected


def test_preflight_denial_is_logged(cors_service, make_request, caplog):
    caplog.set_level(logging.INFO, logger="corsguard.service")

    cors_service.create_preflight_cors_response(
        _origin_request(make_request, "http://unauthorized-origin.com")
    )

    records = [record for record in caplog.records if record.message == "Preflight origin denied"]
    assert records
    assert records[-1].origin == "http://unauthorized-origin.com"
    assert records[-1].outcome == "denied"


def test_ensure_vary_header_without_origin(cors_service):
    response = cors_service.ensure_vary_header(Response())
    assert "Origin" in response.headers["Vary"]
    assert "Origin" not in response.headers


def test_no_vary_header_when_accepting_any_origin():
    service = CorsService(CorsOptions(allowed_origins=["*"]))
    response = service.ensure_vary_header(Response())
    assert "Vary" not in response.headers


def test_populates_normal_cors_request(cors_service, make_request):
    response = cors_service.populate_cors_response(
        _origin_request(make_request, "http://example.com"), Response()
    )

    assert response.headers["Access-Control-Allow-Origin"] == "http://example.com"
    assert response.headers["Access-Control-Expose-Headers"] == "Location"
    assert response.headers["Access-Control-Allow-Credentials"] == "true"
    assert response.headers["Vary"] == "Origin"


def test_appends_vary_header_in_normal_request(cors_service, make_request):
    response = Response(headers={"Vary": "Foo"})
    cors_service.populate_cors_response(_origin_request(make_request, "http://example.com"), response)
    assert response.headers["Vary"] == "Foo, Origin"


def test_refuses_normal_cors_request_if_unauthorized(cors_service, make_request, caplog):
    caplog.set_level(logging.WARNING, logger="corsguard.service")

    with pytest.raises(DisallowedOriginError, match='The origin "http://unauthorized.com" is not authorized'):
        cors_service.populate_cors_response(
            _origin_request(make_request, "http://unauthorized.com"), Response()
        )

    records = [record for record in caplog.records if record.message == "Cross-origin request refused"]
    assert records
    assert records[-1].outcome == "disallowed"


def test_handles_unconfigured_route_match(cors_service, make_request):
    response = cors_service.create_preflight_cors_response_with_route_options(
        _origin_request(make_request, "http://example.com"), {}
    )

    assert response.status_code == 200
    assert response.get_data() == b""
    assert response.headers["Access-Control-Allow-Origin"] == "http://example.com"
    assert response.headers["Access-Control-Allow-Methods"] == "GET, POST, PUT, DELETE, OPTIONS"
    assert response.headers["Access-Control-Allow-Headers"] == "Content-Type, Accept"
    assert response.headers["Access-Control-Max-Age"] == "10"
    assert response.headers["Content-Length"] == "0"
    assert response.headers["Access-Control-Allow-Credentials"] == "true"


def test_handles_configured_route_match(cors_service, make_request):
    route_match = {
        ROUTE_PARAM: {
            "allowed_origins": ["http://example.org"],
            "allowed_methods": ["POST", "DELETE", "OPTIONS"],
            "allowed_headers": ["Content-Type", "Accept", "Cookie"],
            "exposed_headers": ["Location"],
            "max_age": 5,
            "allowed_credentials": False,
        }
    }

    response = cors_service.create_preflight_cors_response_with_route_options(
        _origin_request(make_request, "http://example.org"), route_match
    )

    assert response.status_code == 200
    assert response.headers["Access-Control-Allow-Origin"] == "http://example.org"
    assert response.headers["Access-Control-Allow-Methods"] == "POST, DELETE, OPTIONS"
    assert response.headers["Access-Control-Allow-Headers"] == "Content-Type, Accept, Cookie"
    assert response.headers["Access-Control-Max-Age"] == "5"
    assert response.headers["Content-Length"] == "0"
    assert "Access-Control-Allow-Credentials" not in response.headers


def test_partial_route_override_keeps_global_values(cors_service, make_request):
    route_match = {ROUTE_PARAM: {"allowed_origins": ["http://example.org"]}}

    response = cors_service.create_preflight_cors_response_with_route_options(
        _origin_request(make_request, "http://example.org"), route_match
    )

    assert response.headers["Access-Control-Allow-Methods"] == "GET, POST, PUT, DELETE, OPTIONS"
    assert response.headers["Access-Control-Max-Age"] == "10"
    assert cors_service.options.allowed_origins == ("http://example.com",)


def test_populates_normal_cors_request_with_route_match(cors_service, make_request):
    route_match = {ROUTE_PARAM: {"allowed_origins": ["http://example.org"]}}

    response = cors_service.populate_cors_response(
        _origin_request(make_request, "http://example.org"), Response(), route_match
    )

    assert isinstance(response, Response)
    assert response.headers["Access-Control-Allow-Origin"] == "http://example.org"


def test_route_match_override_rejects_global_origin(cors_service, make_request):
    route_match = {ROUTE_PARAM: {"allowed_origins": ["http://example.org"]}}

    with pytest.raises(DisallowedOriginError):
        cors_service.populate_cors_response(
            _origin_request(make_request, "http://example.com"), Response(), route_match
        )


def test_options_setter_requires_options_record(cors_service):
    with pytest.raises(TypeError):
        cors_service.options = {"allowed_origins": ["*"]}  # type: ignore[assignment]
