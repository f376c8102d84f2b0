"""Origin values, allow patterns and origin matching."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from urllib.parse import urlsplit

from corsguard.errors import CorsOptionsError, InvalidOriginError

WILDCARD = "*"
SCHEME_SEPARATOR = "://"


@dataclass(frozen=True)
class Origin:
    """A ``scheme://host[:port]`` triple. Default ports are never inferred."""

    scheme: str
    host: str
    port: int | None = None

    def serialize(self) -> str:
        if self.port is None:
            return f"{self.scheme}://{self.host}"
        return f"{self.scheme}://{self.host}:{self.port}"


def _split(value: str | None):
    candidate = (value or "").strip()
    try:
        parts = urlsplit(candidate)
        port = parts.port
    except ValueError as exc:
        raise InvalidOriginError(value) from exc

    if not parts.scheme or not parts.hostname:
        raise InvalidOriginError(value)
    return parts, Origin(scheme=parts.scheme.lower(), host=parts.hostname, port=port)


def parse_origin(value: str | None) -> Origin:
    """Parse a ``scheme://host[:port]`` origin or raise :class:`InvalidOriginError`.

    Userinfo, query, fragment and any path other than a lone ``/`` are rejected.
    """

    parts, origin = _split(value)
    if (
        parts.username is not None
        or parts.password is not None
        or parts.query
        or parts.fragment
        or parts.path not in ("", "/")
    ):
        raise InvalidOriginError(value)
    return origin


def url_origin(url: str | None) -> Origin | None:
    """Return the origin of a full request URL, or ``None`` when it has no host."""

    try:
        return _split(url)[1]
    except InvalidOriginError:
        return None


@dataclass(frozen=True)
class AnyOrigin:
    """``*``: every origin is allowed."""

    def matches(self, origin: Origin) -> bool:
        return True

    def __str__(self) -> str:
        return WILDCARD


@dataclass(frozen=True)
class ExactOrigin:
    """A single origin, compared on scheme, host and port."""

    origin: Origin

    def matches(self, origin: Origin) -> bool:
        return origin == self.origin

    def __str__(self) -> str:
        return self.origin.serialize()


@dataclass(frozen=True)
class SubdomainWildcard:
    """``[scheme://]*.domain.tld``: strict subdomains of ``domain``.

    The root domain itself is not matched. When ``scheme`` is set the
    requester scheme must equal it; the requester port is unconstrained.
    """

    domain: str
    scheme: str | None = None

    def matches(self, origin: Origin) -> bool:
        if self.scheme is not None and origin.scheme != self.scheme:
            return False
        suffix = "." + self.domain
        if not origin.host.endswith(suffix):
            return False
        label = origin.host[: -len(suffix)]
        return bool(label) and not label.endswith(".") and not label.startswith(".")

    def __str__(self) -> str:
        prefix = f"{self.scheme}{SCHEME_SEPARATOR}" if self.scheme else ""
        return f"{prefix}*.{self.domain}"


AllowPattern = AnyOrigin | ExactOrigin | SubdomainWildcard


def parse_pattern(raw: str) -> AllowPattern:
    """Parse one configured allow pattern."""

    value = (raw or "").strip()
    if not value:
        raise CorsOptionsError("Allowed origin patterns cannot be empty.")
    if value == WILDCARD:
        return AnyOrigin()
    if WILDCARD in value:
        return _parse_wildcard(value)

    try:
        return ExactOrigin(parse_origin(value))
    except InvalidOriginError as exc:
        raise CorsOptionsError(
            f"Allowed origin '{value}' must be '*', an absolute origin or a '*.domain' wildcard."
        ) from exc


def _parse_wildcard(value: str) -> SubdomainWildcard:
    scheme: str | None = None
    remainder = value
    if SCHEME_SEPARATOR in value:
        scheme, remainder = value.split(SCHEME_SEPARATOR, 1)
        scheme = scheme.lower()
        if not scheme or WILDCARD in scheme:
            raise CorsOptionsError(f"Invalid scheme in allowed origin pattern '{value}'.")

    domain = remainder[2:].lower() if remainder.startswith("*.") else ""
    if not domain or WILDCARD in domain or "/" in domain or domain.startswith("."):
        raise CorsOptionsError(
            f"Wildcard origin '{value}' must have the form '[scheme://]*.domain.tld'."
        )
    return SubdomainWildcard(domain=domain, scheme=scheme)


def parse_patterns(raw_patterns: Iterable[str]) -> tuple[AllowPattern, ...]:
    return tuple(parse_pattern(raw) for raw in raw_patterns)


def match_origin(
    request_origin: str | None,
    patterns: Iterable[AllowPattern | str],
) -> str | None:
    """Return the origin to echo back, or ``None`` when no pattern allows it.

    Patterns are tried in order and the first match wins. The value returned
    is always the requester's own origin, never the literal ``*``.
    """

    if request_origin is None:
        return None
    requested = request_origin.strip()
    parsed = parse_origin(requested)

    for pattern in patterns:
        if isinstance(pattern, str):
            pattern = parse_pattern(pattern)
        if pattern.matches(parsed):
            return requested
    return None
