"""Resolved CORS options and the per-route override merge."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, fields
from typing import Any

from marshmallow import EXCLUDE, Schema, ValidationError, fields as ma_fields, pre_load, validate

from corsguard.errors import CorsOptionsError
from corsguard.origins import WILDCARD, AllowPattern, parse_patterns

ROUTE_PARAM = "cors"

OPTION_KEYS = (
    "allowed_origins",
    "allowed_methods",
    "allowed_headers",
    "exposed_headers",
    "max_age",
    "allowed_credentials",
)

_LIST_KEYS = ("allowed_origins", "allowed_methods", "allowed_headers", "exposed_headers")

CONFIG_KEYS = {
    "allowed_origins": "CORS_ALLOWED_ORIGINS",
    "allowed_methods": "CORS_ALLOWED_METHODS",
    "allowed_headers": "CORS_ALLOWED_HEADERS",
    "exposed_headers": "CORS_EXPOSED_HEADERS",
    "max_age": "CORS_MAX_AGE",
    "allowed_credentials": "CORS_ALLOWED_CREDENTIALS",
}


def normalize_entries(raw: str | Iterable[str] | None) -> tuple[str, ...]:
    """Split a comma-separated string (or clean an iterable) into stripped tokens."""

    if raw is None:
        return ()
    if isinstance(raw, str):
        candidates = raw.split(",")
    else:
        candidates = list(raw)
    normalized: list[str] = []
    for value in candidates:
        item = (value or "").strip()
        if item:
            normalized.append(item)
    return tuple(normalized)


class CorsOptionsSchema(Schema):
    """Validates a full or partial options mapping. Unknown keys are dropped."""

    class Meta:
        unknown = EXCLUDE

    allowed_origins = ma_fields.List(ma_fields.String())
    allowed_methods = ma_fields.List(ma_fields.String())
    allowed_headers = ma_fields.List(ma_fields.String())
    exposed_headers = ma_fields.List(ma_fields.String())
    max_age = ma_fields.Integer(allow_none=True, validate=validate.Range(min=0))
    allowed_credentials = ma_fields.Boolean()

    @pre_load
    def _split_strings(self, data, **kwargs):
        if not isinstance(data, Mapping):
            return data
        prepared = dict(data)
        for key in _LIST_KEYS:
            if isinstance(prepared.get(key), str):
                prepared[key] = list(normalize_entries(prepared[key]))
        if prepared.get("max_age") == "":
            prepared["max_age"] = None
        return prepared


_schema = CorsOptionsSchema()


def load_options_mapping(data: Mapping[str, Any]) -> dict[str, Any]:
    """Validate ``data`` and return only the option keys it supplies."""

    try:
        return _schema.load(data, partial=True)
    except ValidationError as exc:
        raise CorsOptionsError(
            f"Invalid CORS options: {exc.messages}", errors=exc.messages
        ) from exc


@dataclass(frozen=True)
class CorsOptions:
    """Immutable CORS configuration; allow patterns are parsed once at construction."""

    allowed_origins: tuple[str, ...] = ()
    allowed_methods: tuple[str, ...] = ()
    allowed_headers: tuple[str, ...] = ()
    exposed_headers: tuple[str, ...] = ()
    max_age: int | None = None
    allowed_credentials: bool = False
    patterns: tuple[AllowPattern, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "allowed_origins", normalize_entries(self.allowed_origins))
        object.__setattr__(
            self,
            "allowed_methods",
            tuple(method.upper() for method in normalize_entries(self.allowed_methods)),
        )
        object.__setattr__(self, "allowed_headers", normalize_entries(self.allowed_headers))
        object.__setattr__(self, "exposed_headers", normalize_entries(self.exposed_headers))
        if self.max_age is not None:
            if isinstance(self.max_age, bool) or int(self.max_age) < 0:
                raise CorsOptionsError("max_age must be a non-negative integer.")
            object.__setattr__(self, "max_age", int(self.max_age))
        object.__setattr__(self, "allowed_credentials", bool(self.allowed_credentials))
        object.__setattr__(self, "patterns", parse_patterns(self.allowed_origins))

    @property
    def allows_any_origin(self) -> bool:
        """True only for the unconditional ``["*"]`` configuration."""

        return self.allowed_origins == (WILDCARD,)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "CorsOptions":
        return cls(**load_options_mapping(data))

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "CorsOptions":
        """Build options from the ``CORS_*`` keys of a Flask config."""

        data = {key: config[name] for key, name in CONFIG_KEYS.items() if name in config}
        return cls.from_mapping(data)

    def replace(self, **changes: Any) -> "CorsOptions":
        """Return a copy with ``changes`` applied; keys must be option names."""

        unknown = set(changes) - set(OPTION_KEYS)
        if unknown:
            raise CorsOptionsError(f"Unknown CORS option(s): {sorted(unknown)}")
        current = {item.name: getattr(self, item.name) for item in fields(self) if item.init}
        current.update(changes)
        return CorsOptions(**current)

    def as_dict(self) -> dict[str, Any]:
        return {key: getattr(self, key) for key in OPTION_KEYS}


def route_override(route_match: Mapping[str, Any] | None) -> Any:
    """Return the override stored under :data:`ROUTE_PARAM`, if any."""

    if not route_match:
        return None
    return route_match.get(ROUTE_PARAM)


def resolve_options(
    global_options: CorsOptions,
    override: Mapping[str, Any] | CorsOptions | None,
) -> CorsOptions:
    """Shallow-merge a route override over the global options.

    Keys supplied by the override replace the global value wholesale; keys it
    leaves out fall back to the global value. The global record is never
    mutated.
    """

    if override is None:
        return global_options
    if isinstance(override, CorsOptions):
        return override
    if not override:
        return global_options

    supplied = load_options_mapping(override)
    if not supplied:
        return global_options
    return global_options.replace(**supplied)
