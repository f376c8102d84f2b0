"""Schemas for API responses."""

from __future__ import annotations

from marshmallow import Schema, fields


class HealthStatusSchema(Schema):
    status = fields.String(required=True)
    app = fields.String()


class CorsPolicySchema(Schema):
    allowed_origins = fields.List(fields.String(), required=True)
    allowed_methods = fields.List(fields.String(), required=True)
    allowed_headers = fields.List(fields.String(), required=True)
    exposed_headers = fields.List(fields.String(), required=True)
    max_age = fields.Integer(allow_none=True)
    allowed_credentials = fields.Boolean(required=True)


class ErrorMessageSchema(Schema):
    message = fields.String(required=True)
    origin = fields.String(allow_none=True)
