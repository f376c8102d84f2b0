"""Route handlers for health checks."""

from __future__ import annotations

from flask import current_app
from flask.views import MethodView

from corsguard.extension import cors_route, get_cors_service
from corsguard.schemas import CorsPolicySchema, ErrorMessageSchema, HealthStatusSchema

from . import blp


@blp.route("")
class HealthStatus(MethodView):
    @blp.response(200, HealthStatusSchema())
    @blp.alt_response(403, schema=ErrorMessageSchema, description="Origin not authorized")
    def get(self):
        return {
            "status": "ok",
            "app": current_app.config.get("APP_NAME", "corsguard"),
        }


@blp.route("/cors")
@cors_route(allowed_methods=["GET", "OPTIONS"], exposed_headers=[])
class HealthCorsPolicy(MethodView):
    @blp.response(200, CorsPolicySchema())
    @blp.alt_response(403, schema=ErrorMessageSchema, description="Origin not authorized")
    def get(self):
        """Report the global CORS policy the service enforces."""

        return get_cors_service().options.as_dict()
