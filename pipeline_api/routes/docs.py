"""Blueprint exposing the OpenAPI document of the registry."""

from __future__ import annotations

from typing import TYPE_CHECKING

from flask import Blueprint, current_app, jsonify

from ..utils.openapi import render_openapi_yaml

if TYPE_CHECKING:  # pragma: no cover - circular import guard
    from ..api import Api

__all__ = ["create_docs_blueprint"]


def create_docs_blueprint(api: "Api") -> Blueprint:
    """Expose the document via ``/api.json`` and ``/api.yaml``."""

    blueprint = Blueprint("openapi_docs", __name__)

    @blueprint.get("/api.json")
    def serve_json():
        return jsonify(api.open_api)

    @blueprint.get("/api.yaml")
    def serve_yaml():
        payload = render_openapi_yaml(api.open_api)
        response = current_app.response_class(payload, mimetype="application/yaml")
        response.headers.setdefault("Cache-Control", "no-cache")
        return response

    return blueprint
