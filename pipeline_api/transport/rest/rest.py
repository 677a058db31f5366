"""REST transport: CRUD routes for every registered pipeline."""

from __future__ import annotations

import copy
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, Mapping

from flask import Blueprint, current_app, jsonify, request

from ...errors import NotFoundError, PipelineError, RegistrationError, ValidationError
from ...pipeline import PipelineAbstract, Results, SchemaBuilders
from ...utils.responses import pipeline_error_response
from .. import TransportInterface
from .openapi import ERROR_SCHEMA, build_path_items
from .validators import OpenAPIRequestValidator

if TYPE_CHECKING:  # pragma: no cover - circular import guard
    from ...api import Api

__all__ = ["RestTransport"]


@dataclass
class _RequestInput:
    query: Dict[str, Any] = field(default_factory=dict)
    options: Dict[str, Any] = field(default_factory=dict)
    body: Any = None
    id: Any = None


def _normalize_prefix(prefix: str) -> str:
    prefix = (prefix or "").strip().rstrip("/")
    if prefix and not prefix.startswith("/"):
        prefix = f"/{prefix}"
    return prefix


def _blueprint_name(prefix: str, plural_name: str) -> str:
    # Flask rejects dots in blueprint names
    return re.sub(r"\W", "_", f"rest{prefix}_{plural_name}")


def _first(results: Results, name: str, id: Any) -> Dict[str, Any]:
    if not results.data:
        raise NotFoundError(f"No {name} found with id '{id}'")
    return results.data[0]


def _require_object(body: Any) -> Dict[str, Any]:
    if not isinstance(body, Mapping):
        raise ValidationError("Request body must be a JSON object")
    return dict(body)


class RestTransport(TransportInterface):
    """Expose pipelines as REST resources under ``<prefix>/<plural_name>``."""

    def __init__(self, prefix: str = "") -> None:
        self.prefix = _normalize_prefix(prefix)
        self.api: "Api" | None = None
        self._validator: OpenAPIRequestValidator | None = None
        self._validator_revision: int | None = None

    def init(self, api: "Api") -> None:
        self.api = api
        schemas = api.open_api["components"].setdefault("schemas", {})
        schemas.setdefault("Error", copy.deepcopy(ERROR_SCHEMA))
        api.document_changed()

    def use(self, pipeline: PipelineAbstract, name: str, plural_name: str) -> None:
        api = self._require_api()
        paths = api.open_api.setdefault("paths", {})
        path_items = build_path_items(api, pipeline, name, plural_name, prefix=self.prefix)
        collisions = sorted(path for path in path_items if path in paths)
        if collisions:
            raise RegistrationError(f"Paths already documented: {', '.join(collisions)}")

        # A rejected blueprint leaves the paths untouched.
        api.application.register_blueprint(self._create_blueprint(pipeline, name, plural_name))
        paths.update(path_items)
        api.document_changed()
        api.logger.info(
            "REST routes registered",
            extra={"collection": plural_name, "paths": sorted(path_items)},
        )

    def _require_api(self) -> "Api":
        if self.api is None:
            raise RuntimeError("RestTransport.use() called before init()")
        return self.api

    def _current_validator(self) -> OpenAPIRequestValidator:
        api = self._require_api()
        if self._validator is None or self._validator_revision != api.revision:
            self._validator = OpenAPIRequestValidator(api.open_api)
            self._validator_revision = api.revision
        return self._validator

    def _request_input(self, operation: str, builders: SchemaBuilders) -> _RequestInput:
        api = self._require_api()
        unmarshalled = self._current_validator().unmarshal(request)
        if unmarshalled is None:
            current_app.logger.debug(
                "Route missing from the OpenAPI document, using raw request values",
                extra={"route": getattr(request.url_rule, "rule", request.path)},
            )
            query_values: Dict[str, Any] = request.args.to_dict()
            path_values: Dict[str, Any] = dict(request.view_args or {})
            body = request.get_json(silent=True)
        else:
            query_values = unmarshalled.query
            path_values = unmarshalled.path
            body = unmarshalled.body

        options_schema = builders.options_for(operation) or {}
        option_names = set(options_schema.get("properties") or {})
        options = {key: value for key, value in query_values.items() if key in option_names}
        query = {key: value for key, value in query_values.items() if key not in option_names}
        return _RequestInput(
            query=api.filter_internal_options(query),
            options=api.filter_internal_options(options),
            body=body,
            id=path_values.get("id"),
        )

    def _create_blueprint(self, pipeline: PipelineAbstract, name: str, plural_name: str) -> Blueprint:
        blueprint = Blueprint(
            _blueprint_name(self.prefix, plural_name),
            __name__,
            url_prefix=f"{self.prefix}/{plural_name}",
        )
        builders = pipeline.schema_builders

        @blueprint.errorhandler(PipelineError)
        def _handle_pipeline_error(exc: PipelineError):
            log = current_app.logger.warning if exc.status_code >= 500 else current_app.logger.info
            log(
                "Pipeline request failed: %s",
                exc.message,
                extra={"status": exc.status_code, "collection": plural_name},
            )
            return pipeline_error_response(exc)

        if builders.supports("read"):

            @blueprint.get("")
            def find():
                params = self._request_input("read", builders)
                results = pipeline.read(params.query, params.options)
                return jsonify(results.as_dict())

            @blueprint.get("/<id>")
            def get_one(id: str):
                params = self._request_input("read", builders)
                results = pipeline.read({**params.query, "id": params.id}, params.options)
                return jsonify(_first(results, name, params.id))

        if builders.supports("create"):

            @blueprint.post("")
            def create():
                params = self._request_input("create", builders)
                body = params.body
                if isinstance(body, Mapping):
                    results = pipeline.create([body], params.options)
                    return jsonify(_first(results, name, body.get("id"))), 201
                if not isinstance(body, list):
                    raise ValidationError("Request body must be a JSON object or array")
                results = pipeline.create(body, params.options)
                return jsonify(results.data), 201

        if builders.supports("update"):

            @blueprint.put("/<id>")
            def replace(id: str):
                params = self._request_input("update", builders)
                values = _require_object(params.body)
                results = pipeline.update(params.id, values, params.options)
                return jsonify(_first(results, name, params.id))

        if builders.supports("patch"):

            @blueprint.patch("/<id>")
            def patch(id: str):
                params = self._request_input("patch", builders)
                values = _require_object(params.body)
                results = pipeline.patch({**params.query, "id": params.id}, values, params.options)
                return jsonify(_first(results, name, params.id))

        if builders.supports("delete"):

            @blueprint.delete("/<id>")
            def delete(id: str):
                params = self._request_input("delete", builders)
                results = pipeline.delete({**params.query, "id": params.id}, params.options)
                return jsonify(_first(results, name, params.id))

        return blueprint
