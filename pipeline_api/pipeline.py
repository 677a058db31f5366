"""Pipeline base class and schema helpers.

A pipeline is a CRUD-like resource handler. It declares JSON schemas for the
input of each operation; the public methods validate their arguments against
those schemas before delegating to the ``_create``/``_read``/... hooks that
concrete pipelines implement.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional

import jsonschema

from .errors import MethodNotImplementedError, ValidationError

__all__ = [
    "OPERATIONS",
    "PipelineAbstract",
    "Results",
    "SchemaBuilders",
    "default_schema_builders",
    "empty_schema",
]

Schema = Dict[str, Any]

OPERATIONS = ("read", "create", "update", "patch", "delete")

_MAIN_SCHEMAS = {
    "create": "create_values",
    "read": "read_query",
    "update": "update_values",
    "patch": "patch_values",
    "delete": "delete_query",
}


def empty_schema() -> Schema:
    """Return a schema accepting only an empty object."""

    return {"type": "object", "properties": {}, "additionalProperties": False}


def _object_schema(
    properties: Mapping[str, Any],
    required: Iterable[str] = (),
    *,
    additional_properties: Any = False,
) -> Schema:
    schema: Schema = {
        "type": "object",
        "properties": copy.deepcopy(dict(properties)),
        "additionalProperties": additional_properties,
    }
    required_names = [name for name in required if name in properties]
    if required_names:
        schema["required"] = required_names
    return schema


@dataclass(frozen=True)
class SchemaBuilders:
    """Schemas declared by a pipeline, one per operation input."""

    model: Schema
    create_values: Optional[Schema] = None
    create_options: Optional[Schema] = None
    read_query: Optional[Schema] = None
    read_options: Optional[Schema] = None
    update_values: Optional[Schema] = None
    update_options: Optional[Schema] = None
    patch_query: Optional[Schema] = None
    patch_values: Optional[Schema] = None
    patch_options: Optional[Schema] = None
    delete_query: Optional[Schema] = None
    delete_options: Optional[Schema] = None

    def options_for(self, operation: str) -> Optional[Schema]:
        return getattr(self, f"{operation}_options")

    def supports(self, operation: str) -> bool:
        return getattr(self, _MAIN_SCHEMAS[operation]) is not None

    @property
    def id_schema(self) -> Schema:
        properties = self.model.get("properties") or {}
        return copy.deepcopy(properties.get("id") or {"type": "string"})


def default_schema_builders(model: Mapping[str, Any]) -> SchemaBuilders:
    """Derive the schemas of every operation from a model schema."""

    model_schema: Schema = copy.deepcopy(dict(model))
    properties = dict(model_schema.get("properties") or {})
    required = [name for name in model_schema.get("required", ()) if name != "id"]
    additional = model_schema.get("additionalProperties", False)
    values = {name: schema for name, schema in properties.items() if name != "id"}
    id_only = {"id": properties.get("id") or {"type": "string"}}

    return SchemaBuilders(
        model=model_schema,
        create_values=_object_schema(properties, required, additional_properties=additional),
        create_options=empty_schema(),
        read_query=_object_schema(properties),
        read_options=empty_schema(),
        update_values=_object_schema(values, required, additional_properties=additional),
        update_options=empty_schema(),
        patch_query=_object_schema(id_only, ["id"]),
        patch_values=_object_schema(values, additional_properties=additional),
        patch_options=empty_schema(),
        delete_query=_object_schema(id_only, ["id"]),
        delete_options=empty_schema(),
    )


@dataclass
class Results:
    """Outcome of a pipeline operation."""

    data: List[Dict[str, Any]] = field(default_factory=list)
    meta: Dict[str, Any] = field(default_factory=dict)

    def as_dict(self) -> Dict[str, Any]:
        return {"data": list(self.data), "meta": dict(self.meta)}


def _validate(schema: Optional[Schema], instance: Any, label: str) -> None:
    if schema is None:
        return
    validator = jsonschema.Draft202012Validator(
        schema, format_checker=jsonschema.Draft202012Validator.FORMAT_CHECKER
    )
    errors = sorted(validator.iter_errors(instance), key=lambda e: [str(p) for p in e.path])
    if errors:
        e0 = errors[0]
        path = "/".join(str(p) for p in e0.path) or "<root>"
        raise ValidationError(
            f"Invalid {label} at {path}: {e0.message}",
            details={"errors": [error.message for error in errors]},
        )


def _as_results(value: Results | Iterable[Mapping[str, Any]]) -> Results:
    if isinstance(value, Results):
        return value
    return Results(data=[dict(item) for item in value])


class PipelineAbstract:
    """Base class of the pipelines registered on an :class:`~pipeline_api.api.Api`."""

    def __init__(self, schema_builders: SchemaBuilders) -> None:
        self.schema_builders = schema_builders

    @property
    def model_schema(self) -> Schema:
        return self.schema_builders.model

    @property
    def capabilities(self) -> tuple[str, ...]:
        """Names of the operations this pipeline declares a schema for."""

        return tuple(op for op in OPERATIONS if self.schema_builders.supports(op))

    def create(
        self, resources: Iterable[Mapping[str, Any]], options: Mapping[str, Any] | None = None
    ) -> Results:
        self._require("create")
        items = [dict(resource) for resource in resources]
        opts = dict(options or {})
        _validate({"type": "array", "items": self.schema_builders.create_values}, items, "create values")
        _validate(self.schema_builders.create_options, opts, "create options")
        return _as_results(self._create(items, opts))

    def read(
        self, query: Mapping[str, Any] | None = None, options: Mapping[str, Any] | None = None
    ) -> Results:
        self._require("read")
        query = dict(query or {})
        opts = dict(options or {})
        _validate(self.schema_builders.read_query, query, "read query")
        _validate(self.schema_builders.read_options, opts, "read options")
        return _as_results(self._read(query, opts))

    def update(
        self, id: Any, values: Mapping[str, Any], options: Mapping[str, Any] | None = None
    ) -> Results:
        self._require("update")
        values = dict(values)
        opts = dict(options or {})
        _validate(self.schema_builders.id_schema, id, "update id")
        _validate(self.schema_builders.update_values, values, "update values")
        _validate(self.schema_builders.update_options, opts, "update options")
        return _as_results(self._update(id, values, opts))

    def patch(
        self,
        query: Mapping[str, Any],
        values: Mapping[str, Any],
        options: Mapping[str, Any] | None = None,
    ) -> Results:
        self._require("patch")
        query = dict(query)
        values = dict(values)
        opts = dict(options or {})
        _validate(self.schema_builders.patch_query, query, "patch query")
        _validate(self.schema_builders.patch_values, values, "patch values")
        _validate(self.schema_builders.patch_options, opts, "patch options")
        return _as_results(self._patch(query, values, opts))

    def delete(
        self, query: Mapping[str, Any], options: Mapping[str, Any] | None = None
    ) -> Results:
        self._require("delete")
        query = dict(query)
        opts = dict(options or {})
        _validate(self.schema_builders.delete_query, query, "delete query")
        _validate(self.schema_builders.delete_options, opts, "delete options")
        return _as_results(self._delete(query, opts))

    def _require(self, operation: str) -> None:
        if not self.schema_builders.supports(operation):
            raise MethodNotImplementedError(
                f"{type(self).__name__} does not support the '{operation}' operation"
            )

    def _create(self, resources: List[Dict[str, Any]], options: Dict[str, Any]) -> Results:
        raise MethodNotImplementedError(f"{type(self).__name__} does not implement create")

    def _read(self, query: Dict[str, Any], options: Dict[str, Any]) -> Results:
        raise MethodNotImplementedError(f"{type(self).__name__} does not implement read")

    def _update(self, id: Any, values: Dict[str, Any], options: Dict[str, Any]) -> Results:
        raise MethodNotImplementedError(f"{type(self).__name__} does not implement update")

    def _patch(
        self, query: Dict[str, Any], values: Dict[str, Any], options: Dict[str, Any]
    ) -> Results:
        raise MethodNotImplementedError(f"{type(self).__name__} does not implement patch")

    def _delete(self, query: Dict[str, Any], options: Dict[str, Any]) -> Results:
        raise MethodNotImplementedError(f"{type(self).__name__} does not implement delete")
