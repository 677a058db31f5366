"""OpenAPI path items describing the REST routes of a pipeline."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Mapping

if TYPE_CHECKING:  # pragma: no cover - circular import guard
    from ...api import Api
    from ...pipeline import PipelineAbstract

__all__ = ["ERROR_SCHEMA", "build_path_items"]

ERROR_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "error": {
            "type": "object",
            "properties": {
                "code": {"type": "integer"},
                "message": {"type": "string"},
                "details": {"type": "object"},
                "request_id": {"type": "string"},
            },
            "required": ["code", "message"],
        }
    },
    "required": ["error"],
}

_ERROR_DESCRIPTIONS = {
    "400": "Invalid request.",
    "404": "Resource not found.",
    "405": "Operation not supported by the pipeline.",
    "409": "Conflicting resource.",
}


def _json_content(schema: Mapping[str, Any]) -> Dict[str, Any]:
    return {"application/json": {"schema": schema}}


def _error_responses(*codes: str) -> Dict[str, Any]:
    return {
        code: {
            "description": _ERROR_DESCRIPTIONS[code],
            "content": _json_content({"$ref": "#/components/schemas/Error"}),
        }
        for code in codes
    }


def _query_parameters(
    api: "Api", schema: Mapping[str, Any] | None, *, exclude: tuple[str, ...] = ()
) -> List[Dict[str, Any]]:
    if not schema:
        return []
    required = set(schema.get("required", ()))
    parameters: List[Dict[str, Any]] = []
    for name, prop in (schema.get("properties") or {}).items():
        if name in exclude:
            continue
        parameter: Dict[str, Any] = {
            "in": "query",
            "name": name,
            "schema": api.public_schema(prop),
        }
        if name in required:
            parameter["required"] = True
        if prop.get("description"):
            parameter["description"] = prop["description"]
        parameters.append(parameter)
    return api.filter_internal_parameters(parameters)


def _operation(
    operation_id: str,
    summary: str,
    tag: str,
    parameters: List[Dict[str, Any]],
    responses: Dict[str, Any],
    request_body: Mapping[str, Any] | None = None,
) -> Dict[str, Any]:
    operation: Dict[str, Any] = {
        "operationId": operation_id,
        "summary": summary,
        "tags": [tag],
        "responses": responses,
    }
    if parameters:
        operation["parameters"] = parameters
    if request_body is not None:
        operation["requestBody"] = {"required": True, "content": _json_content(request_body)}
    return operation


def build_path_items(
    api: "Api",
    pipeline: "PipelineAbstract",
    name: str,
    plural_name: str,
    *,
    prefix: str = "",
) -> Dict[str, Dict[str, Any]]:
    """Return the ``paths`` entries for the operations ``pipeline`` supports."""

    builders = pipeline.schema_builders
    upper_name = name[:1].upper() + name[1:]
    upper_plural = plural_name[:1].upper() + plural_name[1:]
    item_ref = api.schema_ref(name)
    results_schema = {
        "type": "object",
        "properties": {
            "data": {"type": "array", "items": item_ref},
            "meta": {"type": "object"},
        },
    }
    id_parameter = {
        "in": "path",
        "name": "id",
        "required": True,
        "schema": api.public_schema(builders.id_schema),
    }

    collection: Dict[str, Any] = {}
    item: Dict[str, Any] = {}

    if builders.supports("read"):
        collection["get"] = _operation(
            f"find{upper_plural}",
            f"Find {plural_name}",
            plural_name,
            _query_parameters(api, builders.read_query)
            + _query_parameters(api, builders.read_options),
            {
                "200": {"description": f"List of {plural_name}.", "content": _json_content(results_schema)},
                **_error_responses("400"),
            },
        )
        item["get"] = _operation(
            f"get{upper_name}",
            f"Get one {name}",
            plural_name,
            [id_parameter]
            + _query_parameters(api, builders.read_query, exclude=("id",))
            + _query_parameters(api, builders.read_options),
            {
                "200": {"description": f"The {name}.", "content": _json_content(item_ref)},
                **_error_responses("400", "404"),
            },
        )

    if builders.supports("create"):
        values = api.public_schema(builders.create_values or {})
        collection["post"] = _operation(
            f"create{upper_name}",
            f"Create one or several {plural_name}",
            plural_name,
            _query_parameters(api, builders.create_options),
            {
                "201": {
                    "description": f"The created {name} or {plural_name}.",
                    "content": _json_content(
                        {"oneOf": [item_ref, {"type": "array", "items": item_ref}]}
                    ),
                },
                **_error_responses("400", "409"),
            },
            request_body={"oneOf": [values, {"type": "array", "items": values}]},
        )

    if builders.supports("update"):
        item["put"] = _operation(
            f"replace{upper_name}",
            f"Replace a {name}",
            plural_name,
            [id_parameter] + _query_parameters(api, builders.update_options),
            {
                "200": {"description": f"The replaced {name}.", "content": _json_content(item_ref)},
                **_error_responses("400", "404", "409"),
            },
            request_body=api.public_schema(builders.update_values or {}),
        )

    if builders.supports("patch"):
        item["patch"] = _operation(
            f"patch{upper_name}",
            f"Patch a {name}",
            plural_name,
            [id_parameter]
            + _query_parameters(api, builders.patch_query, exclude=("id",))
            + _query_parameters(api, builders.patch_options),
            {
                "200": {"description": f"The patched {name}.", "content": _json_content(item_ref)},
                **_error_responses("400", "404", "409"),
            },
            request_body=api.public_schema(builders.patch_values or {}),
        )

    if builders.supports("delete"):
        item["delete"] = _operation(
            f"delete{upper_name}",
            f"Delete a {name}",
            plural_name,
            [id_parameter]
            + _query_parameters(api, builders.delete_query, exclude=("id",))
            + _query_parameters(api, builders.delete_options),
            {
                "200": {"description": f"The deleted {name}.", "content": _json_content(item_ref)},
                **_error_responses("400", "404"),
            },
        )

    base_path = f"{prefix}/{plural_name}"
    paths: Dict[str, Dict[str, Any]] = {}
    if collection:
        paths[base_path] = collection
    if item:
        paths[f"{base_path}/{{id}}"] = item
    return paths
