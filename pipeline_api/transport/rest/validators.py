"""Integration helpers for OpenAPI request validation."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping

from flask import Request
from jsonschema_path import SchemaPath
from openapi_core import V30RequestUnmarshaller, V31RequestUnmarshaller
from openapi_core.contrib.flask import FlaskOpenAPIRequest
from openapi_core.templating.paths.exceptions import PathError

from ...errors import ValidationError
from ...utils.openapi import to_plain


class OpenAPIValidationError(ValidationError):
    """Raised when a request does not match the OpenAPI document."""

    default_message = "Invalid request"


@dataclass
class UnmarshalledRequest:
    """Path, query and body values cast according to the document."""

    path: Dict[str, Any] = field(default_factory=dict)
    query: Dict[str, Any] = field(default_factory=dict)
    body: Any = None


def _describe(error: Exception) -> str:
    message = str(error) or type(error).__name__
    cause = error.__cause__
    if cause is not None and str(cause):
        return f"{message}: {cause}"
    return message


class OpenAPIRequestValidator:
    """Wraps openapi-core request unmarshallers for one revision of a document."""

    def __init__(self, document: Mapping[str, Any]) -> None:
        spec = to_plain(document)
        # Routes are matched on their path only.
        spec["servers"] = [{"url": "/"}]
        self.spec = SchemaPath.from_dict(spec)
        if str(spec.get("openapi", "3.0")).startswith("3.1"):
            unmarshaller_cls = V31RequestUnmarshaller
        else:
            unmarshaller_cls = V30RequestUnmarshaller
        self.unmarshaller = unmarshaller_cls(self.spec)

    def unmarshal(self, request: Request) -> UnmarshalledRequest | None:
        """Return the cast request values, or ``None`` for undocumented routes."""

        result = self.unmarshaller.unmarshal(FlaskOpenAPIRequest(request))
        if any(isinstance(error, PathError) for error in result.errors):
            return None
        if result.errors:
            raise OpenAPIValidationError(
                details={"errors": [_describe(error) for error in result.errors]}
            )
        parameters = result.parameters
        return UnmarshalledRequest(
            path=dict(parameters.path or {}),
            query=dict(parameters.query or {}),
            body=result.body,
        )
