"""Registry exposing pipelines through the configured transports."""

from __future__ import annotations

import copy
import logging
from typing import Any, Dict, List, Mapping, MutableMapping, Tuple

from flask import Flask

from .errors import RegistrationError
from .options import (
    INTERNAL_OPTION_PREFIX,
    filter_internal_options,
    filter_internal_parameters,
    is_not_an_internal_option,
)
from .pipeline import PipelineAbstract
from .routes.docs import create_docs_blueprint
from .transport import TransportInterface

__all__ = ["Api"]

_DEFAULT_DOCUMENT: Dict[str, Any] = {
    "openapi": "3.0.0",
    "info": {"title": "Pipeline API", "version": "1.0.0"},
    "paths": {},
    "components": {"schemas": {}, "parameters": {}},
}

Registration = Tuple[PipelineAbstract, str, str]


def _merge_defaults(target: MutableMapping[str, Any], defaults: Mapping[str, Any]) -> None:
    for key, value in defaults.items():
        if key not in target or target[key] is None:
            target[key] = copy.deepcopy(value)
        elif isinstance(value, Mapping) and isinstance(target[key], MutableMapping):
            _merge_defaults(target[key], value)


def _schema_name(name: str) -> str:
    return name[:1].upper() + name[1:]


class Api:
    """Own the OpenAPI document and broadcast pipelines to every transport."""

    internal_option_prefix = INTERNAL_OPTION_PREFIX

    def __init__(
        self, application: Flask, open_api: MutableMapping[str, Any] | None = None
    ) -> None:
        self.application = application
        self.open_api: MutableMapping[str, Any] = open_api if open_api is not None else {}
        _merge_defaults(self.open_api, _DEFAULT_DOCUMENT)
        self.pipeline_by_name: Dict[str, PipelineAbstract] = {}
        self.transports: List[TransportInterface] = []
        self.revision = 0
        self._registrations: List[Registration] = []

        application.register_blueprint(create_docs_blueprint(self))
        application.extensions["pipeline_api"] = self

    @property
    def logger(self) -> logging.Logger:
        return self.application.logger

    def configure(self, transport: TransportInterface) -> "Api":
        """Add ``transport`` and hand it the pipelines registered so far."""

        self.transports.append(transport)
        transport.init(self)
        self.logger.info(
            "Transport configured", extra={"transport": type(transport).__name__}
        )
        for pipeline, name, plural_name in self._registrations:
            transport.use(pipeline, name, plural_name)
        return self

    def use(self, pipeline: PipelineAbstract, name: str, plural_name: str | None = None) -> "Api":
        """Register ``pipeline`` under ``name`` and forward it to the transports."""

        plural_name = plural_name or f"{name}s"
        if plural_name in self.pipeline_by_name:
            raise RegistrationError(f"A pipeline named '{plural_name}' is already registered")
        schemas = self.open_api["components"].setdefault("schemas", {})
        schema_name = _schema_name(name)
        if schema_name in schemas:
            raise RegistrationError(f"A schema named '{schema_name}' is already registered")

        snapshot = copy.deepcopy(self.open_api)
        # Transports reference the model schema, so it goes in first.
        schemas[schema_name] = self.public_schema(pipeline.model_schema)
        self.document_changed()
        try:
            for transport in self.transports:
                transport.use(pipeline, name, plural_name)
        except Exception:
            self.open_api.clear()
            self.open_api.update(snapshot)
            self.document_changed()
            raise

        self.pipeline_by_name[plural_name] = pipeline
        self._registrations.append((pipeline, name, plural_name))
        self.logger.info(
            "Pipeline registered",
            extra={
                "pipeline": type(pipeline).__name__,
                "resource": name,
                "collection": plural_name,
                "capabilities": list(pipeline.capabilities),
            },
        )
        return self

    def document_changed(self) -> None:
        """Mark the OpenAPI document as modified."""

        self.revision += 1

    def schema_ref(self, name: str) -> Dict[str, str]:
        return {"$ref": f"#/components/schemas/{_schema_name(name)}"}

    def public_schema(self, schema: Mapping[str, Any]) -> Dict[str, Any]:
        """Return a copy of ``schema`` suitable for the OpenAPI document.

        Internal properties are removed, along with JSON Schema keywords
        (``$schema``, ``$id``) that OpenAPI 3.0 does not accept.
        """

        public = {
            key: copy.deepcopy(value) for key, value in schema.items() if not key.startswith("$")
        }
        properties = public.get("properties")
        if isinstance(properties, Mapping):
            public["properties"] = self.filter_internal_options(properties)
            required = [
                item for item in public.get("required", ()) if self.is_not_an_internal_option(item)
            ]
            if required:
                public["required"] = required
            else:
                public.pop("required", None)
        return public

    def is_not_an_internal_option(self, name: str) -> bool:
        return is_not_an_internal_option(name, prefix=self.internal_option_prefix)

    def filter_internal_options(self, options: Mapping[str, Any]) -> Dict[str, Any]:
        return filter_internal_options(options, prefix=self.internal_option_prefix)

    def filter_internal_parameters(self, parameters: List[Mapping[str, Any]]) -> List[Mapping[str, Any]]:
        return filter_internal_parameters(parameters, prefix=self.internal_option_prefix)
