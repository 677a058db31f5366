"""Serialisation helpers for the OpenAPI document."""

from __future__ import annotations

import json
import os
from typing import Any, Mapping

import yaml

__all__ = ["render_openapi_yaml", "to_plain", "write_openapi_document"]


def render_openapi_yaml(document: Mapping[str, Any]) -> str:
    return yaml.safe_dump(to_plain(document), sort_keys=False)


def write_openapi_document(document: Mapping[str, Any], output_path: str) -> str:
    """Persist ``document`` as YAML, or as JSON for ``.json`` paths."""

    directory = os.path.dirname(output_path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as handle:
        if output_path.endswith(".json"):
            json.dump(to_plain(document), handle, indent=2)
        else:
            yaml.safe_dump(to_plain(document), handle, sort_keys=False)
    return output_path


def to_plain(value: Any) -> Any:
    # safe_dump refuses mapping subclasses and tuples
    if isinstance(value, Mapping):
        return {str(key): to_plain(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_plain(item) for item in value]
    return value
