"""JSON envelopes returned by the HTTP surface."""

from __future__ import annotations

from typing import Any, Mapping, Optional

from flask import g, jsonify

from ..errors import PipelineError


def error_response(status_code: int, message: str, details: Optional[Mapping[str, Any]] = None):
    """Return ``{"error": {"code", "message", "details"?}}`` with ``status_code``."""

    error: dict[str, Any] = {"code": status_code, "message": message}
    if details:
        error["details"] = dict(details)
    request_id = getattr(g, "request_id", None)
    if request_id:
        error["request_id"] = request_id
    response = jsonify({"error": error})
    response.status_code = status_code
    return response


def pipeline_error_response(exc: PipelineError):
    return error_response(exc.status_code, exc.message, exc.details)
