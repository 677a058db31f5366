"""Request logging middleware."""

import time
import uuid
from typing import Any, Dict

from flask import Flask, Response, g, request


def setup_request_logging(app: Flask) -> None:
    """Assign a request id to every request and log one record per response."""

    @app.before_request
    def _start_timer() -> None:  # pragma: no cover - invoked by Flask
        g.request_started_at = time.perf_counter()
        g.request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex

    @app.after_request
    def _log_request(response: Response) -> Response:  # pragma: no cover - invoked by Flask
        started = getattr(g, "request_started_at", None)
        duration_ms = None
        if started is not None:
            duration_ms = round((time.perf_counter() - started) * 1000, 3)

        request_id = getattr(g, "request_id", None)
        fields: Dict[str, Any] = {
            "method": request.method,
            "path": request.full_path.rstrip("?") or request.path,
            "route": getattr(request.url_rule, "rule", None),
            "status": response.status_code,
            "duration_ms": duration_ms,
            "request_id": request_id,
            "ip": request.remote_addr,
        }
        app.logger.info("%s %s %s", request.method, request.path, response.status_code, extra=fields)

        if request_id:
            response.headers.setdefault("X-Request-ID", request_id)
        return response
