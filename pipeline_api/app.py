"""Application factory serving pipelines over HTTP."""
import logging
from pathlib import Path
from typing import Any, Iterable, Sequence

from flask import Flask
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from .api import Api
from .errors import PipelineError
from .middleware.logging import setup_request_logging
from .observability import configure_structured_logging
from .transport.rest import RestTransport
from .utils.config import (
    EnvironmentSettings,
    load_environment_settings,
    log_configuration_snapshot,
    split_env_list,
)
from .utils.openapi import write_openapi_document
from .utils.responses import error_response, pipeline_error_response


def _configure_logging(app: Flask) -> None:
    """Resolve ``LOG_LEVEL_NAME`` into a numeric level on ``LOG_LEVEL``."""

    level_name = str(app.config.get("LOG_LEVEL_NAME", "INFO")).upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.INFO
    app.config["LOG_LEVEL"] = level


def _cors_configuration(app: Flask) -> dict[str, Any]:
    """Build the CORS configuration for the application."""

    origins = list(app.config.get("CORS_ORIGINS", ()))
    return {
        "origins": origins if origins else "*",
        "methods": ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        "allow_headers": ["Content-Type", "X-Request-ID"],
        "expose_headers": ["X-Request-ID"],
        "supports_credentials": False,
    }


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(PipelineError)
    def pipeline_error_handler(error: PipelineError):
        return pipeline_error_response(error)

    @app.errorhandler(HTTPException)
    def http_error_handler(error: HTTPException):
        """Return JSON envelopes for Werkzeug HTTP exceptions."""

        status_code = error.code or 500
        message = error.description or error.name or "Error"
        return error_response(status_code, message)

    @app.errorhandler(Exception)
    def generic_error_handler(error: Exception):  # noqa: D401 - brief message sufficient
        """Return a JSON envelope for unexpected errors."""

        app.logger.exception("Unhandled exception", exc_info=error)
        return error_response(500, "Internal Server Error")


def create_app(
    pipelines: Iterable[Sequence[Any]] = (),
    *,
    project_root: str | Path | None = None,
) -> Flask:
    """Create the Flask application and register ``pipelines`` on its API.

    Each entry of ``pipelines`` holds the arguments of :meth:`Api.use`:
    ``(pipeline, name)`` or ``(pipeline, name, plural_name)``.
    """

    root = Path(project_root) if project_root else Path(__file__).resolve().parent.parent
    settings: EnvironmentSettings = load_environment_settings(project_root=root)
    app = Flask(__name__)

    def _get_env(key: str, default: str) -> str:
        return settings.get(key) or default

    app.config["APP_ENV"] = settings.name
    app.config["CONFIG_ENV_FILES"] = settings.loaded_files
    app.config["API_TITLE"] = _get_env("API_TITLE", "Pipeline API")
    app.config["API_VERSION"] = _get_env("API_VERSION", "1.0.0")
    app.config["REST_PREFIX"] = _get_env("REST_PREFIX", "")
    app.config["CORS_ORIGINS"] = tuple(split_env_list(_get_env("CORS_ORIGINS", "")))
    app.config["LOG_LEVEL_NAME"] = _get_env("LOG_LEVEL", "INFO").upper()
    app.config["LOGGER_NAME"] = _get_env("LOGGER_NAME", "pipeline_api")
    app.config["LOG_AGGREGATORS"] = tuple(split_env_list(_get_env("LOG_AGGREGATORS", "")))
    app.config["OPENAPI_OUTPUT_PATH"] = _get_env("OPENAPI_OUTPUT_PATH", "")
    app.config["APP_HOST"] = _get_env("APP_HOST", "localhost")
    app.config["APP_PORT"] = int(settings.get("APP_PORT") or _get_env("PORT", "8089"))

    _configure_logging(app)
    configure_structured_logging(app)
    setup_request_logging(app)

    log_configuration_snapshot(
        logger=app.logger,
        settings=settings,
        config=app.config,
        keys_of_interest=[
            "APP_ENV",
            "CONFIG_ENV_FILES",
            "API_TITLE",
            "API_VERSION",
            "REST_PREFIX",
            "CORS_ORIGINS",
            "OPENAPI_OUTPUT_PATH",
            "APP_HOST",
            "APP_PORT",
        ],
    )

    CORS(app, **_cors_configuration(app))
    _register_error_handlers(app)

    api = Api(
        app,
        {
            "openapi": "3.0.0",
            "info": {"title": app.config["API_TITLE"], "version": app.config["API_VERSION"]},
            "paths": {},
        },
    )
    api.configure(RestTransport(prefix=app.config["REST_PREFIX"]))
    for registration in pipelines:
        api.use(*registration)

    output_path = app.config["OPENAPI_OUTPUT_PATH"]
    if output_path:
        write_openapi_document(api.open_api, output_path)
        app.logger.info("OpenAPI document written", extra={"output_path": output_path})

    return app


if __name__ == "__main__":
    application = create_app()
    application.run(host=application.config["APP_HOST"], port=application.config["APP_PORT"])
