"""Observability helpers for the pipeline API."""

from .logging import JsonFormatter, configure_structured_logging  # noqa: F401

__all__ = [
    "JsonFormatter",
    "configure_structured_logging",
]
