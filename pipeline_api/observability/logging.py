"""Structured logging for applications serving pipelines."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from logging import Handler, Logger
from logging.handlers import DatagramHandler, HTTPHandler, SocketHandler
from typing import Iterable
from urllib.parse import urlparse

from flask import Flask

DEFAULT_LOGGER_NAME = "pipeline_api"

# Attributes every LogRecord carries; anything else came in through ``extra``.
_RECORD_ATTRIBUTES = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None))
) | {"message", "asctime", "taskName"}


class JsonFormatter(logging.Formatter):
    """Render each record as one JSON object."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401 - obvious
        payload: dict[str, object] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        if record.stack_info:
            payload["stack"] = self.formatStack(record.stack_info)

        for key, value in record.__dict__.items():
            if key in _RECORD_ATTRIBUTES or key in payload or key.startswith("_"):
                continue
            if value is None:
                continue
            payload[key] = value

        return json.dumps(
            payload, separators=(",", ":"), sort_keys=True, ensure_ascii=False, default=str
        )


def create_network_handler(url: str) -> Handler:
    """Build a handler shipping records to ``tcp://``, ``udp://`` or ``http(s)://`` URLs."""

    parsed = urlparse(url)
    if not parsed.scheme or not parsed.hostname:
        raise ValueError(f"Invalid log aggregator URL: {url}")

    host = parsed.hostname
    if parsed.scheme in {"tcp", "socket"}:
        handler = SocketHandler(host, parsed.port or 9020)
        handler.closeOnError = True
        return handler
    if parsed.scheme in {"udp", "datagram"}:
        return DatagramHandler(host, parsed.port or 9021)
    if parsed.scheme in {"http", "https"}:
        secure = parsed.scheme == "https"
        port = parsed.port or (443 if secure else 80)
        target = parsed.path or "/"
        if parsed.query:
            target = f"{target}?{parsed.query}"
        return HTTPHandler(host=f"{host}:{port}", url=target, method="POST", secure=secure)
    raise ValueError(f"Unsupported log aggregator scheme: {parsed.scheme}")


def configure_structured_logging(
    app: Flask, *, aggregators: Iterable[str] | None = None
) -> Logger:
    """Route the application logger through :class:`JsonFormatter`."""

    logger = logging.getLogger(str(app.config.get("LOGGER_NAME", DEFAULT_LOGGER_NAME)))
    logger.setLevel(app.config.get("LOG_LEVEL", logging.INFO))
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    formatter = JsonFormatter()
    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)

    targets = aggregators if aggregators is not None else app.config.get("LOG_AGGREGATORS", ())
    for target in targets:
        target = target.strip()
        if not target:
            continue
        try:
            handler = create_network_handler(target)
        except (OSError, ValueError) as exc:
            logger.warning("Failed to configure log aggregator %s: %s", target, exc)
            continue
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.propagate = False
    app.logger = logger
    return logger
