"""Logging helpers with request correlation."""

from __future__ import annotations

import logging
import os
import time
import uuid

from flask import Flask, g, request

DEFAULT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
LOG_LEVEL_ENV = "CRYSTALVIZ_LOG_LEVEL"


def _configured_level() -> int:
    name = os.environ.get(LOG_LEVEL_ENV, "INFO").upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def get_logger(name: str = "crystalviz") -> logging.Logger:
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(DEFAULT_FORMAT))
        logger.addHandler(handler)
        logger.setLevel(_configured_level())
        logger.propagate = False
    return logger


def _request_label() -> str:
    return f"{request.method} {request.path} [{getattr(g, 'request_id', '-')}]"


def install_request_logging(app: Flask) -> None:
    logger = get_logger()

    @app.before_request
    def _begin_request() -> None:  # pragma: no cover - flask hooks
        g.request_id = uuid.uuid4().hex
        g.request_started = time.perf_counter()

    @app.after_request
    def _after_request(response):  # pragma: no cover - flask hooks
        duration_ms = 0.0
        if hasattr(g, "request_started"):
            duration_ms = (time.perf_counter() - g.request_started) * 1000
        logger.info("%s -> %s in %.2f ms", _request_label(), response.status_code, duration_ms)
        response.headers.setdefault("X-Request-ID", getattr(g, "request_id", ""))
        return response

    @app.teardown_request
    def _teardown_request(exc):  # pragma: no cover - flask hooks
        if exc is not None:
            logger.error("%s failed", _request_label(), exc_info=exc)


__all__ = ["get_logger", "install_request_logging"]
