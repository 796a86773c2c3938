"""Standardized response helpers."""

from __future__ import annotations

from typing import Any

from flask import Response, jsonify, send_file

from .errors import AppError
from .io import buffer_from_bytes, secure_filename


def ok(data: Any, *, status: int = 200) -> Response:
    """Return a success envelope."""

    response = jsonify({"success": True, "data": data})
    response.status_code = status
    return response


def fail(error: AppError, *, status: int | None = None) -> Response:
    """Return a failure envelope built from an :class:`AppError`."""

    response = jsonify({"success": False, "error": error.to_dict()})
    response.status_code = status or error.status_code
    return response


def text_attachment(text: str, filename: str, *, mimetype: str = "text/plain") -> Response:
    """Send ``text`` as a UTF-8 file download."""

    return send_file(
        buffer_from_bytes(text.encode("utf-8")),
        mimetype=mimetype,
        as_attachment=True,
        download_name=secure_filename(filename, fallback="download"),
        max_age=0,
    )


__all__ = ["ok", "fail", "text_attachment"]
