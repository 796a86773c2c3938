"""Validation primitives for plugin APIs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping, TypeVar

import pydantic
from pydantic import BaseModel
from werkzeug.datastructures import FileStorage


class ValidationError(ValueError):
    """Raised when validation fails."""

    def __init__(self, message: str, *, details: Any | None = None):
        super().__init__(message)
        self.details = details


class SchemaModel(BaseModel):
    """Strict base model for request/response validation."""

    model_config = pydantic.ConfigDict(extra="forbid", str_strip_whitespace=True)


TModel = TypeVar("TModel", bound=SchemaModel)


def parse_model(model: type[TModel], payload: Any) -> TModel:
    """Validate a decoded JSON body against ``model``.

    ``details`` on the raised error is a JSON-safe list of pydantic errors.
    """

    payload = payload or {}
    if not isinstance(payload, Mapping):
        raise ValidationError("Request body must be a JSON object")
    try:
        return model.model_validate(payload)
    except pydantic.ValidationError as exc:
        errors = exc.errors(include_url=False, include_context=False, include_input=False)
        raise ValidationError("Invalid request payload", details=errors) from exc


@dataclass(slots=True)
class FileLimit:
    max_files: int
    max_size: int

    @classmethod
    def from_settings(
        cls,
        settings: Mapping[str, Any] | None,
        *,
        default_max_files: int,
        default_max_mb: int,
    ) -> "FileLimit":
        max_files = default_max_files
        max_mb = default_max_mb

        if settings:
            raw_max_files = settings.get("max_files")
            raw_max_mb = settings.get("max_mb")

            try:
                max_files = int(raw_max_files)
            except (TypeError, ValueError):
                max_files = default_max_files

            try:
                max_mb = int(float(raw_max_mb))
            except (TypeError, ValueError):
                max_mb = default_max_mb

        max_files = max(max_files, 1)
        max_mb = max(max_mb, 1)
        return cls(max_files=max_files, max_size=max_mb * 1024 * 1024)


def enforce_limits(files: Iterable[FileStorage], limit: FileLimit) -> None:
    files = list(files)
    if not files:
        raise ValidationError("At least one file is required")
    if len(files) > limit.max_files:
        raise ValidationError("Too many files uploaded")
    for file in files:
        file.seek(0, 2)
        size = file.tell()
        file.seek(0)
        if size > limit.max_size:
            raise ValidationError("File exceeds allowed size")


__all__ = [
    "ValidationError",
    "SchemaModel",
    "parse_model",
    "FileLimit",
    "enforce_limits",
]
