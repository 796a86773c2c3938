"""API routes for the CrystalViz plugin."""

from __future__ import annotations

from flask import Blueprint, Response, current_app, request
from pydantic import Field

from common.errors import UnprocessableAppError, ValidationAppError
from common.forms import get_bool
from common.logging import get_logger
from common.responses import fail, ok, text_attachment
from common.validation import FileLimit, SchemaModel, ValidationError, enforce_limits, parse_model

from ..core import (
    AtomRecord,
    CifParseError,
    CrystalVizSettings,
    LatticeNumericError,
    LatticeParams,
    LatticeParamsError,
    element_table,
    export_structure,
    generate_structure,
    import_cif,
    load_settings,
    refresh_atoms,
)

logger = get_logger("crystal_viz")

bp = Blueprint("crystal_viz", __name__, url_prefix="/api/crystal_viz")


class AtomPayload(SchemaModel):
    element: str = Field(min_length=1)
    x: float
    y: float
    z: float
    color: str | None = None
    radius: float | None = None

    def to_record(self) -> AtomRecord:
        return AtomRecord(
            element=self.element,
            position=(self.x, self.y, self.z),
            color=self.color or "",
            radius=self.radius if self.radius is not None else 0.0,
        )


class CrystalRequest(SchemaModel):
    lattice_type: str = "SC"
    a: float = Field(default=1.0, gt=0)
    b: float = Field(default=1.0, gt=0)
    c: float = Field(default=1.0, gt=0)
    alpha: float = Field(default=90.0, gt=0, lt=180)
    beta: float = Field(default=90.0, gt=0, lt=180)
    gamma: float = Field(default=90.0, gt=0, lt=180)
    custom_atoms: list[AtomPayload] | None = None

    def lattice_params(self) -> LatticeParams:
        return LatticeParams(self.a, self.b, self.c, self.alpha, self.beta, self.gamma)

    def atom_records(self) -> list[AtomRecord] | None:
        if not self.custom_atoms:
            return None
        return [atom.to_record() for atom in self.custom_atoms]


class CheckRequest(SchemaModel):
    atoms: list[AtomPayload]


def _raw_settings() -> dict:
    return current_app.config.get("PLUGIN_SETTINGS", {}).get("crystal_viz", {}) or {}


def _settings() -> CrystalVizSettings:
    return load_settings(_raw_settings())


def _upload_limit() -> FileLimit:
    upload = _raw_settings().get("upload")
    return FileLimit.from_settings(upload, default_max_files=1, default_max_mb=5)


def _invalid_request(exc: ValidationError) -> Response:
    return fail(
        ValidationAppError(
            message=str(exc),
            code="crystal_viz.invalid_request",
            details={"errors": getattr(exc, "details", None)},
        )
    )


def _degenerate_cell(exc: LatticeNumericError) -> Response:
    return fail(
        UnprocessableAppError(message=str(exc), code="crystal_viz.degenerate_cell")
    )


def _parse_crystal_request() -> CrystalRequest | Response:
    try:
        return parse_model(CrystalRequest, request.get_json(silent=True))
    except ValidationError as exc:
        return _invalid_request(exc)


@bp.post("/generate")
def generate() -> Response:
    payload = _parse_crystal_request()
    if isinstance(payload, Response):
        return payload
    try:
        result = generate_structure(
            payload.lattice_type,
            payload.lattice_params(),
            custom_atoms=payload.atom_records(),
            settings=_settings(),
        )
    except LatticeParamsError as exc:
        return fail(ValidationAppError(message=str(exc), code="crystal_viz.invalid_cell"))
    except LatticeNumericError as exc:
        return _degenerate_cell(exc)
    return ok(result)


@bp.post("/export")
def export() -> Response:
    payload = _parse_crystal_request()
    if isinstance(payload, Response):
        return payload
    settings = _settings()
    try:
        text = export_structure(
            payload.lattice_type,
            payload.lattice_params(),
            custom_atoms=payload.atom_records(),
            settings=settings,
        )
    except LatticeParamsError as exc:
        return fail(ValidationAppError(message=str(exc), code="crystal_viz.invalid_cell"))
    except LatticeNumericError as exc:
        return _degenerate_cell(exc)
    return text_attachment(text, settings.export_filename)


@bp.post("/import")
def import_file() -> Response:
    file = request.files.get("file")
    if not file:
        return fail(ValidationAppError(message="CIF file is required", code="crystal_viz.missing_file"))
    settings = _settings()
    try:
        enforce_limits([file], _upload_limit())
    except ValidationError as exc:
        return fail(ValidationAppError(message=str(exc), code="crystal_viz.upload_rejected"))

    text = file.read().decode("utf-8", errors="replace")
    strict = get_bool(request.form, "strict", default=settings.cif_strict)
    try:
        result = import_cif(text, settings=settings, strict=strict)
    except CifParseError as exc:
        return fail(
            ValidationAppError(
                message=str(exc),
                code="crystal_viz.invalid_cif",
                details={"diagnostics": [diag.to_dict() for diag in exc.diagnostics]},
            )
        )
    logger.info(
        "Imported %s: %d atoms, %d diagnostics",
        file.filename or "upload",
        len(result["atoms"]),
        len(result["diagnostics"]),
    )
    return ok(result)


@bp.post("/update-properties")
def update_properties() -> Response:
    payload = _parse_crystal_request()
    if isinstance(payload, Response):
        return payload
    try:
        result = refresh_atoms(
            payload.atom_records() or [],
            payload.lattice_params(),
            settings=_settings(),
        )
    except LatticeParamsError as exc:
        return fail(ValidationAppError(message=str(exc), code="crystal_viz.invalid_cell"))
    return ok(result)


@bp.post("/check")
def check() -> Response:
    try:
        payload = parse_model(CheckRequest, request.get_json(silent=True))
    except ValidationError as exc:
        return _invalid_request(exc)
    detector = _settings().detector()
    warnings = detector.check_errors([atom.to_record() for atom in payload.atoms])
    return ok({"warnings": warnings, "count": len(warnings)})


@bp.get("/elements")
def elements() -> Response:
    return ok(element_table())


blueprints = [bp]

__all__ = [
    "blueprints",
    "bp",
    "check",
    "elements",
    "export",
    "generate",
    "import_file",
    "update_properties",
]
