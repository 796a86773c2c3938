"""Facade over the CrystalViz core used by the API blueprint."""

from __future__ import annotations

from typing import Any, Iterable, Sequence

from .bonds import BondDetector, calculate_bonds, check_errors
from .cif import CifParseError, CifParser, parse_cif, tokenize
from .elements import DEFAULT_RESOLVER, ElementPropertyResolver, ElementStyle
from .export import DEFAULT_COMMENT, export_xyz
from .lattice import LatticeNumericError, LatticeType, fractional_to_cartesian, generate, lattice_vectors
from .models import (
    AtomRecord,
    BondRecord,
    CifParseResult,
    LatticeParams,
    LatticeParamsError,
    ParseDiagnostic,
)
from .settings import CrystalVizSettings, load_settings


def restyle_atoms(
    atoms: Iterable[AtomRecord],
    *,
    resolver: ElementPropertyResolver = DEFAULT_RESOLVER,
) -> list[AtomRecord]:
    """Return copies of ``atoms`` with color/radius taken from the element table."""

    restyled: list[AtomRecord] = []
    for atom in atoms:
        style = resolver.lookup(atom.element)
        restyled.append(AtomRecord(atom.element, atom.position, style.color, style.radius))
    return restyled


def resolve_atoms(
    lattice_type: str | None,
    params: LatticeParams,
    *,
    custom_atoms: Sequence[AtomRecord] | None = None,
    resolver: ElementPropertyResolver = DEFAULT_RESOLVER,
) -> list[AtomRecord]:
    """Use caller-edited atoms when given, otherwise generate the basis."""

    if custom_atoms:
        return restyle_atoms(custom_atoms, resolver=resolver)
    return generate(lattice_type, params, resolver=resolver)


def structure_payload(
    atoms: Sequence[AtomRecord],
    cell: LatticeParams,
    *,
    detector: BondDetector,
) -> dict[str, Any]:
    bonds = detector.calculate_bonds(atoms)
    return {
        "atoms": [atom.to_dict() for atom in atoms],
        "bonds": [bond.to_dict() for bond in bonds],
        **cell.to_dict(),
        "warnings": detector.check_errors(atoms),
    }


def generate_structure(
    lattice_type: str | None,
    params: LatticeParams,
    *,
    custom_atoms: Sequence[AtomRecord] | None = None,
    settings: CrystalVizSettings | None = None,
) -> dict[str, Any]:
    settings = settings or CrystalVizSettings()
    atoms = resolve_atoms(lattice_type, params, custom_atoms=custom_atoms)
    return structure_payload(atoms, params, detector=settings.detector())


def refresh_atoms(
    atoms: Sequence[AtomRecord],
    params: LatticeParams,
    *,
    settings: CrystalVizSettings | None = None,
) -> dict[str, Any]:
    """Recompute bonds for edited atoms, echoing the cell unchanged."""

    settings = settings or CrystalVizSettings()
    return structure_payload(list(atoms), params, detector=settings.detector())


def import_cif(
    text: str,
    *,
    settings: CrystalVizSettings | None = None,
    strict: bool | None = None,
) -> dict[str, Any]:
    settings = settings or CrystalVizSettings()
    detector = settings.detector()
    result = parse_cif(
        text,
        strict=settings.cif_strict if strict is None else strict,
        cartesian=settings.cif_cartesian,
        detector=detector,
    )
    return {
        "atoms": [atom.to_dict() for atom in result.atoms],
        "bonds": [bond.to_dict() for bond in result.bonds],
        **result.cell.to_dict(),
        "warnings": detector.check_errors(result.atoms),
        "diagnostics": [diag.to_dict() for diag in result.diagnostics],
    }


def export_structure(
    lattice_type: str | None,
    params: LatticeParams,
    *,
    custom_atoms: Sequence[AtomRecord] | None = None,
    settings: CrystalVizSettings | None = None,
) -> str:
    settings = settings or CrystalVizSettings()
    atoms = resolve_atoms(lattice_type, params, custom_atoms=custom_atoms)
    return export_xyz(atoms, comment=settings.export_comment)


def element_table(resolver: ElementPropertyResolver = DEFAULT_RESOLVER) -> dict[str, Any]:
    return {"elements": resolver.styles(), "default": resolver.default.to_dict()}


__all__ = [
    "AtomRecord",
    "BondDetector",
    "BondRecord",
    "CifParseError",
    "CifParseResult",
    "CifParser",
    "CrystalVizSettings",
    "DEFAULT_COMMENT",
    "ElementPropertyResolver",
    "ElementStyle",
    "LatticeNumericError",
    "LatticeParams",
    "LatticeParamsError",
    "LatticeType",
    "ParseDiagnostic",
    "calculate_bonds",
    "check_errors",
    "element_table",
    "export_structure",
    "export_xyz",
    "fractional_to_cartesian",
    "generate",
    "generate_structure",
    "import_cif",
    "lattice_vectors",
    "load_settings",
    "parse_cif",
    "refresh_atoms",
    "resolve_atoms",
    "restyle_atoms",
    "structure_payload",
    "tokenize",
]
