"""Configuration helpers for CrystalViz."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from common.forms import get_bool

from .bonds import MAX_BOND_LENGTH, MIN_BOND_LENGTH, OVERLAP_THRESHOLD, BondDetector
from .cif import CARTESIAN_MODES
from .export import DEFAULT_COMMENT


@dataclass(frozen=True)
class CrystalVizSettings:
    bond_min_length: float = MIN_BOND_LENGTH
    bond_max_length: float = MAX_BOND_LENGTH
    overlap_threshold: float = OVERLAP_THRESHOLD
    cif_strict: bool = False
    cif_cartesian: str = "orthogonal"
    export_comment: str = DEFAULT_COMMENT
    export_filename: str = "structure.xyz"

    def detector(self) -> BondDetector:
        return BondDetector(
            min_length=self.bond_min_length,
            max_length=self.bond_max_length,
            overlap_threshold=self.overlap_threshold,
        )


def _section(raw: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = raw.get(key)
    return value if isinstance(value, Mapping) else {}


def _float(value: Any, default: float) -> float:
    try:
        result = float(value)
    except (TypeError, ValueError):
        return default
    return result if result >= 0 else default


def load_settings(raw: Mapping[str, Any] | None) -> CrystalVizSettings:
    """Build settings from the ``plugins.crystal_viz`` block of ``config.yml``.

    Missing or malformed values fall back to the defaults so a bad config
    file never breaks the endpoints.
    """

    raw = raw or {}
    bonds = _section(raw, "bonds")
    cif = _section(raw, "cif")
    export = _section(raw, "export")

    min_length = _float(bonds.get("min_length"), MIN_BOND_LENGTH)
    max_length = _float(bonds.get("max_length"), MAX_BOND_LENGTH)
    if max_length < min_length:
        min_length, max_length = MIN_BOND_LENGTH, MAX_BOND_LENGTH

    cartesian = str(cif.get("cartesian", "orthogonal")).strip().lower()
    if cartesian not in CARTESIAN_MODES:
        cartesian = "orthogonal"

    return CrystalVizSettings(
        bond_min_length=min_length,
        bond_max_length=max_length,
        overlap_threshold=_float(raw.get("overlap_threshold"), OVERLAP_THRESHOLD),
        cif_strict=get_bool(cif, "strict", False),
        cif_cartesian=cartesian,
        export_comment=str(export.get("comment") or DEFAULT_COMMENT),
        export_filename=str(export.get("filename") or "structure.xyz"),
    )


__all__ = ["CrystalVizSettings", "load_settings"]
