"""Distance-based bond and overlap detection.

Every unordered pair is compared, so cost grows with n². That is fine for
the few hundred atoms an interactive viewer shows; larger inputs would need
a spatial index.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np

from .models import AtomRecord, BondRecord

MIN_BOND_LENGTH = 1.0
MAX_BOND_LENGTH = 5.0
OVERLAP_THRESHOLD = 0.5


def _pair_distances(atoms: Sequence[AtomRecord]) -> np.ndarray:
    coords = np.array([atom.position for atom in atoms], dtype=float).reshape(-1, 3)
    deltas = coords[:, None, :] - coords[None, :, :]
    return np.sqrt(np.sum(deltas * deltas, axis=-1))


@dataclass(frozen=True, slots=True)
class BondDetector:
    min_length: float = MIN_BOND_LENGTH
    max_length: float = MAX_BOND_LENGTH
    overlap_threshold: float = OVERLAP_THRESHOLD

    def __post_init__(self) -> None:
        if self.min_length < 0 or self.max_length < self.min_length:
            raise ValueError("Bond length window must satisfy 0 <= min_length <= max_length")
        if self.overlap_threshold < 0:
            raise ValueError("overlap_threshold must be non-negative")

    def calculate_bonds(self, atoms: Sequence[AtomRecord]) -> list[BondRecord]:
        if len(atoms) < 2:
            return []
        distances = _pair_distances(atoms)
        bonds: list[BondRecord] = []
        rows, cols = np.triu_indices(len(atoms), k=1)
        for i, j in zip(rows.tolist(), cols.tolist()):
            if self.min_length <= distances[i, j] <= self.max_length:
                bonds.append(BondRecord(atoms[i], atoms[j]))
        return bonds

    def check_errors(self, atoms: Sequence[AtomRecord]) -> list[str]:
        """Return one overlap warning per pair closer than the threshold."""

        if len(atoms) < 2:
            return []
        distances = _pair_distances(atoms)
        warnings: list[str] = []
        rows, cols = np.triu_indices(len(atoms), k=1)
        for i, j in zip(rows.tolist(), cols.tolist()):
            dist = float(distances[i, j])
            if dist < self.overlap_threshold:
                first, second = atoms[i], atoms[j]
                warnings.append(
                    f"Warning: atoms {i} ({first.element}) and {j} ({second.element}) overlap "
                    f"at ({first.x:.4f}, {first.y:.4f}, {first.z:.4f}), distance {dist:.4f} Å"
                )
        return warnings


DEFAULT_DETECTOR = BondDetector()


def calculate_bonds(atoms: Sequence[AtomRecord]) -> list[BondRecord]:
    return DEFAULT_DETECTOR.calculate_bonds(atoms)


def check_errors(atoms: Sequence[AtomRecord]) -> list[str]:
    return DEFAULT_DETECTOR.check_errors(atoms)


__all__ = [
    "BondDetector",
    "DEFAULT_DETECTOR",
    "MAX_BOND_LENGTH",
    "MIN_BOND_LENGTH",
    "OVERLAP_THRESHOLD",
    "calculate_bonds",
    "check_errors",
]
