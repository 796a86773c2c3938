"""Idealized unit cell generation and the fractional → cartesian transform."""

from __future__ import annotations

import math
from enum import Enum
from typing import Sequence

import numpy as np

from common.logging import get_logger

from .elements import DEFAULT_RESOLVER, ElementPropertyResolver
from .models import AtomRecord, LatticeParams

logger = get_logger("crystal_viz")

_SIN_EPS = 1e-12


class LatticeNumericError(ArithmeticError):
    """Raised when the cell angles cannot describe a real parallelepiped."""


class LatticeType(str, Enum):
    SC = "SC"
    BCC = "BCC"
    FCC = "FCC"
    NACL = "NaCl"
    HEX = "HEX"

    @classmethod
    def from_tag(cls, tag: str | None) -> "LatticeType | None":
        """Return the matching member, or ``None`` for unknown tags."""

        try:
            return cls(tag)
        except ValueError:
            return None


BasisSite = tuple[str, tuple[float, float, float]]

_FACE_CENTERS = ((0.0, 0.0, 0.0), (0.5, 0.5, 0.0), (0.5, 0.0, 0.5), (0.0, 0.5, 0.5))

BASIS_TABLES: dict[LatticeType, tuple[BasisSite, ...]] = {
    LatticeType.SC: (("Polonium", (0.0, 0.0, 0.0)),),
    LatticeType.BCC: (
        ("Fe", (0.0, 0.0, 0.0)),
        ("Fe", (0.5, 0.5, 0.5)),
    ),
    LatticeType.FCC: tuple(("Cu", site) for site in _FACE_CENTERS),
    # Rock salt without periodic images: four Na on the fcc sites, four Cl
    # on the octahedral holes nearest the origin.
    LatticeType.NACL: tuple(("Na", site) for site in _FACE_CENTERS)
    + (
        ("Cl", (0.5, 0.5, 0.5)),
        ("Cl", (0.5, 0.0, 0.0)),
        ("Cl", (0.0, 0.5, 0.0)),
        ("Cl", (0.0, 0.0, 0.5)),
    ),
    LatticeType.HEX: (
        ("Mg", (0.0, 0.0, 0.0)),
        ("Mg", (2.0 / 3.0, 1.0 / 3.0, 0.5)),
    ),
}

DEFAULT_BASIS: tuple[BasisSite, ...] = (("Fe", (0.0, 0.0, 0.0)),)


def basis_for(lattice_type: str | LatticeType | None) -> tuple[BasisSite, ...]:
    member = lattice_type if isinstance(lattice_type, LatticeType) else LatticeType.from_tag(lattice_type)
    if member is None:
        logger.debug("Unknown lattice type %r, using default basis", lattice_type)
        return DEFAULT_BASIS
    return BASIS_TABLES[member]


def _cos_sin(degrees: float) -> tuple[float, float]:
    # Exact values at right angles keep orthogonal cells free of 6e-17 noise.
    if degrees == 90.0:
        return 0.0, 1.0
    radians = math.radians(degrees)
    return math.cos(radians), math.sin(radians)


def lattice_vectors(params: LatticeParams) -> np.ndarray:
    """Return the cell vectors as rows of a 3x3 array.

    ``a`` lies along x and ``b`` in the xy plane; ``c`` is fixed by the
    three angles. Raises :class:`LatticeNumericError` instead of producing
    NaN components for degenerate or inconsistent angle sets.
    """

    cos_alpha, _ = _cos_sin(params.alpha)
    cos_beta, _ = _cos_sin(params.beta)
    cos_gamma, sin_gamma = _cos_sin(params.gamma)

    if abs(sin_gamma) < _SIN_EPS:
        raise LatticeNumericError(f"Degenerate cell: sin(gamma) is zero for gamma={params.gamma}")

    ratio = (cos_alpha - cos_beta * cos_gamma) / sin_gamma
    radicand = 1.0 - cos_beta * cos_beta - ratio * ratio
    if radicand < 0.0:
        raise LatticeNumericError(
            "Inconsistent cell angles "
            f"(alpha={params.alpha}, beta={params.beta}, gamma={params.gamma})"
        )

    return np.array(
        [
            [params.a, 0.0, 0.0],
            [params.b * cos_gamma, params.b * sin_gamma, 0.0],
            [params.c * cos_beta, params.c * ratio, params.c * math.sqrt(radicand)],
        ],
        dtype=float,
    )


def fractional_to_cartesian(
    frac: Sequence[float],
    params: LatticeParams,
    *,
    vectors: np.ndarray | None = None,
) -> tuple[float, float, float]:
    matrix = lattice_vectors(params) if vectors is None else vectors
    fx, fy, fz = (float(v) for v in frac)
    point = fx * matrix[0] + fy * matrix[1] + fz * matrix[2]
    return float(point[0]), float(point[1]), float(point[2])


def orthogonal_to_cartesian(frac: Sequence[float], params: LatticeParams) -> tuple[float, float, float]:
    """Scale fractional coordinates by the edge lengths only.

    Exact for α = β = γ = 90°, an approximation otherwise.
    """

    fx, fy, fz = (float(v) for v in frac)
    return fx * params.a, fy * params.b, fz * params.c


def generate(
    lattice_type: str | LatticeType | None,
    params: LatticeParams,
    *,
    resolver: ElementPropertyResolver = DEFAULT_RESOLVER,
) -> list[AtomRecord]:
    """Build the atoms of one idealized unit cell."""

    vectors = lattice_vectors(params)
    atoms: list[AtomRecord] = []
    for element, frac in basis_for(lattice_type):
        style = resolver.lookup(element)
        atoms.append(
            AtomRecord(
                element=element,
                position=fractional_to_cartesian(frac, params, vectors=vectors),
                color=style.color,
                radius=style.radius,
            )
        )
    return atoms


__all__ = [
    "BASIS_TABLES",
    "DEFAULT_BASIS",
    "LatticeNumericError",
    "LatticeType",
    "basis_for",
    "fractional_to_cartesian",
    "generate",
    "lattice_vectors",
    "orthogonal_to_cartesian",
]
