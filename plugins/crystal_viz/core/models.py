"""Value types shared by the lattice, bond and CIF helpers."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Mapping

Vector3 = tuple[float, float, float]


class LatticeParamsError(ValueError):
    """Raised when cell lengths or angles are out of range."""


@dataclass(frozen=True, slots=True)
class LatticeParams:
    """Unit cell edge lengths (Å) and inter-axial angles (degrees)."""

    a: float
    b: float
    c: float
    alpha: float = 90.0
    beta: float = 90.0
    gamma: float = 90.0

    def __post_init__(self) -> None:
        for name in ("a", "b", "c"):
            value = getattr(self, name)
            if not math.isfinite(value) or value <= 0:
                raise LatticeParamsError(f"Lattice length {name} must be positive, got {value}")
        for name in ("alpha", "beta", "gamma"):
            value = getattr(self, name)
            if not math.isfinite(value) or not 0.0 < value < 180.0:
                raise LatticeParamsError(f"Lattice angle {name} must lie in (0, 180), got {value}")

    def replace(self, **changes: float) -> "LatticeParams":
        values = self.to_dict()
        values.update(changes)
        return LatticeParams(**values)

    def to_dict(self) -> dict[str, float]:
        return {
            "a": self.a,
            "b": self.b,
            "c": self.c,
            "alpha": self.alpha,
            "beta": self.beta,
            "gamma": self.gamma,
        }


DEFAULT_CELL = LatticeParams(1.0, 1.0, 1.0)


@dataclass(frozen=True, slots=True)
class AtomRecord:
    element: str
    position: Vector3
    color: str
    radius: float

    @property
    def x(self) -> float:
        return self.position[0]

    @property
    def y(self) -> float:
        return self.position[1]

    @property
    def z(self) -> float:
        return self.position[2]

    def to_dict(self) -> dict[str, Any]:
        return {
            "element": self.element,
            "x": self.x,
            "y": self.y,
            "z": self.z,
            "color": self.color,
            "radius": self.radius,
        }

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "AtomRecord":
        return cls(
            element=str(data["element"]),
            position=(float(data["x"]), float(data["y"]), float(data["z"])),
            color=str(data.get("color") or ""),
            radius=float(data.get("radius") or 0.0),
        )


@dataclass(frozen=True, slots=True)
class BondRecord:
    """Proximity pair between two atoms; holds value copies, not indices."""

    a: AtomRecord
    b: AtomRecord

    def to_dict(self) -> dict[str, Any]:
        return {"start": self.a.to_dict(), "end": self.b.to_dict()}


@dataclass(frozen=True, slots=True)
class ParseDiagnostic:
    """A recoverable problem met while walking the CIF token stream."""

    index: int
    token: str | None
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {"index": self.index, "token": self.token, "message": self.message}


@dataclass(frozen=True, slots=True)
class CifParseResult:
    cell: LatticeParams
    atoms: list[AtomRecord]
    bonds: list[BondRecord]
    diagnostics: list[ParseDiagnostic] = field(default_factory=list)


__all__ = [
    "AtomRecord",
    "BondRecord",
    "CifParseResult",
    "DEFAULT_CELL",
    "LatticeParams",
    "LatticeParamsError",
    "ParseDiagnostic",
    "Vector3",
]
