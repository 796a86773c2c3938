"""XYZ text export."""

from __future__ import annotations

from typing import Iterable

from .models import AtomRecord

DEFAULT_COMMENT = "Generated by CrystalViz Platform"


def export_xyz(atoms: Iterable[AtomRecord], *, comment: str = DEFAULT_COMMENT) -> str:
    """Render atoms as an XYZ file: count, comment, then one atom per line."""

    atoms = list(atoms)
    # The comment line must stay a single line or readers lose the atom rows.
    comment = " ".join(comment.split())
    lines = [str(len(atoms)), comment]
    lines.extend(f"{atom.element} {atom.x:.6f} {atom.y:.6f} {atom.z:.6f}" for atom in atoms)
    return "".join(f"{line}\n" for line in lines)


__all__ = ["DEFAULT_COMMENT", "export_xyz"]
