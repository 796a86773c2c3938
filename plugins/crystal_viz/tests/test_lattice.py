import math

import numpy as np
import pytest

from plugins.crystal_viz.core import lattice
from plugins.crystal_viz.core.models import LatticeParams, LatticeParamsError


CUBIC = LatticeParams(1.0, 1.0, 1.0)


@pytest.mark.parametrize(
    ("lattice_type", "expected"),
    [("SC", 1), ("BCC", 2), ("FCC", 4), ("NaCl", 8), ("HEX", 2)],
)
def test_atom_counts_by_type(lattice_type, expected):
    atoms = lattice.generate(lattice_type, LatticeParams(4.0, 4.0, 4.0))
    assert len(atoms) == expected


def test_simple_cubic_scenario():
    atoms = lattice.generate("SC", CUBIC)
    assert len(atoms) == 1
    assert atoms[0].element == "Polonium"
    assert atoms[0].position == (0.0, 0.0, 0.0)
    # Polonium is not in the element table.
    assert atoms[0].color == "#808080"
    assert atoms[0].radius == 1.0


def test_unknown_type_falls_back_to_default_basis():
    atoms = lattice.generate("diamond", LatticeParams(3.0, 3.0, 3.0))
    assert [atom.element for atom in atoms] == ["Fe"]
    assert atoms[0].color == "#FF0000"
    assert lattice.basis_for(None) == lattice.DEFAULT_BASIS


def test_nacl_elements_and_styles():
    atoms = lattice.generate("NaCl", LatticeParams(5.64, 5.64, 5.64))
    assert [atom.element for atom in atoms] == ["Na"] * 4 + ["Cl"] * 4
    assert {atom.color for atom in atoms if atom.element == "Cl"} == {"#00FF00"}
    assert atoms[4].position == pytest.approx((2.82, 2.82, 2.82))


def test_bcc_body_centre():
    atoms = lattice.generate(lattice.LatticeType.BCC, LatticeParams(2.87, 2.87, 2.87))
    assert atoms[1].position == pytest.approx((1.435, 1.435, 1.435))


def test_orthogonal_cell_is_exact_scaling():
    params = LatticeParams(5.0, 6.5, 7.25)
    for frac in [(1.0, 1.0, 1.0), (0.5, 0.25, 0.75), (2.0 / 3.0, 1.0 / 3.0, 0.5)]:
        assert lattice.fractional_to_cartesian(frac, params) == (
            frac[0] * 5.0,
            frac[1] * 6.5,
            frac[2] * 7.25,
        )


def test_transform_is_linear():
    params = LatticeParams(3.1, 4.2, 5.3, 78.0, 95.0, 113.0)
    f1 = (0.1, 0.7, 0.3)
    f2 = (0.45, -0.2, 0.6)
    combined = tuple(a + b for a, b in zip(f1, f2))
    c1 = lattice.fractional_to_cartesian(f1, params)
    c2 = lattice.fractional_to_cartesian(f2, params)
    c12 = lattice.fractional_to_cartesian(combined, params)
    assert tuple(a + b for a, b in zip(c1, c2)) == pytest.approx(c12)


def test_hexagonal_vectors():
    params = LatticeParams(3.2, 3.2, 5.2, 90.0, 90.0, 120.0)
    vectors = lattice.lattice_vectors(params)
    assert vectors[1] == pytest.approx([-1.6, 3.2 * math.sqrt(3) / 2, 0.0])
    assert vectors[2] == pytest.approx([0.0, 0.0, 5.2], abs=1e-12)


def test_lattice_vectors_preserve_lengths_and_angles():
    params = LatticeParams(3.0, 4.0, 5.0, 70.0, 80.0, 100.0)
    a_vec, b_vec, c_vec = lattice.lattice_vectors(params)
    assert np.linalg.norm(a_vec) == pytest.approx(3.0)
    assert np.linalg.norm(b_vec) == pytest.approx(4.0)
    assert np.linalg.norm(c_vec) == pytest.approx(5.0)

    def angle(u, v):
        return math.degrees(math.acos(np.dot(u, v) / (np.linalg.norm(u) * np.linalg.norm(v))))

    assert angle(b_vec, c_vec) == pytest.approx(70.0)
    assert angle(a_vec, c_vec) == pytest.approx(80.0)
    assert angle(a_vec, b_vec) == pytest.approx(100.0)


def test_inconsistent_angles_raise_numeric_error():
    params = LatticeParams(1.0, 1.0, 1.0, 30.0, 30.0, 90.0)
    with pytest.raises(lattice.LatticeNumericError):
        lattice.generate("SC", params)


def test_degenerate_gamma_raises_numeric_error():
    params = LatticeParams(1.0, 1.0, 1.0, 90.0, 90.0, 1e-14)
    with pytest.raises(lattice.LatticeNumericError):
        lattice.lattice_vectors(params)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"a": 0.0, "b": 1.0, "c": 1.0},
        {"a": 1.0, "b": -2.0, "c": 1.0},
        {"a": 1.0, "b": 1.0, "c": 1.0, "gamma": 180.0},
        {"a": 1.0, "b": 1.0, "c": 1.0, "alpha": 0.0},
    ],
)
def test_lattice_params_reject_out_of_range(kwargs):
    with pytest.raises(LatticeParamsError):
        LatticeParams(**kwargs)
