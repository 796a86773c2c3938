import pytest

from plugins.crystal_viz.core import cif
from plugins.crystal_viz.core.models import DEFAULT_CELL

FE_CIF = (
    "_cell_length_a 5.0\n"
    "_cell_length_b 5.0\n"
    "_cell_length_c 5.0\n"
    "loop_\n"
    "_atom_site_label\n"
    "_atom_site_fract_x\n"
    "_atom_site_fract_y\n"
    "_atom_site_fract_z\n"
    "Fe1 0.0 0.0 0.0\n"
)


def test_tokenize_strips_comments_and_whitespace():
    text = "# header\n_cell_length_a\t5.0  # inline\n\n  loop_ \r\n"
    assert cif.tokenize(text) == ("_cell_length_a", "5.0", "loop_")
    assert cif.tokenize("") == ()


def test_peek_is_bounds_safe():
    tokens = ("a", "b")
    assert cif.peek(tokens, 1) == "b"
    assert cif.peek(tokens, 2) is None
    assert cif.peek(tokens, -1) is None


def test_label_and_number_cleanup():
    assert cif.element_from_label("Fe1") == "Fe"
    assert cif.element_from_label("O2-") == "O"
    assert cif.element_from_label("Na+") == "Na"
    assert cif.strip_uncertainty("0.1234(5)") == "0.1234"
    assert cif.strip_uncertainty("0.5") == "0.5"


def test_minimal_document():
    result = cif.parse_cif(FE_CIF)
    assert (result.cell.a, result.cell.b, result.cell.c) == (5.0, 5.0, 5.0)
    assert (result.cell.alpha, result.cell.beta, result.cell.gamma) == (90.0, 90.0, 90.0)
    assert len(result.atoms) == 1
    atom = result.atoms[0]
    assert atom.element == "Fe"
    assert atom.position == (0.0, 0.0, 0.0)
    assert atom.color == "#FF0000"
    assert result.bonds == []
    assert result.diagnostics == []


def test_full_document(nacl_cif_text):
    result = cif.parse_cif(nacl_cif_text)
    assert result.cell.a == pytest.approx(5.6402)
    assert [atom.element for atom in result.atoms] == ["Na", "Cl"]
    assert result.atoms[1].position == pytest.approx((2.8201, 2.8201, 2.8201))
    assert len(result.bonds) == 1
    assert result.diagnostics == []


def test_non_atom_loop_is_skipped():
    text = (
        "_cell_length_a 4.0 _cell_length_b 4.0 _cell_length_c 4.0\n"
        "loop_ _symmetry_equiv_pos_as_xyz x,y,z -x,-y,z\n"
        "loop_ _atom_site_label _atom_site_fract_x _atom_site_fract_y _atom_site_fract_z\n"
        "Cu1 0.5 0.5 0.0\n"
    )
    result = cif.parse_cif(text)
    assert len(result.atoms) == 1
    assert result.atoms[0].position == (2.0, 2.0, 0.0)


def test_rows_stop_at_next_key_and_scalars_resume():
    text = (
        "loop_ _atom_site_label _atom_site_fract_x _atom_site_fract_y _atom_site_fract_z\n"
        "C1 0.1 0.2 0.3\n"
        "O1 0.4 0.5 0.6\n"
        "_cell_length_a 10.0\n"
    )
    result = cif.parse_cif(text)
    assert [atom.element for atom in result.atoms] == ["C", "O"]
    assert result.cell.a == 10.0
    # Placement uses the final cell, so a=10 applies to both rows.
    assert result.atoms[0].position == pytest.approx((1.0, 0.2, 0.3))


def test_short_final_row_is_dropped():
    text = (
        "_cell_length_a 2.0 _cell_length_b 2.0 _cell_length_c 2.0\n"
        "loop_ _atom_site_label _atom_site_fract_x _atom_site_fract_y _atom_site_fract_z\n"
        "Al1 0.0 0.0 0.0\n"
        "Al2 0.5 0.5\n"
    )
    result = cif.parse_cif(text)
    assert len(result.atoms) == 1
    assert len(result.diagnostics) == 1
    assert "incomplete" in result.diagnostics[0].message


def test_bad_numbers_are_recorded_and_skipped():
    text = (
        "_cell_length_a abc _cell_length_b 3.0 _cell_length_c -1\n"
        "loop_ _atom_site_label _atom_site_fract_x _atom_site_fract_y _atom_site_fract_z\n"
        "N1 0.5 ? 0.25(3)\n"
    )
    result = cif.parse_cif(text)
    assert result.cell.a == 1.0
    assert result.cell.b == 3.0
    assert result.cell.c == 1.0
    assert {diag.token for diag in result.diagnostics} == {"abc", "-1", "?"}
    atom = result.atoms[0]
    assert atom.element == "N"
    assert atom.position == pytest.approx((0.5, 0.0, 0.25))

    result = cif.parse_cif(
        "loop_ _atom_site_label _atom_site_fract_x _atom_site_fract_y _atom_site_fract_z\n"
        "Fe1 nan inf -inf\n"
    )
    assert result.atoms[0].position == (0.0, 0.0, 0.0)
    assert [diag.token for diag in result.diagnostics] == ["nan", "inf", "-inf"]


def test_unknown_element_uses_cif_fallback_style():
    text = "loop_ _atom_site_type_symbol _atom_site_fract_x Xe 0.0"
    result = cif.parse_cif(text)
    assert result.atoms[0].element == "Xe"
    assert result.atoms[0].color == "#FFFFFF"
    assert result.atoms[0].radius == 1.0


def test_malformed_document_yields_empty_result():
    result = cif.parse_cif("this is not a CIF _cell_length_a")
    assert result.atoms == []
    assert result.bonds == []
    assert result.cell == DEFAULT_CELL
    assert len(result.diagnostics) == 1


def test_strict_mode_raises_with_diagnostics():
    with pytest.raises(cif.CifParseError) as excinfo:
        cif.parse_cif(FE_CIF.replace("Fe1 0.0", "Fe1 zero"), strict=True)
    assert excinfo.value.diagnostics[0].token == "zero"

    with pytest.raises(cif.CifParseError):
        cif.parse_cif("_cell_length_a 3.0", strict=True)

    assert cif.parse_cif(FE_CIF, strict=True).atoms


def test_triclinic_placement_option():
    text = (
        "_cell_length_a 3.0 _cell_length_b 3.0 _cell_length_c 5.0 _cell_angle_gamma 120\n"
        "loop_ _atom_site_label _atom_site_fract_x _atom_site_fract_y _atom_site_fract_z\n"
        "Mg1 0.0 1.0 0.0\n"
    )
    orthogonal = cif.parse_cif(text)
    triclinic = cif.parse_cif(text, cartesian="triclinic")
    assert orthogonal.atoms[0].position == (0.0, 3.0, 0.0)
    assert triclinic.atoms[0].position == pytest.approx((-1.5, 3.0 * 3 ** 0.5 / 2, 0.0))


def test_invalid_cartesian_mode():
    with pytest.raises(ValueError):
        cif.CifParser(cartesian="spherical")


def test_state_machine_returns_to_scalar_scan_after_loop():
    parser = cif.CifParser()
    tokens = cif.tokenize(
        "loop_ _atom_site_label _atom_site_fract_x Fe1 0.5 loop_ _atom_site_label _atom_site_fract_x Cu1 0.25"
    )
    result = parser.parse_tokens(tokens)
    assert [atom.element for atom in result.atoms] == ["Fe", "Cu"]
    assert [atom.x for atom in result.atoms] == [0.5, 0.25]
