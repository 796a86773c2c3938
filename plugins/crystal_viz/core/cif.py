"""Minimal CIF reader for cell parameters and ``_atom_site_`` loops.

The text is split into a flat token tuple (comments removed) and walked by a
three-state scanner:

``SCALAR_SCAN``
    Picks up ``_cell_length_*`` / ``_cell_angle_*`` values and watches for a
    ``loop_`` whose first header starts with ``_atom_site_``.
``LOOP_HEADER_SCAN``
    Collects the atom-site column headers. The first non-header token is the
    first data value and is left for the next state.
``LOOP_DATA_SCAN``
    Reads rows of ``len(headers)`` tokens until a token starting with ``_``
    or a new ``loop_`` appears, or too few tokens remain for a full row.

Symmetry operations are not applied; only the listed sites become atoms.
A bad token never aborts the import. It is recorded as a
:class:`ParseDiagnostic` and skipped, unless the parser runs in strict mode.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Literal, Sequence

from common.logging import get_logger

from .bonds import DEFAULT_DETECTOR, BondDetector
from .elements import CIF_FALLBACK_STYLE, DEFAULT_RESOLVER, ElementPropertyResolver
from .lattice import LatticeNumericError, fractional_to_cartesian, lattice_vectors, orthogonal_to_cartesian
from .models import (
    DEFAULT_CELL,
    AtomRecord,
    CifParseResult,
    LatticeParams,
    LatticeParamsError,
    ParseDiagnostic,
)

logger = get_logger("crystal_viz")

CartesianMode = Literal["orthogonal", "triclinic"]
CARTESIAN_MODES: tuple[str, ...] = ("orthogonal", "triclinic")

LOOP_KEYWORD = "loop_"
ATOM_SITE_PREFIX = "_atom_site_"
UNKNOWN_ELEMENT = "X"

CELL_KEYS: dict[str, str] = {
    "_cell_length_a": "a",
    "_cell_length_b": "b",
    "_cell_length_c": "c",
    "_cell_angle_alpha": "alpha",
    "_cell_angle_beta": "beta",
    "_cell_angle_gamma": "gamma",
}

DEFAULT_CELL_VALUES: dict[str, float] = DEFAULT_CELL.to_dict()

_COMMENT_RE = re.compile(r"#[^\r\n]*")
_UNCERTAINTY_RE = re.compile(r"\([^()]*\)$")
_ELEMENT_NOISE_RE = re.compile(r"[0-9+\-]")


class CifParseError(ValueError):
    """Raised in strict mode when the document could not be read cleanly."""

    def __init__(self, message: str, *, diagnostics: Sequence[ParseDiagnostic] = ()):
        super().__init__(message)
        self.diagnostics = list(diagnostics)


class ScanState(Enum):
    SCALAR_SCAN = "scalar_scan"
    LOOP_HEADER_SCAN = "loop_header_scan"
    LOOP_DATA_SCAN = "loop_data_scan"


def tokenize(text: str) -> tuple[str, ...]:
    """Strip ``#`` comments and split on whitespace."""

    return tuple(_COMMENT_RE.sub("", text or "").split())


def peek(tokens: Sequence[str], index: int) -> str | None:
    """Return ``tokens[index]`` or ``None`` past either end."""

    if 0 <= index < len(tokens):
        return tokens[index]
    return None


def strip_uncertainty(value: str) -> str:
    """``0.1234(5)`` → ``0.1234``."""

    return _UNCERTAINTY_RE.sub("", value)


def element_from_label(value: str) -> str:
    """``Fe1`` → ``Fe``, ``O2-`` → ``O``."""

    return _ELEMENT_NOISE_RE.sub("", strip_uncertainty(value))


@dataclass
class _SiteRow:
    element: str = UNKNOWN_ELEMENT
    frac: list[float] = field(default_factory=lambda: [0.0, 0.0, 0.0])


@dataclass
class _ParseRun:
    """Mutable walk state for one document; never shared between calls."""

    tokens: tuple[str, ...]
    cursor: int = 0
    state: ScanState = ScanState.SCALAR_SCAN
    headers: list[str] = field(default_factory=list)
    cell: dict[str, float] = field(default_factory=lambda: DEFAULT_CELL_VALUES.copy())
    rows: list[_SiteRow] = field(default_factory=list)
    diagnostics: list[ParseDiagnostic] = field(default_factory=list)

    @property
    def remaining(self) -> int:
        return len(self.tokens) - self.cursor

    def note(self, index: int, token: str | None, message: str) -> None:
        logger.warning("CIF token %d (%r): %s", index, token, message)
        self.diagnostics.append(ParseDiagnostic(index=index, token=token, message=message))


_FRACT_AXES: tuple[tuple[str, int], ...] = (("_fract_x", 0), ("_fract_y", 1), ("_fract_z", 2))


class CifParser:
    def __init__(
        self,
        *,
        resolver: ElementPropertyResolver = DEFAULT_RESOLVER,
        detector: BondDetector = DEFAULT_DETECTOR,
        cartesian: CartesianMode = "orthogonal",
        strict: bool = False,
    ):
        if cartesian not in CARTESIAN_MODES:
            raise ValueError(f"cartesian must be one of {CARTESIAN_MODES}")
        self.resolver = resolver
        self.detector = detector
        self.cartesian = cartesian
        self.strict = strict
        self._handlers: dict[ScanState, Callable[[_ParseRun], ScanState]] = {
            ScanState.SCALAR_SCAN: self._scan_scalar,
            ScanState.LOOP_HEADER_SCAN: self._scan_loop_header,
            ScanState.LOOP_DATA_SCAN: self._scan_loop_data,
        }

    def parse(self, text: str) -> CifParseResult:
        return self.parse_tokens(tokenize(text))

    def parse_tokens(self, tokens: Sequence[str]) -> CifParseResult:
        run = _ParseRun(tokens=tuple(tokens))
        while run.cursor < len(run.tokens):
            run.state = self._handlers[run.state](run)

        cell = LatticeParams(**run.cell)
        atoms = self._place_atoms(run, cell)

        if self.strict:
            if run.diagnostics:
                raise CifParseError(
                    f"CIF contains {len(run.diagnostics)} unreadable token(s)",
                    diagnostics=run.diagnostics,
                )
            if not atoms:
                raise CifParseError("CIF contains no _atom_site_ rows")

        return CifParseResult(
            cell=cell,
            atoms=atoms,
            bonds=self.detector.calculate_bonds(atoms),
            diagnostics=run.diagnostics,
        )

    def _scan_scalar(self, run: _ParseRun) -> ScanState:
        index = run.cursor
        token = run.tokens[index]

        field_name = CELL_KEYS.get(token)
        if field_name is not None:
            raw = peek(run.tokens, index + 1)
            if raw is None:
                run.note(index, token, "missing value")
                run.cursor += 1
                return ScanState.SCALAR_SCAN
            self._assign_cell(run, field_name, index + 1, raw)
            run.cursor += 2
            return ScanState.SCALAR_SCAN

        run.cursor += 1
        if token == LOOP_KEYWORD:
            following = peek(run.tokens, run.cursor)
            if following is not None and following.startswith(ATOM_SITE_PREFIX):
                run.headers = []
                return ScanState.LOOP_HEADER_SCAN
        return ScanState.SCALAR_SCAN

    def _scan_loop_header(self, run: _ParseRun) -> ScanState:
        token = run.tokens[run.cursor]
        if token.startswith(ATOM_SITE_PREFIX):
            run.headers.append(token)
            run.cursor += 1
            return ScanState.LOOP_HEADER_SCAN
        return ScanState.LOOP_DATA_SCAN

    def _scan_loop_data(self, run: _ParseRun) -> ScanState:
        stride = len(run.headers)
        while run.cursor < len(run.tokens):
            head = run.tokens[run.cursor]
            if head.startswith("_") or head == LOOP_KEYWORD:
                break
            if run.remaining < stride:
                run.note(
                    run.cursor,
                    head,
                    f"incomplete atom_site row: {run.remaining} of {stride} values",
                )
                break
            run.rows.append(self._read_row(run, stride))
        return ScanState.SCALAR_SCAN

    def _read_row(self, run: _ParseRun, stride: int) -> _SiteRow:
        row = _SiteRow()
        for offset, header in enumerate(run.headers):
            index = run.cursor + offset
            raw = run.tokens[index]
            if "_label" in header or "_symbol" in header:
                row.element = element_from_label(raw) or UNKNOWN_ELEMENT
                continue
            for suffix, axis in _FRACT_AXES:
                if suffix in header:
                    try:
                        value = float(strip_uncertainty(raw))
                    except ValueError:
                        value = math.nan
                    if math.isfinite(value):
                        row.frac[axis] = value
                    else:
                        run.note(index, raw, f"invalid number for {header}")
                    break
        run.cursor += stride
        return row

    def _assign_cell(self, run: _ParseRun, field_name: str, index: int, raw: str) -> None:
        try:
            value = float(strip_uncertainty(raw))
        except ValueError:
            run.note(index, raw, f"invalid number for cell parameter {field_name}")
            return
        try:
            LatticeParams(**{**run.cell, field_name: value})
        except LatticeParamsError as exc:
            run.note(index, raw, str(exc))
            return
        run.cell[field_name] = value

    def _place_atoms(self, run: _ParseRun, cell: LatticeParams) -> list[AtomRecord]:
        to_cartesian = self._converter(run, cell)
        atoms: list[AtomRecord] = []
        for row in run.rows:
            style = self.resolver.lookup(row.element, default=CIF_FALLBACK_STYLE)
            atoms.append(
                AtomRecord(
                    element=row.element,
                    position=to_cartesian(row.frac),
                    color=style.color,
                    radius=style.radius,
                )
            )
        return atoms

    def _converter(self, run: _ParseRun, cell: LatticeParams) -> Callable[[Sequence[float]], tuple[float, float, float]]:
        if self.cartesian == "triclinic" and run.rows:
            try:
                vectors = lattice_vectors(cell)
            except LatticeNumericError as exc:
                run.note(len(run.tokens), None, f"{exc}; using orthogonal placement")
            else:
                return lambda frac: fractional_to_cartesian(frac, cell, vectors=vectors)
        return lambda frac: orthogonal_to_cartesian(frac, cell)


def parse_cif(
    text: str,
    *,
    strict: bool = False,
    cartesian: CartesianMode = "orthogonal",
    resolver: ElementPropertyResolver = DEFAULT_RESOLVER,
    detector: BondDetector = DEFAULT_DETECTOR,
) -> CifParseResult:
    """Parse CIF ``text`` into cell parameters, atoms and bonds."""

    parser = CifParser(resolver=resolver, detector=detector, cartesian=cartesian, strict=strict)
    return parser.parse(text)


__all__ = [
    "CARTESIAN_MODES",
    "CELL_KEYS",
    "CifParseError",
    "CifParser",
    "ScanState",
    "element_from_label",
    "parse_cif",
    "peek",
    "strip_uncertainty",
    "tokenize",
]
