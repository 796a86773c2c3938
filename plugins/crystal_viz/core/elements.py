"""Display colors and radii for the elements the viewer knows about."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping


@dataclass(frozen=True, slots=True)
class ElementStyle:
    color: str
    radius: float

    def to_dict(self) -> dict[str, object]:
        return {"color": self.color, "radius": self.radius}


DEFAULT_STYLE = ElementStyle("#808080", 1.0)
CIF_FALLBACK_STYLE = ElementStyle("#FFFFFF", 1.0)

ELEMENT_STYLES: Mapping[str, ElementStyle] = MappingProxyType(
    {
        "Fe": ElementStyle("#FF0000", 1.26),
        "C": ElementStyle("#888888", 0.77),
        "Cu": ElementStyle("#FFA500", 1.28),
        "Al": ElementStyle("#0000FF", 1.43),
        "Cl": ElementStyle("#00FF00", 1.00),
        "Na": ElementStyle("#800080", 1.50),
        "O": ElementStyle("#FF4500", 0.60),
        "H": ElementStyle("#FFFFFF", 0.37),
        "N": ElementStyle("#3050F8", 0.75),
    }
)


class ElementPropertyResolver:
    """Read-only element → style lookup.

    The table is never mutated, so one resolver can be shared between
    requests without locking. Callers that need a different fallback for
    unknown symbols (the CIF importer uses white) pass ``default``.
    """

    def __init__(
        self,
        table: Mapping[str, ElementStyle] = ELEMENT_STYLES,
        default: ElementStyle = DEFAULT_STYLE,
    ):
        self._table = table if isinstance(table, MappingProxyType) else MappingProxyType(dict(table))
        self._default = default

    @property
    def default(self) -> ElementStyle:
        return self._default

    def __contains__(self, element: object) -> bool:
        return element in self._table

    def lookup(self, element: str, default: ElementStyle | None = None) -> ElementStyle:
        style = self._table.get(element)
        if style is not None:
            return style
        return default if default is not None else self._default

    def styles(self) -> dict[str, dict[str, object]]:
        return {symbol: style.to_dict() for symbol, style in self._table.items()}


DEFAULT_RESOLVER = ElementPropertyResolver()


__all__ = [
    "CIF_FALLBACK_STYLE",
    "DEFAULT_RESOLVER",
    "DEFAULT_STYLE",
    "ELEMENT_STYLES",
    "ElementPropertyResolver",
    "ElementStyle",
]
