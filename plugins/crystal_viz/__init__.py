"""CrystalViz plugin manifest."""

manifest = {
    "title": "CrystalViz",
    "summary": "Generate idealized unit cells, import CIF atom sites, detect bonds and export XYZ.",
    "category": "Materials Analysis",
    "blueprint": "crystal_viz",
}

__all__ = ["manifest"]
