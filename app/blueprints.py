"""Blueprint registration helpers."""

from __future__ import annotations

import importlib
import pkgutil
from pathlib import Path

from flask import Blueprint, Flask

from common.logging import get_logger

logger = get_logger()


def _iter_blueprints(package: str = "plugins") -> list[Blueprint]:
    """Collect ``blueprints`` (or a single ``bp``) from each plugin's ``api`` module."""

    module_path = Path(__file__).resolve().parent.parent / package
    if not module_path.exists():
        return []
    found: list[Blueprint] = []
    for module_info in pkgutil.iter_modules([str(module_path)]):
        if not module_info.ispkg:
            continue
        module = importlib.import_module(f"{package}.{module_info.name}.api")
        module_blueprints = getattr(module, "blueprints", None)
        if module_blueprints is None:
            single = getattr(module, "bp", None)
            module_blueprints = [single] if single is not None else []
        found.extend(module_blueprints)
    return found


def register_plugin_blueprints(app: Flask) -> None:
    for bp in _iter_blueprints():
        app.register_blueprint(bp)
        logger.debug("Registered blueprint %s at %s", bp.name, bp.url_prefix)


__all__ = ["register_plugin_blueprints"]
