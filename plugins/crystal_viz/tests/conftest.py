from pathlib import Path

import pytest

from app import create_app


@pytest.fixture
def nacl_cif_text() -> str:
    path = Path(__file__).parent / "data" / "nacl.cif"
    return path.read_text(encoding="utf-8")


@pytest.fixture
def client():
    app = create_app("TestingConfig")
    return app.test_client()
