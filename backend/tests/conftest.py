"""Shared fixtures. Tests never touch the on-disk database: stateless mode is forced
before the app module is imported."""
import os

os.environ["STATELESS_MODE"] = "true"
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import pytest  # noqa: E402

from qr_emergency.core.config import Settings  # noqa: E402


@pytest.fixture()
def raw_profile():
    return {
        "fullName": "  Asha Rao ",
        "bloodGroup": "b+",
        "emergencyContacts": [{"name": "Mom", "phone": "98765 43210"}],
        "governmentHelplines": [{"name": "Emergency", "number": "112"}],
    }


@pytest.fixture()
def stateless_settings(tmp_path):
    return Settings(STATELESS_MODE=True, UPLOAD_DIR=str(tmp_path / "uploads"))
