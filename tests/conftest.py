from __future__ import annotations

import os
from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def _isolated_settings(tmp_path: Path, monkeypatch) -> None:
    """Keep the developer's DOMAINWHO_* variables and config file out of every test."""
    for name in list(os.environ):
        if name.startswith("DOMAINWHO_"):
            monkeypatch.delenv(name)
    monkeypatch.setenv("DOMAINWHO_CONFIG", str(tmp_path / "absent.json"))
