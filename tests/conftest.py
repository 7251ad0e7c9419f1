"""Pytest configuration for the bowls dashboard backend."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest


def _ensure_backend_on_path() -> None:
    """Backend modules import each other by bare name; make them importable."""
    backend = Path(__file__).resolve().parent.parent / "bowls_dashboard" / "backend"
    path_str = str(backend)
    if path_str not in sys.path:
        sys.path.insert(0, path_str)


_ensure_backend_on_path()


@pytest.fixture
def temp_db(tmp_path, monkeypatch):
    import config

    db_path = tmp_path / "bowls.db"
    monkeypatch.setattr(config, "DATABASE_PATH", str(db_path))
    return db_path


@pytest.fixture
def lead_setup():
    return {
        "player_a_name": "Alice",
        "player_b_name": "Bea",
        "session_date": "2024-05-01",
        "num_ends": 3,
        "bowls_per_player": 4,
    }
