"""Shared pytest fixtures for the duet test suite."""

from __future__ import annotations

from pathlib import Path

import pytest

from tests.helpers import SAMPLE


@pytest.fixture
def sample_source() -> str:
    return SAMPLE


@pytest.fixture
def tmp_project(tmp_path: Path) -> Path:
    """Create a minimal duet project in a temp dir."""
    (tmp_path / "duet.toml").write_text(
        '[project]\nname = "billing"\nversion = "1.0.0"\n'
        '[source]\nroot = "src"\n'
    )
    src = tmp_path / "src"
    src.mkdir()
    (src / "Billing.duet").write_text(SAMPLE)
    return tmp_path
