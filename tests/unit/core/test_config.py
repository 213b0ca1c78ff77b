"""Unit tests for core config parsing."""

from __future__ import annotations

import os

import pytest

from core.config import RollcallConfig
from core.errors import RollcallConfigError


def test_from_env_reads_data_root(monkeypatch: pytest.MonkeyPatch) -> None:
    """Config should resolve data root from environment."""
    monkeypatch.setenv("ROLLCALL_DATA_ROOT", "./.tmp-rollcall")

    config = RollcallConfig.from_env()

    assert config.data_root.name == ".tmp-rollcall"


def test_from_env_reads_forms_root(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    """Config should resolve forms root to an absolute path."""
    monkeypatch.setenv("ROLLCALL_FORMS_ROOT", str(tmp_path))

    config = RollcallConfig.from_env()

    assert config.forms_root == tmp_path.resolve()


def test_from_env_raises_for_blank_forms_root(monkeypatch: pytest.MonkeyPatch) -> None:
    """Config should fail for a whitespace-only forms root."""
    monkeypatch.setenv("ROLLCALL_FORMS_ROOT", "   ")

    with pytest.raises(RollcallConfigError):
        RollcallConfig.from_env()

    assert os.getenv("ROLLCALL_FORMS_ROOT") == "   "
