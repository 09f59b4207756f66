import typing as t
from pathlib import Path

import pytest

from rogue._internal import constants

WEIGHT_FILE_SIZE = 256


@pytest.fixture
def small_weight_threshold(monkeypatch):
    monkeypatch.setattr(constants, "MIN_WEIGHT_FILE_SIZE", WEIGHT_FILE_SIZE)
    return WEIGHT_FILE_SIZE


@pytest.fixture
def make_files(tmp_path):
    """
    Create files under ``tmp_path``. Weights get ``WEIGHT_FILE_SIZE`` bytes.
    """

    def _make_files(weights: t.Iterable[str] = (), others: t.Iterable[str] = ()) -> Path:
        for i, rel_path in enumerate(weights):
            path = tmp_path / rel_path
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(bytes([i % 256]) * WEIGHT_FILE_SIZE)
        for rel_path in others:
            path = tmp_path / rel_path
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text("print('hello')\n")
        return tmp_path

    return _make_files


__all__ = ["small_weight_threshold", "make_files", "WEIGHT_FILE_SIZE"]
