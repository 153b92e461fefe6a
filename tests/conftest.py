"""Pytest collection rules for non-prefixed local test modules."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

# Keep model loading out of the HTTP tests
os.environ.setdefault("PRELOAD_CONTEXT", "0")
os.environ.setdefault("TOKENIZERS_PARALLELISM", "false")


def _is_collectable_test_module(path: Path) -> bool:
    if path.suffix != ".py" or path.name == "__init__.py":
        return False
    return "unit" in path.parts


def pytest_collect_file(file_path: Path, parent):
    """Collect non-prefixed test modules under tests/unit."""
    if not _is_collectable_test_module(file_path):
        return None
    return pytest.Module.from_parent(parent, path=file_path)
