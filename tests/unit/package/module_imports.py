"""Every module in the package must import cleanly."""

from __future__ import annotations

import importlib
import pkgutil

import pytest

import inference_server

MODULES = sorted(
    info.name for info in pkgutil.walk_packages(inference_server.__path__, prefix="inference_server.")
)


def test_streaming_modules_are_discovered() -> None:
    assert "inference_server.generation.transport" in MODULES
    assert "inference_server.server" in MODULES


@pytest.mark.parametrize("name", MODULES)
def test_module_imports(name: str) -> None:
    assert importlib.import_module(name) is not None
