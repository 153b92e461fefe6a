"""Unit tests for index loading and the shared-context singleton."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest
import torch
from safetensors.torch import save_file

import inference_server.state.loader as loader_mod
from inference_server.errors import IndexLoadError
from inference_server.index.storage import encode_bincode_strings
from inference_server.state import AsyncSingleton, generation_settings


def _write_index(tmp_path: Path, rows: int, texts: list[str]) -> tuple[Path, Path]:
    embeddings = tmp_path / "embeddings.bin"
    text_map = tmp_path / "text_map.bin"
    save_file({"my_embedding": torch.rand(rows, 4)}, str(embeddings))
    text_map.write_bytes(encode_bincode_strings(texts))
    return embeddings, text_map


def test_load_index_without_file_is_empty(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(loader_mod, "EMBEDDINGS_FILE", "")
    index, corpus = loader_mod.load_index()
    assert len(index) == 0
    assert corpus == []
    assert index.query(torch.ones(7), 3) == []


def test_load_index_from_files(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    embeddings, text_map = _write_index(tmp_path, 3, ["cat", "dog", "car"])
    monkeypatch.setattr(loader_mod, "EMBEDDINGS_FILE", str(embeddings))
    monkeypatch.setattr(loader_mod, "EMBEDDINGS_KEY", "my_embedding")
    monkeypatch.setattr(loader_mod, "TEXT_MAP_FILE", str(text_map))
    index, corpus = loader_mod.load_index()
    assert len(index) == 3
    assert index.dim == 4
    assert corpus == ["cat", "dog", "car"]


def test_load_index_row_count_mismatch(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    embeddings, text_map = _write_index(tmp_path, 3, ["cat", "dog"])
    monkeypatch.setattr(loader_mod, "EMBEDDINGS_FILE", str(embeddings))
    monkeypatch.setattr(loader_mod, "EMBEDDINGS_KEY", "my_embedding")
    monkeypatch.setattr(loader_mod, "TEXT_MAP_FILE", str(text_map))
    with pytest.raises(IndexLoadError):
        loader_mod.load_index()


def test_generation_settings_disable_full_top_p(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(loader_mod, "GEN_TOP_P", 1.0)
    assert generation_settings().top_p is None
    monkeypatch.setattr(loader_mod, "GEN_TOP_P", 0.9)
    assert generation_settings().top_p == 0.9


class _CountingSingleton(AsyncSingleton[object]):
    def __init__(self) -> None:
        super().__init__()
        self.created = 0
        self.released: list[object] = []

    async def _create_instance(self) -> object:
        self.created += 1
        await asyncio.sleep(0.01)
        return object()

    async def _shutdown_instance(self, instance: object) -> None:
        self.released.append(instance)


def test_singleton_builds_once_under_concurrency() -> None:
    async def scenario() -> tuple[_CountingSingleton, list[object]]:
        holder = _CountingSingleton()
        results = await asyncio.gather(*(holder.get() for _ in range(10)))
        return holder, results

    holder, results = asyncio.run(scenario())
    assert holder.created == 1
    assert all(r is results[0] for r in results)


def test_singleton_shutdown_releases_instance() -> None:
    async def scenario() -> _CountingSingleton:
        holder = _CountingSingleton()
        await holder.get()
        await holder.shutdown()
        await holder.shutdown()
        return holder

    holder = asyncio.run(scenario())
    assert not holder.is_initialized
    assert len(holder.released) == 1


def test_singleton_set_skips_creation() -> None:
    holder = _CountingSingleton()
    instance = object()
    holder.set(instance)
    assert asyncio.run(holder.get()) is instance
    assert holder.created == 0
