"""Loaders for the persisted similarity inputs.

Two files back the index:

- Embedding matrix: a safetensors file holding one 2-D float tensor under a
  configurable key. Rows are corpus entries.
- Text map: the corpus texts in row order, bincode-encoded as a
  ``Vec<String>`` with the "standard" (varint) configuration. A ``.json``
  file containing an array of strings is accepted too.

Bincode varint layout:
    A value below 251 is stored in one byte. Otherwise the first byte is a
    tag (251, 252, 253, 254) followed by a little-endian u16, u32, u64 or
    u128. Sequences and strings are prefixed with their varint length.
"""

from __future__ import annotations

import logging
from pathlib import Path

import orjson
import torch  # type: ignore[import]
from safetensors.torch import load_file  # type: ignore[import]

from ..errors import IndexLoadError

logger = logging.getLogger(__name__)

_VARINT_WIDTHS = {251: 2, 252: 4, 253: 8, 254: 16}


def load_embedding_matrix(path: str | Path, key: str, *, device: str = "cpu") -> torch.Tensor:
    """Read the embedding tensor stored under ``key`` in a safetensors file."""
    try:
        tensors = load_file(str(path), device=device)
    except Exception as exc:  # noqa: BLE001 - safetensors raises SafetensorError, not OSError
        raise IndexLoadError(f"failed to read embeddings from {path}: {exc}") from exc
    if key not in tensors:
        raise IndexLoadError(f"embedding key {key!r} not found in {path} (have {sorted(tensors)})")
    matrix = tensors[key]
    if matrix.dim() != 2:
        raise IndexLoadError(f"embedding tensor {key!r} must be 2-D, got shape {tuple(matrix.shape)}")
    logger.info("index: loaded embeddings path=%s key=%s shape=%s", path, key, tuple(matrix.shape))
    return matrix


def read_text_map(path: str | Path) -> list[str]:
    """Read the ordered corpus texts from a bincode or JSON text map."""
    file_path = Path(path)
    try:
        data = file_path.read_bytes()
    except OSError as exc:
        raise IndexLoadError(f"failed to read text map {file_path}: {exc}") from exc

    if file_path.suffix.lower() == ".json":
        texts = _decode_json_texts(data, file_path)
    else:
        texts = decode_bincode_strings(data)
    logger.info("index: loaded text map path=%s entries=%s", file_path, len(texts))
    return texts


def decode_bincode_strings(data: bytes) -> list[str]:
    """Decode a bincode-standard ``Vec<String>`` payload."""
    count, offset = _read_varint(data, 0)
    texts: list[str] = []
    for _ in range(count):
        length, offset = _read_varint(data, offset)
        end = offset + length
        if end > len(data):
            raise IndexLoadError("text map truncated inside a string")
        try:
            texts.append(data[offset:end].decode("utf-8"))
        except UnicodeDecodeError as exc:
            raise IndexLoadError(f"text map entry {len(texts)} is not valid UTF-8") from exc
        offset = end
    if offset != len(data):
        logger.warning("index: text map has %s trailing bytes", len(data) - offset)
    return texts


def encode_bincode_strings(texts: list[str]) -> bytes:
    """Encode texts the way ``decode_bincode_strings`` reads them."""
    out = bytearray(_write_varint(len(texts)))
    for text in texts:
        payload = text.encode("utf-8")
        out += _write_varint(len(payload))
        out += payload
    return bytes(out)


def _read_varint(data: bytes, offset: int) -> tuple[int, int]:
    if offset >= len(data):
        raise IndexLoadError("text map truncated")
    tag = data[offset]
    if tag < 251:
        return tag, offset + 1
    width = _VARINT_WIDTHS.get(tag)
    if width is None:
        raise IndexLoadError(f"invalid varint tag {tag} at byte {offset}")
    end = offset + 1 + width
    if end > len(data):
        raise IndexLoadError("text map truncated inside a length prefix")
    return int.from_bytes(data[offset + 1:end], "little"), end


def _write_varint(value: int) -> bytes:
    if value < 251:
        return bytes([value])
    for tag, width in _VARINT_WIDTHS.items():
        if value < 1 << (8 * width):
            return bytes([tag]) + value.to_bytes(width, "little")
    raise ValueError("value too large for a bincode varint")


def _decode_json_texts(data: bytes, path: Path) -> list[str]:
    try:
        loaded = orjson.loads(data)
    except orjson.JSONDecodeError as exc:
        raise IndexLoadError(f"text map {path} is not valid JSON: {exc}") from exc
    if not isinstance(loaded, list) or not all(isinstance(item, str) for item in loaded):
        raise IndexLoadError(f"text map {path} must contain a JSON array of strings")
    return loaded


__all__ = [
    "load_embedding_matrix",
    "read_text_map",
    "decode_bincode_strings",
    "encode_bincode_strings",
]
