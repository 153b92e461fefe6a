"""Request payload parsing and validation.

Bodies are read as raw JSON objects and checked by hand so every rejection
carries a stable ``error_code``:

    invalid_payload        body is not a JSON object
    missing_text           /find_similar without ``text``
    invalid_text           ``text`` is not a non-empty string
    invalid_num_results    ``num_results`` is not an integer
    num_results_out_of_range
    missing_prompt         generation without ``prompt``
    invalid_prompt         ``prompt`` is not a string
    prompt_too_long
    invalid_max_length     ``max_length`` is not an integer
    max_length_out_of_range
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..config import MAX_LENGTH_LIMIT, MAX_NUM_RESULTS, MAX_PROMPT_CHARS
from ..errors import ValidationError


@dataclass(frozen=True, slots=True)
class SimilarityRequest:
    text: str
    num_results: int


@dataclass(frozen=True, slots=True)
class GenerationRequest:
    prompt: str
    max_length: int


def _coerce_int(value: Any) -> int:
    """Coerce a value to int, rejecting bools and non-integer floats."""
    if isinstance(value, bool):
        raise TypeError("bool not allowed")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError("non-integer float")
        return int(value)
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise ValueError("empty string")
        return int(stripped)
    raise TypeError("unsupported type")


def _require_object(payload: Any) -> dict[str, Any]:
    if not isinstance(payload, dict):
        raise ValidationError("invalid_payload", "request body must be a JSON object")
    return payload


def _bounded_int(
    payload: dict[str, Any],
    field: str,
    *,
    upper: int,
    invalid_code: str,
    range_code: str,
) -> int:
    if field not in payload:
        raise ValidationError(invalid_code, f"{field} is required")
    try:
        value = _coerce_int(payload[field])
    except (TypeError, ValueError) as exc:
        raise ValidationError(invalid_code, f"{field} must be an integer") from exc
    if not (0 <= value <= upper):
        raise ValidationError(range_code, f"{field} must be between 0 and {upper}")
    return value


def parse_similarity_request(payload: Any) -> SimilarityRequest:
    body = _require_object(payload)
    if "text" not in body:
        raise ValidationError("missing_text", "text is required")
    text = body["text"]
    if not isinstance(text, str) or not text.strip():
        raise ValidationError("invalid_text", "text must be a non-empty string")
    num_results = _bounded_int(
        body,
        "num_results",
        upper=MAX_NUM_RESULTS,
        invalid_code="invalid_num_results",
        range_code="num_results_out_of_range",
    )
    return SimilarityRequest(text=text, num_results=num_results)


def parse_generation_request(payload: Any) -> GenerationRequest:
    """Validate a /generate_text or /generate_text_stream body.

    An empty prompt is accepted; it is still tokenized and decoded.
    """
    body = _require_object(payload)
    if "prompt" not in body:
        raise ValidationError("missing_prompt", "prompt is required")
    prompt = body["prompt"]
    if not isinstance(prompt, str):
        raise ValidationError("invalid_prompt", "prompt must be a string")
    if len(prompt) > MAX_PROMPT_CHARS:
        raise ValidationError("prompt_too_long", f"prompt exceeds {MAX_PROMPT_CHARS} characters")
    max_length = _bounded_int(
        body,
        "max_length",
        upper=MAX_LENGTH_LIMIT,
        invalid_code="invalid_max_length",
        range_code="max_length_out_of_range",
    )
    return GenerationRequest(prompt=prompt, max_length=max_length)


__all__ = [
    "GenerationRequest",
    "SimilarityRequest",
    "parse_generation_request",
    "parse_similarity_request",
]
