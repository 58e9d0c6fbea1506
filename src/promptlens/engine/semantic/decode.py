"""Defensive decoding of provider responses.

Responses are untrusted: the JSON may be wrapped in a fenced code block,
surrounded by prose, or not JSON at all. ``decode_response`` never raises;
it returns either ``Decoded`` with a validated model or ``DecodeFailure``.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ValidationError

M = TypeVar("M", bound=BaseModel)

FENCE_PATTERN = re.compile(r"```(?:json)?\s*\n?([\s\S]*?)```")


@dataclass(frozen=True)
class Decoded(Generic[M]):
    """A response that parsed and validated."""

    value: M


@dataclass(frozen=True)
class DecodeFailure:
    """A response that could not be used, with the reason."""

    reason: str


def extract_json_payload(text: str) -> Any:
    """Parse JSON from a response, unwrapping a fenced code block if present.

    Raises:
        json.JSONDecodeError: If the payload is not valid JSON
    """
    match = FENCE_PATTERN.search(text)
    payload = match.group(1).strip() if match else text.strip()
    return json.loads(payload)


def decode_response(text: str, model: type[M]) -> Decoded[M] | DecodeFailure:
    """Decode a provider response into ``model``.

    Args:
        text: Raw response text
        model: Pydantic model describing the expected payload

    Returns:
        Decoded on success, DecodeFailure otherwise
    """
    try:
        payload = extract_json_payload(text)
    except (json.JSONDecodeError, RecursionError) as e:
        return DecodeFailure(reason=f"invalid JSON: {e}")

    if not isinstance(payload, dict):
        return DecodeFailure(reason=f"expected a JSON object, got {type(payload).__name__}")

    try:
        return Decoded(value=model.model_validate(payload))
    except ValidationError as e:
        return DecodeFailure(reason=f"unexpected shape: {e.error_count()} validation error(s)")
