"""Response normalizer - turns raw model text into an ItineraryPayload."""

import json
import re
from typing import Any

from pydantic import ValidationError

from tripgen.errors import InvalidAIOutputError
from tripgen.models.itinerary import ItineraryPayload

_OPENING_FENCE = re.compile(r"^```[a-zA-Z]*\s*")
_CLOSING_FENCE = re.compile(r"\s*```$")


def strip_code_fences(text: str) -> str:
    """Remove surrounding ``` / ```json markers and whitespace."""
    cleaned = text.strip()
    cleaned = _OPENING_FENCE.sub("", cleaned)
    cleaned = _CLOSING_FENCE.sub("", cleaned)
    return cleaned.strip()


def parse_itinerary(text: str, carry_over: dict[str, Any] | None = None) -> ItineraryPayload:
    """Parse model output as an itinerary.

    Args:
        text: Raw model text, possibly fenced
        carry_over: Top-level keys to restore if the model dropped them
            (used for revisions, where the original's keys must survive)

    Returns:
        Validated ItineraryPayload

    Raises:
        InvalidAIOutputError: If the text is empty, not JSON, or not an itinerary
    """
    content = strip_code_fences(text or "")
    if not content:
        raise InvalidAIOutputError("AI returned empty content", raw_output=text or "")

    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise InvalidAIOutputError(
            f"AI failed to return valid JSON for the itinerary: {e}", raw_output=text
        ) from e

    if not isinstance(data, dict):
        raise InvalidAIOutputError(
            f"AI returned {type(data).__name__} instead of an itinerary object", raw_output=text
        )

    if carry_over:
        for key, value in carry_over.items():
            data.setdefault(key, value)

    try:
        return ItineraryPayload.model_validate(data)
    except ValidationError as e:
        raise InvalidAIOutputError(
            f"AI output does not match the itinerary schema: {e.error_count()} error(s)",
            raw_output=text,
        ) from e
