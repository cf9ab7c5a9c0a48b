"""Extraction of a commit message from raw model output."""

import json
import re
from collections.abc import Callable

from .validation import normalize_message

_FENCE_PATTERN = re.compile(r"^```(?:json|txt|text)?\s*(.*?)\s*```$", re.IGNORECASE | re.DOTALL)


def strip_code_fence(text: str | None) -> str:
    """Remove one wrapping markdown fence, if present."""
    trimmed = (text or "").strip()
    match = _FENCE_PATTERN.match(trimmed)
    return match.group(1).strip() if match else trimmed


def parse_message_from_json(text: str) -> str | None:
    """Return the string ``message`` field of a JSON object, or None."""
    try:
        parsed = json.loads(text)
    except (ValueError, RecursionError):
        return None

    if not isinstance(parsed, dict):
        return None

    value = parsed.get("message")
    return value if isinstance(value, str) else None


def parse_message_from_embedded_json(text: str) -> str | None:
    """Parse the span between the first ``{`` and the last ``}``."""
    start = text.find("{")
    end = text.rfind("}")
    if start < 0 or end <= start:
        return None
    return parse_message_from_json(text[start : end + 1])


# Tried in order; the first strategy returning a string wins.
EXTRACTION_STRATEGIES: tuple[Callable[[str], str | None], ...] = (
    parse_message_from_json,
    parse_message_from_embedded_json,
)


def extract_message_from_output(raw: str | None) -> str:
    """
    Turn arbitrary model output into a single candidate message.

    Handles fenced output, a strict ``{"message": ...}`` object, JSON
    embedded in prose, and plain text. Never raises: when no JSON can be
    parsed the fence-stripped text itself is the candidate.
    """
    unfenced = strip_code_fence(raw)

    candidate = unfenced
    for strategy in EXTRACTION_STRATEGIES:
        extracted = strategy(unfenced)
        if extracted is not None:
            candidate = extracted
            break

    return normalize_message(strip_code_fence(candidate))
