"""
Response Sanitizer
==================

Recovers a JSON object from free-form model output.

Models wrap their answers in markdown fences, surround them with prose,
double-encode them or drop a comma here and there. Recovery runs these
steps in order, stopping at the first that yields a JSON object:

1. Empty/blank output -> {"error": "empty response"}
2. Strip ```json / ``` fences
3. Slice from the first "{" to the last "}"
4. Parse the slice; then parse again after undoing escaped newlines/quotes
5. Remove every remaining backslash and parse
6. Repair missing/trailing commas and parse
7. Give up -> {"document_type": "unidentified", raw_text, note, timestamp}

Nothing raised while parsing escapes sanitize().
"""

import json
import logging
import re
from typing import Any

from .models import ExtractedDocument, SanitizeStatus

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```[\w-]*")


def sanitize(raw_text: str | None) -> ExtractedDocument:
    """
    Turn raw model output into an ExtractedDocument.

    Args:
        raw_text: Model output as returned by the provider

    Returns:
        ExtractedDocument (always a mapping, never raises for bad input)
    """
    if raw_text is None or not raw_text.strip():
        return ExtractedDocument.empty()

    unfenced = _strip_fences(raw_text)
    unescaped = _unescape(unfenced)

    candidate = _slice_object(unfenced)
    if candidate is not None:
        data = _parse_object(candidate)
        if data is not None:
            return ExtractedDocument(data, status=SanitizeStatus.PARSED)

    sliced = _slice_object(unescaped)
    if sliced is not None:
        data = _parse_object(sliced)
        if data is not None:
            return ExtractedDocument(data, status=SanitizeStatus.PARSED)

    # No brace pair: the remaining steps work on the whole text
    text = sliced if sliced is not None else unescaped

    stripped = text.replace("\\", "")
    data = _parse_object(stripped)
    if data is not None:
        logger.info("Model output recovered after removing backslashes")
        return ExtractedDocument(data, status=SanitizeStatus.UNESCAPED)

    if sliced is not None:
        data = _parse_object(repair_json_text(stripped))
        if data is not None:
            logger.info("Model output recovered after JSON repair")
            return ExtractedDocument(data, status=SanitizeStatus.REPAIRED)

    logger.warning("Model output is not valid JSON, returning unidentified document")
    return ExtractedDocument.unidentified(raw_text)


def _strip_fences(text: str) -> str:
    """Remove markdown code fences (```json and bare ```)."""
    return _FENCE_RE.sub("", text).strip()


def _unescape(text: str) -> str:
    """Undo double-encoding: literal \\n becomes a space, \\" becomes "."""
    return (
        text.replace("\\r\\n", " ")
        .replace("\\n", " ")
        .replace('\\"', '"')
        .strip()
    )


def _slice_object(text: str) -> str | None:
    """Return text from the first '{' to the last '}', or None."""
    start = text.find("{")
    end = text.rfind("}")
    if start < 0 or end <= start:
        return None
    return text[start:end + 1]


def _parse_object(text: str) -> dict[str, Any] | None:
    """Parse text as a JSON object; None on any failure or non-object value."""
    try:
        data = json.loads(text, strict=False)
    except (ValueError, RecursionError):
        return None
    if not isinstance(data, dict):
        return None
    return data


# =============================================================================
# JSON repair
# =============================================================================


def repair_json_text(text: str) -> str:
    """
    Attempt to repair common LLM JSON generation errors.

    Strategies, each tried on the original text and kept only if the
    result parses:
    1. Missing commas between properties
    2. Trailing commas before closing braces/brackets
    3. Both of the above

    Args:
        text: JSON text that failed to parse

    Returns:
        Repaired text, or the original if no strategy worked
    """
    strategies = (
        ("missing commas", _fix_missing_commas),
        ("trailing commas", _remove_trailing_commas),
        ("missing + trailing commas", lambda t: _remove_trailing_commas(_fix_missing_commas(t))),
    )

    for label, strategy in strategies:
        repaired = strategy(text)
        if repaired == text:
            continue
        try:
            json.loads(repaired, strict=False)
        except (ValueError, RecursionError):
            continue
        logger.debug("JSON repaired: %s", label)
        return repaired

    return text


# Value end followed by a newline and the next "key":
_MISSING_COMMA_RE = re.compile(
    r'(\}|\]|"|\d|\btrue|\bfalse|\bnull)[ \t]*\n(\s*"[^"\n]+"\s*:)'
)


def _fix_missing_commas(text: str) -> str:
    """
    Insert commas between properties split only by a newline.

    Example: {"a": 1\n "b": 2} -> {"a": 1,\n "b": 2}
    """
    return _MISSING_COMMA_RE.sub(r"\1,\n\2", text)


def _remove_trailing_commas(text: str) -> str:
    """
    Remove trailing commas before closing braces/brackets.

    Example: {"key": "value",} -> {"key": "value"}
    """
    return re.sub(r",\s*([}\]])", r"\1", text)
