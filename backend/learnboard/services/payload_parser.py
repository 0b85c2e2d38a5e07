"""Tolerant JSON parsing for uploaded and AI-produced roadmap payloads.

Pasted uploads and model responses often wrap the JSON in a markdown fence,
surround it with prose, or leave trailing commas behind.
"""

import json
import re
from collections.abc import Callable
from typing import Any

from learnboard.core.logging import get_logger

logger = get_logger(__name__)

_TRAILING_COMMA = re.compile(r",(\s*[}\]])")
_CODE_FENCE = re.compile(r"```(?:json|javascript|js|text)?\s*\n(.*?)\n\s*```", re.DOTALL | re.IGNORECASE)


def _loads(text: str) -> dict[str, Any] | list[Any] | None:
    try:
        return json.loads(_TRAILING_COMMA.sub(r"\1", text.strip()))
    except ValueError:
        return None


def _whole(text: str) -> str | None:
    return text


def _fenced(text: str) -> str | None:
    match = _CODE_FENCE.search(text)
    return match.group(1) if match else None


def _embedded(text: str) -> str | None:
    """First balanced {...} or [...] in the text, ignoring brackets inside strings."""
    start = next((i for i, char in enumerate(text) if char in "{["), -1)
    if start == -1:
        return None

    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        char = text[i]
        if escaped:
            escaped = False
        elif char == "\\":
            escaped = True
        elif char == '"':
            in_string = not in_string
        elif not in_string and char in "{[":
            depth += 1
        elif not in_string and char in "}]":
            depth -= 1
            if depth == 0:
                return text[start : i + 1]
    return None


_STRATEGIES: tuple[tuple[str, Callable[[str], str | None]], ...] = (
    ("direct", _whole),
    ("code_block", _fenced),
    ("substring", _embedded),
)


def parse_json_payload(content: str | None) -> dict[str, Any] | list[Any]:
    """Parse a JSON document out of free-form text.

    Tries the whole text, then the first fenced code block, then the first
    balanced JSON substring. Trailing commas are stripped in every strategy.

    Raises:
        ValueError: If content is empty or no strategy yields valid JSON
    """
    if not content or not content.strip():
        raise ValueError("Empty payload")

    for name, extract in _STRATEGIES:
        candidate = extract(content)
        if candidate is None:
            continue
        result = _loads(candidate)
        if result is not None:
            logger.debug("Parsed JSON payload", strategy=name)
            return result

    logger.error("Failed to parse JSON payload", content_preview=content[:200])
    raise ValueError("Failed to parse JSON payload: no valid JSON found")
