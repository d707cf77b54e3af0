"""
Extract JSON from model text output.

Models wrap JSON in markdown fences, add commentary around it, or leave
trailing commas. parse_model_json tries progressively looser readings
before giving up.
"""

import json
import logging
import re
from typing import Any, Optional

logger = logging.getLogger(__name__)

_FENCE_JSON = re.compile(r"```json\s*", re.IGNORECASE)
_FENCE = re.compile(r"```\s*")
_TRAILING_COMMA = re.compile(r",\s*([}\]])")

_CLOSERS = {"}": "{", "]": "["}


class ResponseParseError(ValueError):
    """Model output did not contain parseable JSON."""


def strip_code_fences(text: str) -> str:
    return _FENCE.sub("", _FENCE_JSON.sub("", text)).strip()


def extract_first_balanced_json(text: str) -> Optional[str]:
    """
    Find the first balanced {...} or [...] block in text.

    Brackets inside string literals are not special-cased; a mismatched
    closer is ignored rather than resetting the scan.

    Returns:
        The block including its delimiters, or None if none closes
    """
    stack = []
    start = -1
    for index, char in enumerate(text):
        if char in "{[":
            if not stack:
                start = index
            stack.append(char)
        elif char in _CLOSERS:
            if not stack:
                continue
            if stack[-1] == _CLOSERS[char]:
                stack.pop()
                if not stack and start != -1:
                    return text[start:index + 1]
    return None


def looks_truncated(text: str) -> bool:
    """True if the reply does not end like a JSON document (likely cut off by max_tokens).

    Code fences are stripped first, so a complete fenced reply is not truncated.
    """
    stripped = strip_code_fences(text)
    return bool(stripped) and not (stripped.endswith("}") or stripped.endswith("]"))


def parse_model_json(text: Any) -> Any:
    """
    Parse JSON out of a model reply.

    Args:
        text: Raw reply text; non-string values are returned unchanged

    Returns:
        Parsed JSON value

    Raises:
        ResponseParseError: If no reading of the text parses
    """
    if not isinstance(text, str):
        return text

    stripped = strip_code_fences(text)
    try:
        return json.loads(stripped)
    except json.JSONDecodeError:
        pass

    balanced = extract_first_balanced_json(stripped)
    if balanced:
        try:
            return json.loads(balanced)
        except json.JSONDecodeError:
            pass

    without_trailing_commas = _TRAILING_COMMA.sub(r"\1", balanced or stripped)
    try:
        return json.loads(without_trailing_commas)
    except json.JSONDecodeError as e:
        logger.warning(f"Unable to parse JSON from model response ({len(text)} chars): {e}")
        raise ResponseParseError(f"Unable to parse JSON from model response: {e}") from e
