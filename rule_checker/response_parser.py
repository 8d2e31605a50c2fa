"""
Recovery parsing of the model's reply.

Models are told to return bare JSON and frequently don't ("Sure! [...] Hope
that helps."). This stage only recovers a candidate array from noisy text;
it does not look at what is inside. Field checks belong to the normalizer.
"""

from __future__ import annotations

import json
import logging
import re

from .exceptions import ResponseParseError

logger = logging.getLogger(__name__)

# Greedy: first "[" through last "]", across newlines.
_ARRAY_SPAN = re.compile(r"\[.*\]", re.DOTALL)


def parse_verdict_array(raw: str) -> list:
    """Extract the JSON array of verdicts from ``raw``.

    Raises:
        ResponseParseError: if no JSON array can be recovered.
    """
    if not isinstance(raw, str):
        raise ResponseParseError("Invalid JSON from LLM: reply is not text")

    # ValueError also covers oversized integer literals; RecursionError deep nesting.
    try:
        parsed = json.loads(raw)
    except (ValueError, RecursionError):
        pass
    else:
        if isinstance(parsed, list):
            return parsed

    match = _ARRAY_SPAN.search(raw)
    if match is None:
        raise ResponseParseError(
            "Invalid JSON from LLM: no array found in reply",
            details={"reply_length": len(raw)},
        )

    try:
        recovered = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise ResponseParseError(
            f"Invalid JSON from LLM: {e.msg}",
            details={"reply_length": len(raw), "position": e.pos},
        ) from e
    except (ValueError, RecursionError) as e:
        raise ResponseParseError(
            f"Invalid JSON from LLM: {e}", details={"reply_length": len(raw)}
        ) from e

    if not isinstance(recovered, list):
        raise ResponseParseError("Invalid JSON from LLM: reply is not an array")

    logger.warning("Recovered verdict array from non-JSON reply (%d chars)", len(raw))
    return recovered
