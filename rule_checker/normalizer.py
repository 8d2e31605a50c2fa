"""
Normalization of model verdicts into trusted results.

  - rule:        model's value, else the caller's rule at the same position
  - status:      "pass" only for the exact string "pass"; anything else fails
  - evidence:    verified by EvidenceValidator, else ""
  - reasoning:   coerced to str, missing → ""
  - confidence:  leading integer of the value, invalid/missing → 50, clamped 0..100
"""

from __future__ import annotations

import math
import re
from typing import Sequence

from .evidence import EvidenceValidator
from .models import RawVerdict, ValidatedVerdict, VerdictStatus

DEFAULT_CONFIDENCE = 50
MIN_CONFIDENCE = 0
MAX_CONFIDENCE = 100

_LEADING_INT = re.compile(r"\s*([+-]?[0-9]+)")


def parse_confidence(value: object) -> int:
    """Parse a confidence the way a lenient integer parse would, then clamp."""
    parsed: int | None = None
    if isinstance(value, bool):
        parsed = None
    elif isinstance(value, int):
        parsed = value
    elif isinstance(value, float):
        parsed = int(value) if math.isfinite(value) else None
    elif isinstance(value, str):
        match = _LEADING_INT.match(value)
        if match:
            try:
                parsed = int(match.group(1))
            except ValueError:  # beyond the int-conversion digit limit
                parsed = None

    if parsed is None:
        parsed = DEFAULT_CONFIDENCE
    return max(MIN_CONFIDENCE, min(MAX_CONFIDENCE, parsed))


def normalize_status(value: object) -> VerdictStatus:
    return VerdictStatus.PASS if value == "pass" else VerdictStatus.FAIL


def _coerce_text(value: object) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def normalize_verdict(
    raw: RawVerdict,
    position: int,
    rules: Sequence[str],
    validator: EvidenceValidator,
) -> ValidatedVerdict:
    """Convert one untrusted verdict at ``position`` into trusted output."""
    if raw.rule is not None:
        rule = _coerce_text(raw.rule)
    else:
        rule = rules[position] if position < len(rules) else ""

    check = validator.validate(raw.evidence)
    return ValidatedVerdict(
        rule=rule,
        status=normalize_status(raw.status),
        evidence=check.evidence,
        reasoning=_coerce_text(raw.reasoning),
        confidence=parse_confidence(raw.confidence),
        evidence_status=check.status,
    )


def normalize_verdicts(
    items: Sequence[object],
    rules: Sequence[str],
    validator: EvidenceValidator,
) -> list[ValidatedVerdict]:
    return [
        normalize_verdict(RawVerdict.from_item(item), i, rules, validator)
        for i, item in enumerate(items)
    ]
