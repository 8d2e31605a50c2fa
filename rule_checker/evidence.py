"""
Evidence verification: the anti-hallucination layer.

The model is asked to cite ``"Page X, Line Y: <exact line>"``. It often
invents line numbers or paraphrases the text. A citation is accepted only
when, checked by code and not by the model:

  1. it parses as ``Page <digits>, Line <digits>: <text>``
  2. the address exists in the document
  3. the address was actually shown to the model (not truncated away)
  4. the claimed text equals the real line, whitespace-normalized

Accepted citations are rebuilt from the address index, never echoed from
the model, so callers always get the document's own bytes. Rejected ones
become ``""``; a bad citation never fails the request.
"""

from __future__ import annotations

import logging
import re
from typing import NamedTuple, Optional

from .address_index import AddressIndex
from .context import AssembledContext, format_entry
from .models import EvidenceStatus

logger = logging.getLogger(__name__)

_CITATION = re.compile(r"Page\s+([0-9]{1,9}),\s*Line\s+([0-9]{1,9}):\s*(.*)", re.DOTALL)
_WHITESPACE = re.compile(r"\s+")


class EvidenceCheck(NamedTuple):
    evidence: str
    status: EvidenceStatus


_NO_EVIDENCE = EvidenceCheck("", EvidenceStatus.NONE)
_REJECTED = EvidenceCheck("", EvidenceStatus.REJECTED)


def normalize_whitespace(text: str) -> str:
    """Collapse whitespace runs to one space and trim."""
    return _WHITESPACE.sub(" ", text).strip()


class EvidenceValidator:
    """Checks model citations against one document's address index.

    Usage:
        validator = EvidenceValidator(index, context)
        check = validator.validate("Page 1, Line 2: Signed: J. Doe")
        check.evidence   # "" unless verified
    """

    def __init__(self, index: AddressIndex, context: Optional[AssembledContext] = None):
        self.index = index
        self.context = context

    def validate(self, evidence: object) -> EvidenceCheck:
        if evidence is None:
            return _NO_EVIDENCE
        if not isinstance(evidence, str):
            logger.warning("Rejected evidence: not a string (%s)", type(evidence).__name__)
            return _REJECTED
        if not evidence.strip():
            return _NO_EVIDENCE

        match = _CITATION.fullmatch(evidence.strip())
        if match is None:
            logger.warning("Rejected evidence: not in 'Page X, Line Y: text' form")
            return _REJECTED

        page, line = int(match.group(1)), int(match.group(2))
        actual = self.index.text_at(page, line)
        if actual is None:
            logger.warning("Rejected evidence: Page %d, Line %d does not exist", page, line)
            return _REJECTED

        if self.context is not None and not self.context.is_visible(page, line):
            logger.warning(
                "Rejected evidence: Page %d, Line %d was outside the analyzed window",
                page,
                line,
            )
            return EvidenceCheck("", EvidenceStatus.OUTSIDE_WINDOW)

        if normalize_whitespace(match.group(3)) != normalize_whitespace(actual):
            logger.warning(
                "Rejected evidence: text at Page %d, Line %d does not match source",
                page,
                line,
            )
            return _REJECTED

        return EvidenceCheck(format_entry(page, line, actual), EvidenceStatus.VERIFIED)


def validate_evidence(
    evidence: object,
    index: AddressIndex,
    context: Optional[AssembledContext] = None,
) -> str:
    """Return the rebuilt citation, or ``""`` if it cannot be verified."""
    return EvidenceValidator(index, context).validate(evidence).evidence
