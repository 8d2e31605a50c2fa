"""
Pydantic models for verdicts — untrusted in, trusted out.

The model's reply is kept in its own permissive type (RawVerdict) so that
nothing it says can reach callers without passing through the normalizer,
which is the only code that builds a ValidatedVerdict.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


# ─── Enumerations ───────────────────────────────────────────────────


class VerdictStatus(str, Enum):
    """Outcome of one rule check."""

    PASS = "pass"
    FAIL = "fail"  # Default whenever the model is unclear


class EvidenceStatus(str, Enum):
    """What happened to the citation the model offered."""

    NONE = "none"  # Model cited nothing
    VERIFIED = "verified"  # Matched the addressed text, rebuilt from source
    REJECTED = "rejected"  # Malformed, out of range, or text mismatch
    OUTSIDE_WINDOW = "outside_window"  # Real line, but cut from the model's context


# ─── Untrusted Model Output ─────────────────────────────────────────


class RawVerdict(BaseModel):
    """One object from the model's JSON array, exactly as returned.

    Every field is ``Any``: the model may omit a key, send null, or send the
    wrong type. Nothing here is validated.
    """

    model_config = ConfigDict(extra="ignore")

    rule: Any = None
    status: Any = None
    evidence: Any = None
    reasoning: Any = None
    confidence: Any = None

    @classmethod
    def from_item(cls, item: object) -> RawVerdict:
        """Wrap an arbitrary array element; non-objects become an empty verdict."""
        if isinstance(item, dict):
            return cls.model_validate(item)
        return cls()


# ─── Trusted Output ─────────────────────────────────────────────────


class ValidatedVerdict(BaseModel):
    """A verdict safe to hand to callers."""

    rule: str
    status: VerdictStatus
    evidence: str = ""  # "" or "Page P, Line L: <exact source text>"
    reasoning: str = ""
    confidence: int = Field(ge=0, le=100)
    evidence_status: EvidenceStatus = EvidenceStatus.NONE


class AnalysisReport(BaseModel):
    """The final output of the analysis pipeline."""

    results: list[ValidatedVerdict] = Field(default_factory=list)
    document_hash: str = ""  # SHA-256 of the uploaded bytes for audit trail
    page_count: int = 0
    line_count: int = 0
    truncated: bool = False
    model: Optional[str] = None
