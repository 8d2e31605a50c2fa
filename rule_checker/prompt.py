"""
The instruction contract sent with every analysis.

The system prompt never changes between requests; only the user prompt
carries the document and the rules. Nothing the model is told here is
trusted later: evidence is re-checked against the address index anyway.
"""

from __future__ import annotations

from typing import Sequence


# ─── System Prompt ───────────────────────────────────────────────────

SYSTEM_PROMPT = """\
You are a strict rule checker for documents.

CHECKING RULES:
1. Evaluate every rule independently, exactly as written.
2. Do NOT assume anything. Do NOT infer unstated intent.
3. Do NOT add, merge or modify rules.
4. If a rule is vague or meaningless (e.g. "1", "abc"), mark it "fail".

EVIDENCE RULES:
1. Evidence MUST be formatted as: "Page X, Line Y: <exact line>"
2. The page and line MUST exist in the provided structured text.
3. The line text MUST be copied verbatim. Do NOT rewrite or summarize it.
4. If no single line supports the verdict, evidence MUST be "".

Return ONLY a JSON array, one object per rule, with these exact keys:
[
    {
        "rule": "the rule text",
        "status": "pass" or "fail",
        "evidence": "Page X, Line Y: <exact line>" or "",
        "reasoning": "short explanation",
        "confidence": integer 0-100
    }
]

NO extra text before or after the array.
"""


def format_rules(rules: Sequence[str]) -> str:
    """Number rules 1-based, one per line."""
    return "\n".join(f"{i}. {rule}" for i, rule in enumerate(rules, start=1))


def build_user_prompt(context_text: str, rules: Sequence[str]) -> str:
    """Pair the addressed document text with the caller's rules."""
    return (
        "PDF Structured Text:\n"
        "------------------------\n"
        f"{context_text}\n"
        "------------------------\n\n"
        "RULES:\n"
        f"{format_rules(rules)}\n\n"
        "Return ONLY JSON."
    )
