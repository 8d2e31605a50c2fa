"""
Main analysis pipeline — orchestrates the full workflow.

Flow:
  ┌──────────────┐
  │ Upload bytes │
  └──────┬───────┘
         │
  ┌──────▼───────┐
  │   Extract    │   ← PDF → per-page text (external)
  └──────┬───────┘
         │
  ┌──────▼───────┐
  │   Segment    │   ← Pages of trimmed, non-empty lines
  └──────┬───────┘
         │
  ┌──────▼───────┐
  │ Address/Ctx  │   ← "Page P, Line L: text", head/tail cap
  └──────┬───────┘
         │
  ┌──────▼───────┐
  │     LLM      │   ← One call, fixed instruction contract (external)
  └──────┬───────┘
         │
  ┌──────▼───────┐
  │   Recover    │   ← JSON array out of noisy reply
  └──────┬───────┘
         │
  ┌──────▼───────┐
  │  Normalize   │   ← Evidence verified against the index
  └──────┬───────┘
         │
  ┌──────▼───────┐
  │    Report    │
  └──────────────┘

Design principles:
  - Extraction and completion are injected, so the whole pipeline runs in
    tests with fakes and no network.
  - Everything built here is request-scoped; the pipeline holds no state
    between runs and is safe to share across concurrent requests.
  - The uploaded bytes are SHA-256 hashed for audit trail.
"""

from __future__ import annotations

import hashlib
import json
import logging
from typing import Optional, Sequence

from .address_index import AddressIndex
from .config import Settings
from .context import assemble_context
from .evidence import EvidenceValidator
from .exceptions import ExtractionError, InputError, ModelCallError, RuleCheckError
from .extraction import ExtractFn, extract_text
from .llm_client import ChatCompletionClient, CompletionFn
from .models import AnalysisReport
from .normalizer import normalize_verdicts
from .prompt import SYSTEM_PROMPT, build_user_prompt
from .response_parser import parse_verdict_array
from .segmenter import ExtractedText

logger = logging.getLogger(__name__)


def parse_rules(raw: Optional[str]) -> list[str]:
    """Decode the ``rules`` form field: a JSON array of strings.

    Raises:
        InputError: if missing, not JSON, not an array of strings, or empty.
    """
    if raw is None or not raw.strip():
        raise InputError("Rules missing")
    try:
        rules = json.loads(raw)
    except json.JSONDecodeError as e:
        raise InputError(f"Rules must be a JSON array: {e.msg}") from e
    return check_rules(rules)


def check_rules(rules: object) -> list[str]:
    if not isinstance(rules, (list, tuple)) or not all(isinstance(r, str) for r in rules):
        raise InputError("Rules must be a JSON array of strings")
    if not rules:
        raise InputError("Rules missing")
    return list(rules)


class RuleCheckPipeline:
    """Orchestrates one document analysis per ``run`` call.

    Usage:
        pipeline = RuleCheckPipeline(Settings.from_env())
        report = pipeline.run(pdf_bytes, ["document must contain a signature"])
        for verdict in report.results:
            print(verdict.status, verdict.evidence)
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        complete: Optional[CompletionFn] = None,
        extract: Optional[ExtractFn] = None,
    ):
        self.settings = settings or Settings()
        self.complete: CompletionFn = complete or ChatCompletionClient(self.settings)
        self._extract = extract or extract_text

    def run(self, document: bytes, rules: Sequence[str]) -> AnalysisReport:
        """Extract ``document`` and judge every rule against it.

        Args:
            document: Raw uploaded bytes (a PDF with the default extractor).
            rules: Caller's rules, in order.

        Returns:
            AnalysisReport whose results carry only verified evidence.
        """
        if not document:
            raise InputError("No file uploaded")
        rules = check_rules(rules)

        doc_hash = hashlib.sha256(document).hexdigest()

        logger.info("Extracting text (%d bytes)...", len(document))
        try:
            extracted = self._extract(document)
        except RuleCheckError:
            raise
        except Exception as e:
            raise ExtractionError(f"Text extraction failed: {e}") from e

        return self.analyze_text(extracted, rules, document_hash=doc_hash)

    def analyze_text(
        self,
        text: ExtractedText,
        rules: Sequence[str],
        document_hash: str = "",
    ) -> AnalysisReport:
        """Run everything after extraction on already-extracted text."""
        # ── Step 1: Address space ───────────────────────────────────
        index = AddressIndex.from_text(text)
        logger.info(
            "Segmented document: %d page(s), %d line(s)",
            index.page_count(),
            index.total_lines(),
        )

        # ── Step 2: Context for the model ───────────────────────────
        context = assemble_context(
            index,
            max_chars=self.settings.context_max_chars,
            head_chars=self.settings.context_head_chars,
            tail_chars=self.settings.context_tail_chars,
        )

        # ── Step 3: Single model call ───────────────────────────────
        user_prompt = build_user_prompt(context.text, rules)
        logger.info("Evaluating %d rule(s) with %s", len(rules), self.settings.model)
        try:
            reply = self.complete(
                SYSTEM_PROMPT,
                user_prompt,
                self.settings.model,
                self.settings.temperature,
                self.settings.max_tokens,
            )
        except RuleCheckError:
            raise
        except Exception as e:
            raise ModelCallError(f"LLM call failed: {e}") from e

        # ── Step 4: Recover, verify, normalize ──────────────────────
        items = parse_verdict_array(reply or "")
        validator = EvidenceValidator(index, context)
        results = normalize_verdicts(items, rules, validator)

        verified = sum(1 for r in results if r.evidence)
        logger.info(
            "Analysis complete: %d verdict(s), %d with verified evidence",
            len(results),
            verified,
        )

        return AnalysisReport(
            results=results,
            document_hash=document_hash,
            page_count=index.page_count(),
            line_count=index.total_lines(),
            truncated=context.truncated,
            model=self.settings.model,
        )
