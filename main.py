#!/usr/bin/env python3
"""
Rule Checker — Command Line Entry Point
=======================================

Checks rules against a local document and prints a colored report.

Usage:
    python main.py contract.pdf "document must contain a signature"
    python main.py notes.txt "must mention a total" "must be dated"
    python main.py contract.pdf --rules-file rules.json

Needs LLM_API_KEY (or GROQ_API_KEY) in the environment or a .env file.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from rule_checker.config import Settings
from rule_checker.exceptions import RuleCheckError
from rule_checker.models import AnalysisReport, EvidenceStatus, ValidatedVerdict, VerdictStatus
from rule_checker.pipeline import RuleCheckPipeline, check_rules, parse_rules

load_dotenv()


# ─── ANSI Color Constants ───────────────────────────────────────────

_RED = "\033[91m"
_YELLOW = "\033[93m"
_GREEN = "\033[92m"
_CYAN = "\033[96m"
_DIM = "\033[2m"
_BOLD = "\033[1m"
_RESET = "\033[0m"
_WIDTH = 72


# ─── Pretty Printer ─────────────────────────────────────────────────


def _print_verdict(number: int, verdict: ValidatedVerdict) -> None:
    color = _GREEN if verdict.status == VerdictStatus.PASS else _RED
    print(f"  {_BOLD}{number}. {verdict.rule}{_RESET}")
    print(f"     {color}{_BOLD}{verdict.status.value.upper()}{_RESET}  "
          f"{_DIM}confidence {verdict.confidence}%{_RESET}")
    if verdict.evidence:
        print(f"     {_CYAN}{verdict.evidence}{_RESET}")
    elif verdict.evidence_status == EvidenceStatus.OUTSIDE_WINDOW:
        print(f"     {_YELLOW}(cited line was outside the analyzed window){_RESET}")
    elif verdict.evidence_status == EvidenceStatus.REJECTED:
        print(f"     {_YELLOW}(model citation could not be verified){_RESET}")
    if verdict.reasoning:
        print(f"     {verdict.reasoning}")
    print()


def print_report(report: AnalysisReport, source: str) -> int:
    """Pretty-print the analysis report with ANSI color codes.

    Returns:
        0 if every rule passed, 1 otherwise.
    """
    print(f"\n{'=' * _WIDTH}")
    print(f"{_BOLD}{_CYAN}  RULE CHECK REPORT{_RESET}")
    print(f"{'=' * _WIDTH}")
    print(f"  Document:    {source}")
    if report.document_hash:
        print(f"  Audit Hash:  {_DIM}{report.document_hash[:16]}...{_RESET}")
    print(f"  Pages:       {report.page_count}  ({report.line_count} lines)")
    print(f"  Model:       {report.model}")
    if report.truncated:
        print(f"  {_YELLOW}Context truncated: middle of document not analyzed{_RESET}")
    print(f"{'─' * _WIDTH}\n")

    for i, verdict in enumerate(report.results, start=1):
        _print_verdict(i, verdict)

    failed = [v for v in report.results if v.status != VerdictStatus.PASS]
    print(f"{'=' * _WIDTH}")
    if report.results and not failed:
        print(f"  {_GREEN}{_BOLD}ALL {len(report.results)} RULE(S) PASSED{_RESET}")
    else:
        print(f"  {_RED}{_BOLD}{len(failed)} OF {len(report.results)} RULE(S) FAILED{_RESET}")
    print(f"{'=' * _WIDTH}\n")

    return 0 if report.results and not failed else 1


# ─── Main ────────────────────────────────────────────────────────────


def _load_rules(args: argparse.Namespace) -> list[str]:
    rules = list(args.rules)
    if args.rules_file:
        rules.extend(parse_rules(Path(args.rules_file).read_text(encoding="utf-8")))
    return check_rules(rules)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Check rules against a document.")
    parser.add_argument("document", help="PDF or UTF-8 text file")
    parser.add_argument("rules", nargs="*", help="Rules to check, in order")
    parser.add_argument("--rules-file", help="JSON file holding an array of rules")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log pipeline steps")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )

    path = Path(args.document)
    pipeline = RuleCheckPipeline(Settings.from_env())
    try:
        rules = _load_rules(args)
        if path.suffix.lower() == ".pdf":
            report = pipeline.run(path.read_bytes(), rules)
        else:
            report = pipeline.analyze_text(path.read_text(encoding="utf-8"), rules)
    except RuleCheckError as e:
        print(f"{_RED}{_BOLD}[{e.code}]{_RESET} {e.message}", file=sys.stderr)
        return 2

    return print_report(report, str(path))


if __name__ == "__main__":
    sys.exit(main())
