"""
Rule Checker — verifiable rule verdicts over uploaded documents.

Architecture: Extract → Segment → Address → Prompt → LLM → Recover → Verify evidence
Philosophy:  Let the model judge. Let only code decide what counts as evidence.
"""

__version__ = "1.0.0"
