"""Pytest configuration — ensures the project root is importable."""

import sys
from pathlib import Path
from unittest.mock import patch

import pytest

sys.path.insert(0, str(Path(__file__).parent))


class _NoRealLLM:
    def __init__(self, *args, **kwargs):
        pass

    def __call__(self, *args, **kwargs):
        raise AssertionError("Real LLM call attempted in tests; inject a fake completion")


@pytest.fixture(autouse=True)
def _no_llm_calls():
    """Fail loudly if anything builds a real model client instead of using a fake."""
    with patch("rule_checker.pipeline.ChatCompletionClient", _NoRealLLM):
        yield
