"""
Language model calls through an OpenAI-compatible chat completions API.

The default endpoint is Groq's OpenAI-compatible API; any provider speaking
the same protocol works by changing ``LLM_BASE_URL``.

Design:
  - One call per analysis, no streaming
  - Bounded timeout, SDK retries disabled; a timeout is reported as retryable
  - A failed call is fatal to the request; there is no fallback model
"""

from __future__ import annotations

import logging
from typing import Protocol

import openai
from openai import OpenAI

from .config import Settings
from .exceptions import ModelCallError

logger = logging.getLogger(__name__)


class CompletionFn(Protocol):
    """``complete(system_prompt, user_prompt, model, temperature, max_tokens) -> reply text``"""

    def __call__(
        self,
        system_prompt: str,
        user_prompt: str,
        model: str,
        temperature: float,
        max_tokens: int,
    ) -> str: ...


class ChatCompletionClient:
    """Callable wrapper around ``OpenAI().chat.completions.create``."""

    def __init__(self, settings: Settings, client: OpenAI | None = None):
        if client is None and settings.api_key:
            client = OpenAI(
                api_key=settings.api_key,
                base_url=settings.base_url,
                timeout=settings.timeout_seconds,
                max_retries=0,
            )
        self._client: OpenAI | None = client

    def __call__(
        self,
        system_prompt: str,
        user_prompt: str,
        model: str,
        temperature: float,
        max_tokens: int,
    ) -> str:
        if self._client is None:
            raise ModelCallError(
                "No LLM API key configured (set LLM_API_KEY or GROQ_API_KEY)"
            )
        logger.info("Calling model %s (max_tokens=%d)", model, max_tokens)
        try:
            response = self._client.chat.completions.create(
                model=model,
                temperature=temperature,
                max_tokens=max_tokens,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
            )
        except openai.APITimeoutError as e:
            raise ModelCallError(
                f"LLM call timed out: {e}", details={"model": model}, retryable=True
            ) from e
        except openai.OpenAIError as e:
            raise ModelCallError(f"LLM call failed: {e}", details={"model": model}) from e

        if not response.choices:
            logger.error("LLM returned no choices")
            return ""
        content = response.choices[0].message.content
        if content is None:
            logger.error("LLM returned empty content")
            return ""
        return content
