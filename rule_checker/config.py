"""
Startup configuration.

Read once from the environment (``.env`` is loaded by the entry points) and
passed explicitly into the pipeline, so the core never reads globals.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

from pydantic import AliasChoices, Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .context import HEAD_CHARS, MAX_CONTEXT_CHARS, TAIL_CHARS

_log = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.groq.com/openai/v1"
DEFAULT_MODEL = "llama-3.1-8b-instant"
MAX_UPLOAD_BYTES = 20 * 1024 * 1024


class Settings(BaseSettings):
    model_config = SettingsConfigDict(populate_by_name=True, extra="ignore")

    # LLM
    api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("LLM_API_KEY", "GROQ_API_KEY", "OPENAI_API_KEY"),
    )
    base_url: Optional[str] = Field(default=DEFAULT_BASE_URL, validation_alias="LLM_BASE_URL")
    model: str = Field(default=DEFAULT_MODEL, validation_alias="LLM_MODEL")
    temperature: float = Field(default=0.2, validation_alias="LLM_TEMPERATURE")
    max_tokens: int = Field(default=1500, gt=0, validation_alias="LLM_MAX_TOKENS")
    timeout_seconds: float = Field(default=60.0, gt=0, validation_alias="LLM_TIMEOUT_SECONDS")

    # Upload & context limits
    max_upload_bytes: int = Field(default=MAX_UPLOAD_BYTES, gt=0, validation_alias="MAX_UPLOAD_BYTES")
    context_max_chars: int = Field(default=MAX_CONTEXT_CHARS, gt=0, validation_alias="CONTEXT_MAX_CHARS")
    context_head_chars: int = Field(default=HEAD_CHARS, ge=0, validation_alias="CONTEXT_HEAD_CHARS")
    context_tail_chars: int = Field(default=TAIL_CHARS, ge=0, validation_alias="CONTEXT_TAIL_CHARS")

    # CORS, comma separated
    cors_origins: str = Field(default="http://localhost:3000", validation_alias="CORS_ORIGINS")

    @field_validator("base_url", mode="before")
    @classmethod
    def _blank_base_url_means_default_endpoint(cls, value: object) -> object:
        return value or None

    @model_validator(mode="after")
    def _head_and_tail_fit_in_cap(self) -> Settings:
        if self.context_head_chars + self.context_tail_chars > self.context_max_chars:
            raise ValueError(
                "CONTEXT_HEAD_CHARS + CONTEXT_TAIL_CHARS must not exceed CONTEXT_MAX_CHARS"
            )
        return self

    @property
    def allowed_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @classmethod
    def from_env(cls) -> Settings:
        """Build settings from the environment; exit on invalid values."""
        try:
            return cls()
        except ValidationError as e:
            print("❌ Missing/invalid environment variables:", file=sys.stderr)
            for err in e.errors():
                loc = ".".join(str(x) for x in err.get("loc", []))
                print(f" - {loc}: {err.get('msg', '')}", file=sys.stderr)
            _log.error("Settings initialization failed: %d error(s)", e.error_count())
            raise SystemExit(1) from e
