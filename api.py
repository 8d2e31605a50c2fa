"""
Rule Checker — FastAPI Server
=============================

Upload a document and a list of rules; get one verdict per rule, each with
a citation that has been checked against the document text.

Endpoints:
    POST /analyze           Multipart: file=<PDF>, rules=<JSON array of strings>
    GET  /health            Health check

Run:
    uvicorn api:app --reload              # Dev (http://localhost:8000)
    uvicorn api:app --host 0.0.0.0        # Production

Docs:
    http://localhost:8000/docs             # Swagger UI (auto-generated)
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI, File, Form, HTTPException, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from rule_checker import __version__
from rule_checker.config import Settings
from rule_checker.exceptions import InputError, RuleCheckError
from rule_checker.models import ValidatedVerdict
from rule_checker.pipeline import RuleCheckPipeline, parse_rules

load_dotenv()

logger = logging.getLogger(__name__)

_settings = Settings.from_env()


# ─── Application Lifespan ───────────────────────────────────────────

_pipeline: RuleCheckPipeline | None = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the pipeline from startup configuration."""
    global _pipeline  # noqa: PLW0603
    _pipeline = RuleCheckPipeline(_settings)
    yield
    _pipeline = None


# ─── FastAPI App ─────────────────────────────────────────────────────

app = FastAPI(
    title="Rule Checker API",
    description=(
        "Checks human-written rules against an uploaded document with a language "
        "model. Every citation returned has been verified against the document's "
        "own page/line text; unverifiable citations are dropped."
    ),
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.allowed_origins,
    allow_methods=["POST", "GET"],
    allow_headers=["*"],
)


# ─── Response Schemas ───────────────────────────────────────────────


class AnalyzeResponse(BaseModel):
    """One validated verdict per rule the model answered."""

    results: list[ValidatedVerdict]

    model_config = {"json_schema_extra": {"example": {
        "results": [
            {
                "rule": "document must contain a signature",
                "status": "pass",
                "evidence": "Page 1, Line 2: Signed: J. Doe",
                "reasoning": "A signature line is present.",
                "confidence": 90,
                "evidence_status": "verified",
            }
        ]
    }}}


class ErrorResponse(BaseModel):
    error: str


class HealthResponse(BaseModel):
    status: str
    version: str
    model: str


# ─── Error Handling ─────────────────────────────────────────────────


@app.exception_handler(RuleCheckError)
async def rule_check_error_handler(request: Request, exc: RuleCheckError) -> JSONResponse:
    if isinstance(exc, InputError):
        logger.warning("Rejected request: %s", exc.message)
        return JSONResponse(status_code=400, content={"error": exc.message})
    logger.error("ANALYZE ERROR [%s]: %s", exc.code, exc.message, exc_info=exc)
    return JSONResponse(status_code=500, content={"error": exc.message})


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("ANALYZE ERROR [UNEXPECTED]: %s", exc, exc_info=exc)
    return JSONResponse(status_code=500, content={"error": str(exc)})


# ─── Helpers ─────────────────────────────────────────────────────────


def _get_pipeline() -> RuleCheckPipeline:
    if _pipeline is None:
        raise HTTPException(status_code=503, detail="Pipeline not initialised")
    return _pipeline


# ─── Endpoints ───────────────────────────────────────────────────────


@app.post(
    "/analyze",
    summary="Check rules against an uploaded document",
    tags=["Analysis"],
    responses={
        400: {"model": ErrorResponse, "description": "File or rules missing or malformed"},
        413: {"model": ErrorResponse, "description": "File too large"},
        500: {"model": ErrorResponse, "description": "Extraction, model or parse failure"},
        503: {"description": "Pipeline not yet initialised"},
    },
)
async def analyze(
    file: Optional[UploadFile] = File(None),
    rules: Optional[str] = Form(None),
) -> AnalyzeResponse:
    """Run the full analysis pipeline on an uploaded PDF.

    - **file**: the document (PDF)
    - **rules**: JSON-encoded array of rule strings, e.g. `["must be signed"]`

    Evidence is either `""` or `"Page P, Line L: <exact line>"` copied from
    the document itself, never from the model.
    """
    logger.info("/analyze called")
    pipeline = _get_pipeline()

    if file is None:
        raise InputError("No file uploaded")
    rule_list = parse_rules(rules)

    limit = pipeline.settings.max_upload_bytes
    if file.size and file.size > limit:
        return JSONResponse(status_code=413, content={"error": "File too large"})
    content = await file.read()
    if len(content) > limit:
        return JSONResponse(status_code=413, content={"error": "File too large"})
    if not content:
        raise InputError("No file uploaded")

    report = await asyncio.to_thread(pipeline.run, content, rule_list)
    return AnalyzeResponse(results=report.results)


@app.get(
    "/health",
    summary="Health check",
    tags=["System"],
    responses={503: {"description": "Pipeline not yet initialised"}},
)
def health_check() -> HealthResponse:
    """Returns service status and configuration info."""
    pipeline = _get_pipeline()
    return HealthResponse(
        status="healthy",
        version=__version__,
        model=pipeline.settings.model,
    )
