"""
FastAPI endpoint tests for the Rule Checker API.

Uses httpx + FastAPI TestClient — no real server needed, no LLM calls,
no PDF parsing (extractor and model are both fakes).
"""

from __future__ import annotations

import json
import logging

import api
import pytest
from api import app
from fastapi.testclient import TestClient

from rule_checker.config import Settings
from rule_checker.exceptions import ExtractionError, ModelCallError
from rule_checker.pipeline import RuleCheckPipeline

client = TestClient(app)

DOCUMENT_PAGES = ["Total: $500\nSigned: J. Doe"]
SIGNATURE_RULE = "document must contain a signature"


class FakeModel:
    def __init__(self):
        self.reply = "[]"
        self.error: Exception | None = None

    def __call__(self, system_prompt, user_prompt, model, temperature, max_tokens):
        if self.error is not None:
            raise self.error
        return self.reply


class FakeExtractor:
    def __init__(self):
        self.error: Exception | None = None

    def __call__(self, data: bytes):
        if self.error is not None:
            raise self.error
        return DOCUMENT_PAGES


@pytest.fixture()
def model() -> FakeModel:
    return FakeModel()


@pytest.fixture()
def extractor() -> FakeExtractor:
    return FakeExtractor()


@pytest.fixture(autouse=True)
def _warm_pipeline(model: FakeModel, extractor: FakeExtractor):
    """Install a pipeline with fake collaborators (bypasses lifespan)."""
    api._pipeline = RuleCheckPipeline(
        Settings(max_upload_bytes=1024), complete=model, extract=extractor
    )
    yield
    api._pipeline = None


def _post(rules=(SIGNATURE_RULE,), content: bytes = b"%PDF-1.7 fake"):
    return client.post(
        "/analyze",
        files={"file": ("contract.pdf", content, "application/pdf")},
        data={"rules": json.dumps(list(rules))},
    )


def _verdict(evidence: str, status: str = "pass") -> str:
    return json.dumps([{
        "rule": SIGNATURE_RULE,
        "status": status,
        "evidence": evidence,
        "reasoning": "Signature line present",
        "confidence": 90,
    }])


class TestHealthEndpoint:
    def test_health_returns_200(self) -> None:
        resp = client.get("/health")
        assert resp.status_code == 200

    def test_health_response_shape(self) -> None:
        data = client.get("/health").json()
        assert data["status"] == "healthy"
        assert data["version"] == "1.0.0"
        assert data["model"] == "llama-3.1-8b-instant"

    def test_health_before_startup_returns_503(self) -> None:
        api._pipeline = None
        assert client.get("/health").status_code == 503


class TestAnalyzeEndpoint:
    def test_verified_citation_returned(self, model: FakeModel) -> None:
        model.reply = _verdict("Page 1, Line 2: Signed: J. Doe")
        resp = _post()
        assert resp.status_code == 200
        (result,) = resp.json()["results"]
        assert result["rule"] == SIGNATURE_RULE
        assert result["status"] == "pass"
        assert result["evidence"] == "Page 1, Line 2: Signed: J. Doe"
        assert result["confidence"] == 90
        assert result["evidence_status"] == "verified"

    def test_fabricated_citation_blanked(self, model: FakeModel) -> None:
        model.reply = _verdict("Page 1, Line 2: Signed: John Doe")
        (result,) = _post().json()["results"]
        assert result["evidence"] == ""
        assert result["evidence_status"] == "rejected"

    def test_response_only_has_results(self, model: FakeModel) -> None:
        model.reply = _verdict("")
        assert set(_post().json()) == {"results"}

    def test_noisy_reply_recovered(self, model: FakeModel) -> None:
        model.reply = "Here you go:\n" + _verdict("") + "\nLet me know!"
        assert _post().status_code == 200


class TestClientErrors:
    def test_missing_file_returns_400(self) -> None:
        resp = client.post("/analyze", data={"rules": json.dumps([SIGNATURE_RULE])})
        assert resp.status_code == 400
        assert resp.json() == {"error": "No file uploaded"}

    def test_missing_rules_returns_400(self) -> None:
        resp = client.post(
            "/analyze",
            files={"file": ("contract.pdf", b"%PDF fake", "application/pdf")},
        )
        assert resp.status_code == 400
        assert resp.json() == {"error": "Rules missing"}

    def test_malformed_rules_returns_400(self) -> None:
        resp = client.post(
            "/analyze",
            files={"file": ("contract.pdf", b"%PDF fake", "application/pdf")},
            data={"rules": "not json"},
        )
        assert resp.status_code == 400
        assert "error" in resp.json()

    def test_empty_rules_returns_400(self) -> None:
        assert _post(rules=()).status_code == 400

    def test_oversized_file_returns_413(self) -> None:
        resp = _post(content=b"x" * 2048)
        assert resp.status_code == 413


class TestServerErrors:
    def test_extraction_failure_returns_500(self, extractor: FakeExtractor) -> None:
        extractor.error = ExtractionError("Could not extract text from PDF: broken")
        resp = _post()
        assert resp.status_code == 500
        assert resp.json() == {"error": "Could not extract text from PDF: broken"}

    def test_model_failure_returns_500(self, model: FakeModel) -> None:
        model.error = ModelCallError("LLM call timed out", retryable=True)
        resp = _post()
        assert resp.status_code == 500
        assert resp.json() == {"error": "LLM call timed out"}

    def test_unparseable_reply_returns_500(self, model: FakeModel) -> None:
        model.reply = "I cannot help with that."
        resp = _post()
        assert resp.status_code == 500
        assert "Invalid JSON from LLM" in resp.json()["error"]

    def test_model_failure_is_logged(self, model: FakeModel, caplog) -> None:
        model.error = ModelCallError("LLM call failed: connection reset")
        with caplog.at_level(logging.ERROR, logger="api"):
            _post()
        (record,) = [r for r in caplog.records if r.name == "api"]
        assert record.levelno == logging.ERROR
        assert "MODEL_CALL_FAILED" in record.getMessage()

    def test_unexpected_error_returns_json_500(self, monkeypatch, caplog) -> None:
        def explode(data, rules):
            raise RuntimeError("boom")

        monkeypatch.setattr(api._pipeline, "run", explode)
        lenient = TestClient(app, raise_server_exceptions=False)
        with caplog.at_level(logging.ERROR, logger="api"):
            resp = lenient.post(
                "/analyze",
                files={"file": ("contract.pdf", b"%PDF fake", "application/pdf")},
                data={"rules": json.dumps([SIGNATURE_RULE])},
            )
        assert resp.status_code == 500
        assert resp.json() == {"error": "boom"}
        assert any(
            r.name == "api" and r.levelno == logging.ERROR and "UNEXPECTED" in r.getMessage()
            for r in caplog.records
        )


class TestHostileReplies:
    def test_oversized_page_number_rejected(self, model: FakeModel) -> None:
        model.reply = _verdict("Page " + "9" * 5000 + ", Line 2: Signed: J. Doe")
        resp = _post()
        assert resp.status_code == 200
        (result,) = resp.json()["results"]
        assert result["evidence"] == ""
        assert result["evidence_status"] == "rejected"

    def test_oversized_confidence_defaults(self, model: FakeModel) -> None:
        model.reply = json.dumps([{
            "rule": SIGNATURE_RULE,
            "status": "pass",
            "evidence": "",
            "reasoning": "",
            "confidence": "9" * 5000,
        }])
        (result,) = _post().json()["results"]
        assert result["confidence"] == 50

    def test_oversized_integer_literal_returns_500(self, model: FakeModel) -> None:
        model.reply = '[{"rule": "a", "confidence": ' + "9" * 5000 + "}]"
        resp = _post()
        assert resp.status_code == 500
        assert "Invalid JSON from LLM" in resp.json()["error"]
