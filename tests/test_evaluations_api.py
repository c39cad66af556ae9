import os
import unittest
from unittest.mock import patch

os.environ.setdefault("AI_PROVIDER", "claude")

from fastapi.testclient import TestClient

from app.ai.types import InferenceResult
from app.api.v1.dependencies import document_ingestor, inference_client, model_id
from app.core.rate_limit import limiter
from app.main import app
from tests.fakes import CRITIQUE_TEXT, DETECTION_JSON, PDF_BYTES, FakeInferenceClient

MODEL = "claude-sonnet-4-20250514"


class EvaluationsApiTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.client = TestClient(app)

    def setUp(self):
        limiter.reset()
        limiter.enabled = False
        self.fake = FakeInferenceClient()
        app.dependency_overrides[inference_client] = lambda: self.fake
        app.dependency_overrides[model_id] = lambda: MODEL

    def tearDown(self):
        app.dependency_overrides.clear()
        limiter.enabled = True

    def _use(self, *results, default=None) -> FakeInferenceClient:
        self.fake = FakeInferenceClient(*results, default=default)
        return self.fake

    def test_health(self):
        response = self.client.get("/v1/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "healthy")

    def test_document_types(self):
        response = self.client.get("/v1/document-types")
        self.assertEqual(response.status_code, 200)
        ids = [item["id"] for item in response.json()]
        self.assertEqual(ids, ["academic-essay", "university-essay", "university-resume", "cover", "cv", "resume"])

    def test_critique_text_contract_shape(self):
        self._use(CRITIQUE_TEXT)
        response = self.client.post("/v1/critique", json={"document_type": "cover", "text": "Dear hiring team,"})
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["report"], CRITIQUE_TEXT)
        self.assertEqual(body["source"], "text")
        self.assertEqual([s["kind"] for s in body["sections"]], ["strengths", "issues", "risks", "fixes"])
        self.assertEqual(body["sections"][1]["title"], "⚠️ Detected Issues")
        self.assertIn("generated_at", body)

    def test_unknown_document_type_is_400(self):
        response = self.client.post("/v1/critique", json={"document_type": "limerick", "text": "There once was"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(self.fake.call_count, 0)

    def test_empty_text_is_400(self):
        response = self.client.post("/v1/critique", json={"document_type": "cover", "text": "  "})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["detail"], "Please enter text or upload a PDF file")

    def test_critique_upload_sends_document(self):
        self._use(CRITIQUE_TEXT)
        response = self.client.post(
            "/v1/critique/upload",
            data={"document_type": "resume"},
            files={"file": ("resume.pdf", PDF_BYTES, "application/pdf")},
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["source"], "pdf")
        self.assertEqual(self.fake.call_count, 1)
        self.assertIsInstance(self.fake.requests[0].content, tuple)

    def test_non_pdf_upload_is_rejected_without_network_call(self):
        response = self.client.post(
            "/v1/critique/upload",
            data={"document_type": "resume"},
            files={"file": ("resume.docx", b"PK\x03\x04", "application/vnd.openxmlformats-officedocument.wordprocessingml.document")},
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["detail"], "Please upload a PDF file")
        self.assertEqual(self.fake.call_count, 0)

    def test_remote_error_is_502_with_remote_message(self):
        self._use(InferenceResult.failure("remote", "invalid x-api-key"))
        response = self.client.post("/v1/critique", json={"document_type": "cv", "text": "Publications"})
        self.assertEqual(response.status_code, 502)
        self.assertEqual(response.json()["detail"], "API Error: invalid x-api-key")

    def test_detect_text_contract_shape(self):
        self._use(f"```json\n{DETECTION_JSON}\n```")
        response = self.client.post("/v1/detect", json={"document_type": "university-essay", "text": "My story"})
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["report"]["verdict"], "Likely Human")
        self.assertEqual(body["report"]["ai_patterns"], ["Uniform sentence length"])
        self.assertEqual(body["presentation"]["verdict_tone"], "positive")
        self.assertEqual(body["presentation"]["ai_probability_band"], "medium")

    def test_detect_upload_extracts_then_detects(self):
        self._use("Extracted text", DETECTION_JSON)
        response = self.client.post(
            "/v1/detect/upload",
            data={"document_type": "cv"},
            files={"file": ("cv.pdf", PDF_BYTES + b"detect-upload", "application/pdf")},
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["source"], "pdf")
        self.assertEqual(self.fake.call_count, 2)

    def test_detection_parse_failure_is_502(self):
        self._use("This text looks human to me.")
        response = self.client.post("/v1/detect", json={"document_type": "cover", "text": "Hello"})
        self.assertEqual(response.status_code, 502)
        self.assertEqual(response.json()["detail"], "Failed to parse AI detection results. Please try again.")

    def test_unconfigured_provider_is_503(self):
        app.dependency_overrides.pop(inference_client)
        with patch(
            "app.api.v1.dependencies.get_inference_client",
            side_effect=RuntimeError("ANTHROPIC_API_KEY is missing"),
        ):
            response = self.client.post("/v1/critique", json={"document_type": "cover", "text": "Hi"})
        self.assertEqual(response.status_code, 503)
        self.assertEqual(response.json()["detail"], "The AI provider is not configured.")

    def test_ingestors_are_per_client_and_cleared_at_shutdown(self):
        first = document_ingestor(client=self.fake, model=MODEL)
        self.assertIs(document_ingestor(client=self.fake, model=MODEL), first)
        self.assertIsNot(document_ingestor(client=FakeInferenceClient(), model=MODEL), first)
        with TestClient(app):
            pass
        self.assertIsNot(document_ingestor(client=self.fake, model=MODEL), first)

    def test_rate_limit_returns_429(self):
        limiter.enabled = True
        self._use(default=CRITIQUE_TEXT)
        status_codes = []
        for _ in range(32):
            response = self.client.post("/v1/critique", json={"document_type": "cover", "text": "Hi"})
            status_codes.append(response.status_code)
        self.assertIn(429, status_codes)


if __name__ == "__main__":
    unittest.main()
