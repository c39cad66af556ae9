import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from app.ai.types import DocumentBlock, InferenceResult, TextBlock  # noqa: E402
from app.prompts.templates import get_template  # noqa: E402
from app.services.critique_service import CRITIQUE_MAX_TOKENS, evaluate  # noqa: E402
from app.services.errors import InputValidationError, RemoteError, SchemaError  # noqa: E402
from app.services.ingestion import EvaluationRequest, UploadedDocument  # noqa: E402
from tests.fakes import CRITIQUE_TEXT, PDF_BYTES, FakeInferenceClient  # noqa: E402

MODEL = "claude-sonnet-4-20250514"


class CritiquePipelineTests(unittest.IsolatedAsyncioTestCase):
    async def test_plain_text_is_sent_as_single_string(self):
        client = FakeInferenceClient(CRITIQUE_TEXT)
        request = EvaluationRequest(document_type="academic-essay", raw_text="Climate change is a pressing issue.")

        report = await evaluate(request, client=client, model_id=MODEL)

        self.assertEqual(report.text, CRITIQUE_TEXT)
        self.assertEqual(report.source, "text")
        self.assertEqual(client.call_count, 1)
        sent = client.requests[0]
        self.assertEqual(sent.model_id, MODEL)
        self.assertEqual(sent.max_output_tokens, CRITIQUE_MAX_TOKENS)
        self.assertIsInstance(sent.content, str)
        self.assertTrue(sent.content.startswith(get_template("academic-essay")))
        self.assertTrue(sent.content.endswith("Climate change is a pressing issue."))

    async def test_pdf_is_sent_as_document_block_without_extraction(self):
        client = FakeInferenceClient(CRITIQUE_TEXT)
        document = UploadedDocument(filename="resume.pdf", media_type="application/pdf", content=PDF_BYTES)

        report = await evaluate(
            EvaluationRequest(document_type="resume", document=document),
            client=client,
            model_id=MODEL,
        )

        self.assertEqual(report.source, "pdf")
        self.assertEqual(client.call_count, 1)
        block, instructions = client.requests[0].content
        self.assertIsInstance(block, DocumentBlock)
        self.assertEqual(block.media_type, "application/pdf")
        self.assertIsInstance(instructions, TextBlock)
        self.assertIn("Pay special attention to design", instructions.text)

    async def test_report_sections_are_derived_from_text(self):
        client = FakeInferenceClient(CRITIQUE_TEXT)
        report = await evaluate(
            EvaluationRequest(document_type="cover", raw_text="Dear team,"),
            client=client,
            model_id=MODEL,
        )
        response = report.to_response()
        self.assertEqual([s.kind for s in response.sections], ["strengths", "issues", "risks", "fixes"])
        self.assertEqual(response.sections[0].title, "✅ Strengths")
        self.assertEqual(response.report, CRITIQUE_TEXT)

    async def test_arbitrary_prose_is_accepted(self):
        client = FakeInferenceClient("No headings at all, just prose.")
        report = await evaluate(
            EvaluationRequest(document_type="cv", raw_text="Publications: none"),
            client=client,
            model_id=MODEL,
        )
        self.assertEqual(report.text, "No headings at all, just prose.")
        self.assertEqual(report.sections, [])

    async def test_non_pdf_upload_is_rejected_before_any_call(self):
        client = FakeInferenceClient()
        document = UploadedDocument(filename="resume.docx", media_type="application/msword", content=b"PK\x03\x04")
        with self.assertRaises(InputValidationError):
            await evaluate(EvaluationRequest(document_type="resume", document=document), client=client, model_id=MODEL)
        self.assertEqual(client.call_count, 0)

    async def test_pdf_type_with_wrong_signature_is_rejected(self):
        client = FakeInferenceClient()
        document = UploadedDocument(filename="fake.pdf", media_type="application/pdf", content=b"hello")
        with self.assertRaises(InputValidationError):
            await evaluate(EvaluationRequest(document_type="resume", document=document), client=client, model_id=MODEL)
        self.assertEqual(client.call_count, 0)

    async def test_missing_input_and_unknown_type_are_rejected(self):
        client = FakeInferenceClient()
        with self.assertRaises(InputValidationError):
            await evaluate(EvaluationRequest(document_type="cover", raw_text="   "), client=client, model_id=MODEL)
        with self.assertRaises(InputValidationError):
            await evaluate(EvaluationRequest(document_type="poem", raw_text="Roses"), client=client, model_id=MODEL)
        document = UploadedDocument(filename="a.pdf", media_type="application/pdf", content=PDF_BYTES)
        with self.assertRaises(InputValidationError):
            await evaluate(
                EvaluationRequest(document_type="cv", raw_text="text", document=document),
                client=client,
                model_id=MODEL,
            )
        self.assertEqual(client.call_count, 0)

    async def test_remote_error_carries_remote_message(self):
        client = FakeInferenceClient(InferenceResult.failure("remote", "invalid x-api-key"))
        with self.assertRaises(RemoteError) as ctx:
            await evaluate(EvaluationRequest(document_type="cover", raw_text="Hi"), client=client, model_id=MODEL)
        self.assertEqual(str(ctx.exception), "API Error: invalid x-api-key")
        self.assertEqual(ctx.exception.remote_message, "invalid x-api-key")

    async def test_remote_error_without_message_uses_generic_fallback(self):
        client = FakeInferenceClient(InferenceResult.failure("remote"))
        with self.assertRaises(RemoteError) as ctx:
            await evaluate(EvaluationRequest(document_type="cover", raw_text="Hi"), client=client, model_id=MODEL)
        self.assertEqual(str(ctx.exception), "API Error: Invalid API key or request failed")

    async def test_missing_content_is_schema_error(self):
        client = FakeInferenceClient(InferenceResult.failure("schema", "Failed to get a response. Please try again."))
        with self.assertRaises(SchemaError):
            await evaluate(EvaluationRequest(document_type="cover", raw_text="Hi"), client=client, model_id=MODEL)


if __name__ == "__main__":
    unittest.main()
