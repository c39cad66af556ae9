from __future__ import annotations

import json
import logging
import re
from typing import Any

from pydantic import ValidationError

from app.ai.types import InferenceClient
from app.prompts.templates import build_detection_prompt
from app.schemas.evaluation import DetectionReport
from app.services.errors import DETECTION_REMOTE_MESSAGE, DetectionParseError, SchemaError
from app.services.inference import complete
from app.services.ingestion import DocumentIngestor, EvaluationRequest

logger = logging.getLogger(__name__)

DETECTION_MAX_TOKENS = 2000

_JSON_FENCE_RE = re.compile(r"```json\n?")
_FENCE_RE = re.compile(r"```\n?")


def strip_code_fences(text: str) -> str:
    return _FENCE_RE.sub("", _JSON_FENCE_RE.sub("", text)).strip()


def parse_detection_payload(text: str) -> dict[str, Any]:
    cleaned = strip_code_fences(text)
    try:
        payload = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        logger.warning("detection_parse_failed chars=%s: %s", len(cleaned), exc)
        raise DetectionParseError("Failed to parse AI detection results. Please try again.") from exc
    if not isinstance(payload, dict):
        raise SchemaError("AI detection results must be a JSON object.")
    return payload


def validate_detection_payload(payload: dict[str, Any]) -> DetectionReport:
    try:
        return DetectionReport.model_validate(payload)
    except ValidationError as exc:
        fields = sorted({".".join(str(part) for part in err["loc"]) for err in exc.errors()})
        logger.warning("detection_schema_invalid fields=%s", fields)
        raise SchemaError(f"AI detection results did not match the expected format ({', '.join(fields)}).") from exc


async def detect(
    request: EvaluationRequest,
    *,
    client: InferenceClient,
    model_id: str,
    ingestor: DocumentIngestor | None = None,
) -> DetectionReport:
    request.validate()
    if request.document is not None:
        ingestor = ingestor or DocumentIngestor(client, model_id=model_id)
        content_to_check = await ingestor.extract_text(request.document)
    else:
        content_to_check = request.raw_text or ""

    text = await complete(
        client,
        model_id=model_id,
        max_output_tokens=DETECTION_MAX_TOKENS,
        content=build_detection_prompt(content_to_check),
        purpose="detection",
        remote_fallback=DETECTION_REMOTE_MESSAGE,
    )
    report = validate_detection_payload(parse_detection_payload(text))
    logger.info(
        "detection_completed doc_type=%s source=%s verdict=%s",
        request.document_type,
        request.source,
        report.verdict,
    )
    return report
