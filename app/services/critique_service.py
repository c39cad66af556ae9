from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone

from app.ai.types import InferenceClient, MessageContent, TextBlock
from app.prompts.templates import build_document_instructions, build_text_instructions
from app.schemas.evaluation import CritiqueResponse, SectionOut
from app.services.inference import complete
from app.services.ingestion import EvaluationRequest, prepare_document, prepare_text
from app.services.presentation import section_title
from app.services.segmenter import Section, segment

logger = logging.getLogger(__name__)

CRITIQUE_MAX_TOKENS = 4000


@dataclass(frozen=True)
class CritiqueReport:
    document_type: str
    source: str
    text: str
    generated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def sections(self) -> list[Section]:
        return segment(self.text)

    def to_response(self) -> CritiqueResponse:
        return CritiqueResponse(
            document_type=self.document_type,
            source=self.source,
            report=self.text,
            sections=[
                SectionOut(kind=section.kind, title=section_title(section.kind), body=section.body)
                for section in self.sections
            ],
            generated_at=self.generated_at,
        )


def build_critique_content(request: EvaluationRequest) -> MessageContent:
    if request.document is not None:
        block = prepare_document(request.document)
        return (block, TextBlock(text=build_document_instructions(request.document_type)))
    return build_text_instructions(request.document_type, prepare_text(request.raw_text or ""))


async def evaluate(request: EvaluationRequest, *, client: InferenceClient, model_id: str) -> CritiqueReport:
    request.validate()
    content = build_critique_content(request)
    text = await complete(
        client,
        model_id=model_id,
        max_output_tokens=CRITIQUE_MAX_TOKENS,
        content=content,
        purpose="critique",
    )
    logger.info(
        "critique_completed doc_type=%s source=%s chars=%s",
        request.document_type,
        request.source,
        len(text),
    )
    return CritiqueReport(document_type=request.document_type, source=request.source, text=text)
