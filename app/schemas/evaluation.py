from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, StrictStr

DocumentType = Literal["academic-essay", "university-essay", "university-resume", "cover", "cv", "resume"]
Verdict = Literal["Likely AI", "Possibly AI", "Likely Human", "Definitely Human"]
SectionKind = Literal["strengths", "issues", "risks", "fixes", "unclassified"]
InputSource = Literal["text", "pdf"]
ScoreBand = Literal["high", "medium", "low"]
VerdictTone = Literal["positive", "caution", "negative"]


class DocumentTypeInfo(BaseModel):
    id: DocumentType
    label: str
    resume_type: bool


class EvaluateTextRequest(BaseModel):
    # Validated against the template registry so unknown types surface as input errors.
    document_type: str = Field(min_length=1, max_length=50)
    text: str = Field(default="", max_length=100000)


class SectionOut(BaseModel):
    kind: SectionKind
    title: str
    body: str


class CritiqueResponse(BaseModel):
    document_type: DocumentType
    source: InputSource
    report: str
    sections: list[SectionOut]
    generated_at: datetime


class DetectionReport(BaseModel):
    """Detection verdict as returned by the model, validated field by field."""

    model_config = ConfigDict(extra="ignore")

    perplexity_score: float = Field(ge=0, le=100, strict=True)
    burstiness_score: float = Field(ge=0, le=100, strict=True)
    ai_probability: float = Field(ge=0, le=100, strict=True)
    ai_patterns: list[StrictStr]
    human_indicators: list[StrictStr]
    verdict: Verdict
    explanation: StrictStr
    detector_name: StrictStr


class DetectionPresentation(BaseModel):
    verdict_tone: VerdictTone
    perplexity_band: ScoreBand
    burstiness_band: ScoreBand
    ai_probability_band: ScoreBand


class DetectionResponse(BaseModel):
    document_type: DocumentType
    source: InputSource
    report: DetectionReport
    presentation: DetectionPresentation
    generated_at: datetime
