from __future__ import annotations

import re

from app.schemas.evaluation import DetectionPresentation, DetectionReport, ScoreBand, SectionKind, VerdictTone

SECTION_TITLES: dict[str, str] = {
    "strengths": "✅ Strengths",
    "issues": "⚠️ Detected Issues",
    "risks": "🚫 AI/Flag Risk & Auto-Rejection Triggers",
    "fixes": "💡 Fix Suggestions",
}

_EMPHASIS_RE = re.compile(r"(\*\*.*?\*\*)")


def section_title(kind: SectionKind) -> str:
    return SECTION_TITLES.get(kind, "Analysis")


def score_band(score: float) -> ScoreBand:
    if score >= 70:
        return "high"
    if score >= 40:
        return "medium"
    return "low"


def verdict_tone(verdict: str) -> VerdictTone:
    if "Human" in verdict:
        return "positive"
    if "Possibly" in verdict:
        return "caution"
    return "negative"


def split_emphasis(text: str) -> list[tuple[str, bool]]:
    """Split ``**bold**`` markup into ``(text, is_bold)`` spans, dropping empty spans."""
    spans: list[tuple[str, bool]] = []
    for part in _EMPHASIS_RE.split(text or ""):
        if not part:
            continue
        if len(part) >= 4 and part.startswith("**") and part.endswith("**"):
            spans.append((part[2:-2], True))
        else:
            spans.append((part, False))
    return spans


def detection_presentation(report: DetectionReport) -> DetectionPresentation:
    # AI probability is banded inverted so a likely-AI text lands with the weak scores.
    return DetectionPresentation(
        verdict_tone=verdict_tone(report.verdict),
        perplexity_band=score_band(report.perplexity_score),
        burstiness_band=score_band(report.burstiness_score),
        ai_probability_band=score_band(100 - report.ai_probability),
    )
