from __future__ import annotations

import re
from dataclasses import dataclass

from app.schemas.evaluation import SectionKind

# Closed set of section markers. A marker must open the (trimmed) line, after
# optional markdown decoration such as "## ", "3. " or "**".
_MARKER_PATTERNS: tuple[tuple[SectionKind, tuple[str, ...]], ...] = (
    ("strengths", ("✅", "STRENGTHS")),
    ("issues", ("⚠️", "⚠", "DETECTED ISSUES")),
    ("risks", ("🚫", "AI/FLAG RISK", "AUTO-REJECTION")),
    ("fixes", ("💡", "FIX SUGGESTIONS")),
)

_DECORATION_RE = re.compile(r"^(?:#{1,6}\s*)?(?:\d{1,2}[.)]\s*)?(?:[*_]{1,2}\s*)?")


@dataclass(frozen=True)
class Section:
    kind: SectionKind
    body: str


def marker_kind(line: str) -> SectionKind | None:
    stripped = line.strip()
    if not stripped:
        return None
    candidate = stripped[_DECORATION_RE.match(stripped).end():].upper()
    for kind, markers in _MARKER_PATTERNS:
        for marker in markers:
            if candidate.startswith(marker):
                return kind
    return None


def segment(report: str, *, keep_preamble: bool = False) -> list[Section]:
    """Split a critique into labelled sections.

    Lines before the first marker are dropped unless ``keep_preamble`` is set,
    in which case they form a leading ``unclassified`` section.
    """
    sections: list[Section] = []
    current: SectionKind | None = None
    lines: list[str] = []

    for line in (report or "").split("\n"):
        kind = marker_kind(line)
        if kind is None:
            if current is not None or keep_preamble:
                lines.append(line)
            continue
        if current is not None:
            sections.append(Section(kind=current, body="\n".join(lines)))
        elif keep_preamble and any(item.strip() for item in lines):
            sections.append(Section(kind="unclassified", body="\n".join(lines)))
        current = kind
        lines = []

    if current is not None:
        sections.append(Section(kind=current, body="\n".join(lines)))
    elif keep_preamble and any(item.strip() for item in lines):
        sections.append(Section(kind="unclassified", body="\n".join(lines)))
    return sections
