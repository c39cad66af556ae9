from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Protocol, Union

PDF_MEDIA_TYPE = "application/pdf"

ErrorKind = Literal["remote", "schema"]


@dataclass(frozen=True)
class TextBlock:
    text: str


@dataclass(frozen=True)
class DocumentBlock:
    data: str
    media_type: str = PDF_MEDIA_TYPE


ContentBlock = Union[TextBlock, DocumentBlock]
MessageContent = Union[str, tuple[ContentBlock, ...]]


@dataclass(frozen=True)
class InferenceRequest:
    model_id: str
    max_output_tokens: int
    content: MessageContent


@dataclass(frozen=True)
class InferenceResult:
    text: str | None = None
    error_kind: ErrorKind | None = None
    message: str | None = None

    @property
    def ok(self) -> bool:
        return self.error_kind is None

    @classmethod
    def success(cls, text: str) -> "InferenceResult":
        return cls(text=text)

    @classmethod
    def failure(cls, error_kind: ErrorKind, message: str | None = None) -> "InferenceResult":
        return cls(error_kind=error_kind, message=message)


class InferenceClient(Protocol):
    async def send(self, request: InferenceRequest) -> InferenceResult: ...
