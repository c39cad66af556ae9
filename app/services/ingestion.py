from __future__ import annotations

import asyncio
import base64
import hashlib
import logging
from collections import OrderedDict
from dataclasses import dataclass
from functools import cached_property
from typing import Any

from app.ai.types import PDF_MEDIA_TYPE, DocumentBlock, InferenceClient, TextBlock
from app.prompts.templates import DOCUMENT_TYPE_LABELS, EXTRACTION_INSTRUCTION
from app.services.errors import FileReadError, InputValidationError, SchemaError
from app.services.inference import complete

logger = logging.getLogger(__name__)

EXTRACTION_MAX_TOKENS = 2000
PDF_MAGIC = b"%PDF-"
READ_CHUNK_BYTES = 1024 * 64


@dataclass(frozen=True)
class UploadedDocument:
    filename: str
    media_type: str
    content: bytes

    @cached_property
    def digest(self) -> str:
        return hashlib.sha256(self.content).hexdigest()


@dataclass(frozen=True)
class EvaluationRequest:
    document_type: str
    raw_text: str | None = None
    document: UploadedDocument | None = None

    @property
    def is_document(self) -> bool:
        return self.document is not None

    @property
    def source(self) -> str:
        return "pdf" if self.document is not None else "text"

    def validate(self) -> None:
        if self.document_type not in DOCUMENT_TYPE_LABELS:
            raise InputValidationError(f"Unknown document type '{self.document_type}'.")
        has_text = bool(self.raw_text and self.raw_text.strip())
        has_document = self.document is not None
        if has_text and has_document:
            raise InputValidationError("Provide either text or a PDF file, not both.")
        if not has_text and not has_document:
            raise InputValidationError("Please enter text or upload a PDF file")
        if has_document:
            validate_pdf(self.document)


def validate_pdf(document: UploadedDocument) -> None:
    if (document.media_type or "").split(";")[0].strip().lower() != PDF_MEDIA_TYPE:
        raise InputValidationError("Please upload a PDF file")
    if not document.content:
        raise InputValidationError("The uploaded PDF file is empty.")
    if not document.content.startswith(PDF_MAGIC):
        raise InputValidationError("The uploaded file is not a valid PDF document.")


def prepare_text(raw_text: str) -> str:
    return raw_text


def prepare_document(document: UploadedDocument) -> DocumentBlock:
    validate_pdf(document)
    encoded = base64.b64encode(document.content).decode("utf-8")
    return DocumentBlock(data=encoded, media_type=PDF_MEDIA_TYPE)


async def read_upload(upload: Any, *, max_bytes: int) -> bytes:
    """Read an uploaded file in chunks, enforcing the size limit."""
    chunks: list[bytes] = []
    total = 0
    while True:
        try:
            chunk = await upload.read(READ_CHUNK_BYTES)
        except (OSError, ValueError) as exc:
            raise FileReadError("Failed to read file") from exc
        if not chunk:
            break
        total += len(chunk)
        if total > max_bytes:
            raise InputValidationError(
                f"File too large. Maximum allowed size is {max_bytes // (1024 * 1024)} MB.",
                status_code=413,
            )
        chunks.append(chunk)
    content = b"".join(chunks)
    if not content:
        raise InputValidationError("The uploaded file is empty.")
    return content


class DocumentIngestor:
    """Turns uploaded PDFs into plain text, at most one extraction call per document."""

    def __init__(self, client: InferenceClient, *, model_id: str, cache_size: int = 32):
        self._client = client
        self._model_id = model_id
        self._cache_size = max(1, cache_size)
        self._texts: OrderedDict[str, str] = OrderedDict()
        self._pending: dict[str, asyncio.Task[str]] = {}

    async def extract_text(self, document: UploadedDocument) -> str:
        block = prepare_document(document)
        key = document.digest
        cached = self._texts.get(key)
        if cached is not None:
            self._texts.move_to_end(key)
            logger.debug("extraction_cache_hit file=%s", document.filename)
            return cached

        task = self._pending.get(key)
        if task is None:
            task = asyncio.create_task(self._extract(block, document.filename))
            self._pending[key] = task
            task.add_done_callback(lambda done, key=key: self._settle(key, done))
        # Shielded so a cancelled caller does not abort a shared extraction.
        return await asyncio.shield(task)

    def _settle(self, key: str, task: asyncio.Task[str]) -> None:
        if self._pending.get(key) is task:
            del self._pending[key]
        if task.cancelled() or task.exception() is not None:
            return
        self._texts[key] = task.result()
        while len(self._texts) > self._cache_size:
            self._texts.popitem(last=False)

    async def _extract(self, block: DocumentBlock, filename: str) -> str:
        text = await complete(
            self._client,
            model_id=self._model_id,
            max_output_tokens=EXTRACTION_MAX_TOKENS,
            content=(block, TextBlock(text=EXTRACTION_INSTRUCTION)),
            purpose="extract_text",
        )
        if not text.strip():
            raise SchemaError("No text could be extracted from the uploaded document.")
        logger.info("extraction_completed file=%s chars=%s", filename, len(text))
        return text
