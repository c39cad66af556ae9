from __future__ import annotations

import logging
from typing import Any, Optional

import openai
from openai import AsyncOpenAI

from app.ai.types import DocumentBlock, InferenceRequest, InferenceResult, MessageContent, TextBlock

logger = logging.getLogger(__name__)


def _to_openai_content(content: MessageContent) -> str | list[dict[str, Any]]:
    if isinstance(content, str):
        return content
    parts: list[dict[str, Any]] = []
    for block in content:
        if isinstance(block, TextBlock):
            parts.append({"type": "text", "text": block.text})
        elif isinstance(block, DocumentBlock):
            parts.append(
                {
                    "type": "file",
                    "file": {
                        "filename": "document.pdf",
                        "file_data": f"data:{block.media_type};base64,{block.data}",
                    },
                }
            )
    return parts


def _remote_message(exc: openai.APIError) -> str | None:
    body = getattr(exc, "body", None)
    if isinstance(body, dict) and isinstance(body.get("message"), str):
        return body["message"]
    return getattr(exc, "message", None) or str(exc) or None


class OpenAIProvider:
    def __init__(
        self,
        model: str,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout_s: Optional[float] = None,
    ):
        self._model = model
        key = (api_key or "").strip()
        if not key:
            raise RuntimeError("OPENAI_API_KEY is missing")

        client_kwargs: dict[str, Any] = {"api_key": key, "base_url": base_url or None, "max_retries": 0}
        if timeout_s is not None:
            client_kwargs["timeout"] = timeout_s
        self._client = AsyncOpenAI(**client_kwargs)

    @property
    def model(self) -> str:
        return self._model

    async def aclose(self) -> None:
        await self._client.close()

    async def send(self, request: InferenceRequest) -> InferenceResult:
        try:
            response = await self._client.chat.completions.create(
                model=request.model_id,
                messages=[{"role": "user", "content": _to_openai_content(request.content)}],
                max_tokens=request.max_output_tokens,
            )
        except openai.APIError as exc:
            logger.warning("openai_request_failed model=%s: %s", request.model_id, exc)
            return InferenceResult.failure("remote", _remote_message(exc))

        text = response.choices[0].message.content if response.choices else None
        if not isinstance(text, str):
            return InferenceResult.failure("schema", "Failed to get a response. Please try again.")
        return InferenceResult.success(text)
