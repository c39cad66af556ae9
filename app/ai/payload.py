"""Wire shape shared by the inference providers.

Request body::

    {"model": ..., "max_tokens": ..., "messages": [{"role": "user", "content": ...}]}

Response body is ``{"content": [{"text": ...}]}`` on success or
``{"error": {"message": ...}}`` on failure.
"""

from __future__ import annotations

from typing import Any

from app.ai.types import DocumentBlock, InferenceRequest, InferenceResult, MessageContent, TextBlock


def block_to_dict(block: TextBlock | DocumentBlock) -> dict[str, Any]:
    if isinstance(block, TextBlock):
        return {"type": "text", "text": block.text}
    return {
        "type": "document",
        "source": {"type": "base64", "media_type": block.media_type, "data": block.data},
    }


def content_to_wire(content: MessageContent) -> str | list[dict[str, Any]]:
    if isinstance(content, str):
        return content
    return [block_to_dict(block) for block in content]


def build_payload(request: InferenceRequest) -> dict[str, Any]:
    return {
        "model": request.model_id,
        "max_tokens": request.max_output_tokens,
        "messages": [{"role": "user", "content": content_to_wire(request.content)}],
    }


def parse_completion_payload(data: Any) -> InferenceResult:
    if not isinstance(data, dict):
        return InferenceResult.failure("schema", "Failed to get a response. Please try again.")

    error = data.get("error")
    if error:
        message = error.get("message") if isinstance(error, dict) else None
        return InferenceResult.failure("remote", message if isinstance(message, str) else None)

    content = data.get("content")
    if isinstance(content, list) and content:
        first = content[0]
        text = first.get("text") if isinstance(first, dict) else None
        if isinstance(text, str):
            return InferenceResult.success(text)
    return InferenceResult.failure("schema", "Failed to get a response. Please try again.")
