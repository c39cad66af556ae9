from __future__ import annotations

import logging
from typing import Any, Optional

import anthropic

from app.ai.payload import build_payload, parse_completion_payload
from app.ai.types import InferenceRequest, InferenceResult

logger = logging.getLogger(__name__)


def _remote_message(exc: anthropic.APIError) -> str | None:
    body = getattr(exc, "body", None)
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and isinstance(error.get("message"), str):
            return error["message"]
    return getattr(exc, "message", None) or str(exc) or None


class ClaudeProvider:
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
            raise RuntimeError("ANTHROPIC_API_KEY is missing")

        client_kwargs: dict[str, Any] = {"api_key": key, "max_retries": 0}
        if base_url:
            client_kwargs["base_url"] = base_url
        if timeout_s is not None:
            client_kwargs["timeout"] = timeout_s
        self._client = anthropic.AsyncAnthropic(**client_kwargs)

    @property
    def model(self) -> str:
        return self._model

    async def aclose(self) -> None:
        await self._client.close()

    async def send(self, request: InferenceRequest) -> InferenceResult:
        payload = build_payload(request)
        try:
            response = await self._client.messages.create(**payload)
        except anthropic.APIError as exc:
            logger.warning("claude_request_failed model=%s: %s", request.model_id, exc)
            return InferenceResult.failure("remote", _remote_message(exc))

        data = response.model_dump() if hasattr(response, "model_dump") else response
        return parse_completion_payload(data)
