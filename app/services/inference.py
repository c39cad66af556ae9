from __future__ import annotations

import logging
import time

from app.ai.types import InferenceClient, InferenceRequest, InferenceResult, MessageContent
from app.services.errors import GENERIC_REMOTE_MESSAGE, RemoteError, SchemaError

logger = logging.getLogger(__name__)


def unwrap_result(result: InferenceResult, *, remote_fallback: str = GENERIC_REMOTE_MESSAGE) -> str:
    if result.ok and isinstance(result.text, str):
        return result.text
    if result.error_kind == "schema":
        raise SchemaError(result.message or "Failed to get a response. Please try again.")
    raise RemoteError(result.message, fallback=remote_fallback)


async def complete(
    client: InferenceClient,
    *,
    model_id: str,
    max_output_tokens: int,
    content: MessageContent,
    purpose: str,
    remote_fallback: str = GENERIC_REMOTE_MESSAGE,
) -> str:
    """Send one inference request and return its text or raise the matching error."""
    started = time.perf_counter()
    request = InferenceRequest(model_id=model_id, max_output_tokens=max_output_tokens, content=content)
    result = await client.send(request)
    latency_ms = int((time.perf_counter() - started) * 1000)
    if not result.ok:
        logger.warning(
            "inference_failed purpose=%s model=%s kind=%s latency_ms=%s",
            purpose,
            model_id,
            result.error_kind,
            latency_ms,
        )
    else:
        logger.info("inference_completed purpose=%s model=%s latency_ms=%s", purpose, model_id, latency_ms)
    return unwrap_result(result, remote_fallback=remote_fallback)
