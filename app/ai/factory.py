from functools import lru_cache

from app.ai.config import load_ai_config
from app.ai.types import InferenceClient
from app.core.config import settings

from app.ai.providers.claude_provider import ClaudeProvider
from app.ai.providers.openai_provider import OpenAIProvider


@lru_cache(maxsize=1)
def get_inference_client() -> InferenceClient:
    cfg = load_ai_config()

    if cfg.provider == "claude":
        return ClaudeProvider(
            model=cfg.model,
            api_key=settings.anthropic_api_key,
            base_url=settings.anthropic_base_url,
            timeout_s=settings.inference_timeout_s,
        )

    if cfg.provider == "openai":
        return OpenAIProvider(
            model=cfg.model,
            api_key=settings.openai_api_key,
            base_url=settings.openai_base_url,
            timeout_s=settings.inference_timeout_s,
        )

    raise ValueError(f"Unsupported AI_PROVIDER='{cfg.provider}'")


def get_model_id() -> str:
    return load_ai_config().model
