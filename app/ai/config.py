from dataclasses import dataclass

from app.core.config import settings

DEFAULT_MODELS = {
    "claude": "claude-sonnet-4-20250514",
    "openai": "gpt-4o-mini",
}


@dataclass(frozen=True)
class AIConfig:
    provider: str
    model: str


def load_ai_config() -> AIConfig:
    provider = settings.ai_provider
    model = settings.ai_model or DEFAULT_MODELS.get(provider, DEFAULT_MODELS["claude"])
    return AIConfig(provider=provider, model=model)
