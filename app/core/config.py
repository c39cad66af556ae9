from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


def _get_env(name: str, default: str | None = None) -> str | None:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value


def _get_env_bool(name: str, default: bool) -> bool:
    raw = _get_env(name, None)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _get_env_int(name: str, default: int) -> int:
    raw = _get_env(name, None)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _get_env_float(name: str) -> float | None:
    raw = _get_env(name, None)
    if raw is None:
        return None
    try:
        return float(raw)
    except ValueError:
        return None


def _get_env_list(name: str, default: list[str]) -> tuple[str, ...]:
    raw = _get_env(name, None)
    if raw is None:
        return tuple(default)
    values = [item.strip() for item in raw.split(",")]
    clean = [item for item in values if item]
    return tuple(clean) if clean else tuple(default)


@dataclass(frozen=True)
class Settings:
    log_level: str
    sentry_dsn: str | None
    ai_provider: str
    ai_model: str | None
    anthropic_api_key: str | None
    anthropic_base_url: str | None
    openai_api_key: str | None
    openai_base_url: str | None
    inference_timeout_s: float | None
    max_upload_bytes: int
    extraction_cache_size: int
    rate_limit: str
    rate_limit_enabled: bool
    cors_allowed_origins: tuple[str, ...]


def load_settings() -> Settings:
    return Settings(
        log_level=_get_env("LOG_LEVEL", "INFO") or "INFO",
        sentry_dsn=_get_env("SENTRY_DSN"),
        ai_provider=(_get_env("AI_PROVIDER", "claude") or "claude").strip().lower(),
        ai_model=(_get_env("AI_MODEL") or "").strip() or None,
        anthropic_api_key=_get_env("ANTHROPIC_API_KEY"),
        anthropic_base_url=_get_env("ANTHROPIC_BASE_URL"),
        openai_api_key=_get_env("OPENAI_API_KEY"),
        openai_base_url=_get_env("OPENAI_BASE_URL"),
        inference_timeout_s=_get_env_float("INFERENCE_TIMEOUT_S"),
        max_upload_bytes=_get_env_int("MAX_UPLOAD_BYTES", 10 * 1024 * 1024),
        extraction_cache_size=_get_env_int("EXTRACTION_CACHE_SIZE", 32),
        rate_limit=_get_env("RATE_LIMIT", "30/minute") or "30/minute",
        rate_limit_enabled=_get_env_bool("RATE_LIMIT_ENABLED", True),
        cors_allowed_origins=_get_env_list(
            "CORS_ALLOWED_ORIGINS",
            [
                "http://localhost:5173",
                "http://127.0.0.1:5173",
                "http://localhost:3000",
            ],
        ),
    )


settings = load_settings()

if settings.ai_provider not in {"claude", "openai"}:
    raise RuntimeError("AI_PROVIDER must be either 'claude' or 'openai'.")
