from contextlib import asynccontextmanager
import logging

from app.ai.config import load_ai_config
from app.ai.factory import get_inference_client
from app.api.v1.dependencies import clear_ingestors

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app):
    cfg = load_ai_config()
    logger.info("startup provider=%s model=%s", cfg.provider, cfg.model)
    yield
    clear_ingestors()
    if get_inference_client.cache_info().currsize:
        client = get_inference_client()
        close = getattr(client, "aclose", None)
        if close is not None:
            await close()
        get_inference_client.cache_clear()
