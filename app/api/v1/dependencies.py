import logging

from fastapi import Depends, HTTPException, status

from app.ai.factory import get_inference_client, get_model_id
from app.ai.types import InferenceClient
from app.core.config import settings
from app.services.ingestion import DocumentIngestor

logger = logging.getLogger(__name__)

_ingestors: dict[tuple[InferenceClient, str], DocumentIngestor] = {}


def inference_client() -> InferenceClient:
    try:
        return get_inference_client()
    except (RuntimeError, ValueError) as exc:
        logger.error("inference_client_unavailable: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="The AI provider is not configured.",
        ) from exc


def model_id() -> str:
    return get_model_id()


def document_ingestor(
    client: InferenceClient = Depends(inference_client),
    model: str = Depends(model_id),
) -> DocumentIngestor:
    # One ingestor per client keeps extractions shared across requests.
    key = (client, model)
    ingestor = _ingestors.get(key)
    if ingestor is None:
        ingestor = DocumentIngestor(client, model_id=model, cache_size=settings.extraction_cache_size)
        _ingestors[key] = ingestor
    return ingestor


def clear_ingestors() -> None:
    _ingestors.clear()
