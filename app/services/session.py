"""Stateful entry point for interactive callers such as a UI worker or a notebook.

The HTTP routes are stateless per request and call the pipelines directly.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, TypeVar

from app.ai.types import InferenceClient
from app.schemas.evaluation import DetectionReport
from app.services.critique_service import CritiqueReport, evaluate
from app.services.detection_service import detect
from app.services.ingestion import DocumentIngestor, EvaluationRequest

logger = logging.getLogger(__name__)

T = TypeVar("T")


class EvaluationSession:
    """Runs both pipelines for one user and holds their latest results.

    Starting a pipeline cancels that pipeline's previous in-flight run, so the
    most recent request always wins. A failed run keeps the previous report.
    Both pipelines share one extraction cache.
    """

    def __init__(self, client: InferenceClient, *, model_id: str, cache_size: int = 32):
        self._client = client
        self._model_id = model_id
        self._ingestor = DocumentIngestor(client, model_id=model_id, cache_size=cache_size)
        self._inflight: dict[str, asyncio.Task[Any]] = {}
        self.last_critique: CritiqueReport | None = None
        self.last_detection: DetectionReport | None = None

    @property
    def ingestor(self) -> DocumentIngestor:
        return self._ingestor

    def is_running(self, pipeline: str) -> bool:
        task = self._inflight.get(pipeline)
        return task is not None and not task.done()

    async def critique(self, request: EvaluationRequest) -> CritiqueReport:
        report = await self._run("critique", evaluate(request, client=self._client, model_id=self._model_id))
        self.last_critique = report
        return report

    async def detect(self, request: EvaluationRequest) -> DetectionReport:
        report = await self._run(
            "detection",
            detect(request, client=self._client, model_id=self._model_id, ingestor=self._ingestor),
        )
        self.last_detection = report
        return report

    async def _run(self, pipeline: str, work: Awaitable[T]) -> T:
        previous = self._inflight.get(pipeline)
        if previous is not None and not previous.done():
            logger.info("pipeline_superseded pipeline=%s", pipeline)
            previous.cancel()

        task = asyncio.ensure_future(work)
        self._inflight[pipeline] = task
        try:
            return await task
        finally:
            if self._inflight.get(pipeline) is task:
                del self._inflight[pipeline]
