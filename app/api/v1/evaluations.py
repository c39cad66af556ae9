from datetime import datetime, timezone

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile

from app.ai.types import PDF_MEDIA_TYPE, InferenceClient
from app.api.v1.dependencies import document_ingestor, inference_client, model_id
from app.core.config import settings
from app.core.rate_limit import rate_limit
from app.prompts.templates import list_document_types
from app.schemas.evaluation import (
    CritiqueResponse,
    DetectionResponse,
    DocumentTypeInfo,
    EvaluateTextRequest,
)
from app.services.critique_service import evaluate
from app.services.detection_service import detect
from app.services.errors import EvaluationError, InputValidationError
from app.services.ingestion import DocumentIngestor, EvaluationRequest, UploadedDocument, read_upload
from app.services.presentation import detection_presentation

router = APIRouter()


def _raise_http_error(exc: EvaluationError) -> None:
    raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc


async def _uploaded_request(document_type: str, file: UploadFile) -> EvaluationRequest:
    media_type = (file.content_type or "").split(";")[0].strip().lower()
    if media_type != PDF_MEDIA_TYPE:
        raise InputValidationError("Please upload a PDF file")
    content = await read_upload(file, max_bytes=settings.max_upload_bytes)
    document = UploadedDocument(
        filename=file.filename or "uploaded-file.pdf",
        media_type=media_type,
        content=content,
    )
    return EvaluationRequest(document_type=document_type, document=document)


async def _critique(request: EvaluationRequest, client: InferenceClient, model: str) -> CritiqueResponse:
    report = await evaluate(request, client=client, model_id=model)
    return report.to_response()


async def _detection(
    request: EvaluationRequest,
    client: InferenceClient,
    model: str,
    ingestor: DocumentIngestor,
) -> DetectionResponse:
    report = await detect(request, client=client, model_id=model, ingestor=ingestor)
    return DetectionResponse(
        document_type=request.document_type,
        source=request.source,
        report=report,
        presentation=detection_presentation(report),
        generated_at=datetime.now(timezone.utc),
    )


@router.get("/document-types", response_model=list[DocumentTypeInfo])
async def document_types():
    return list_document_types()


@router.post("/critique", response_model=CritiqueResponse)
@rate_limit()
async def critique_text(
    request: Request,
    payload: EvaluateTextRequest,
    client: InferenceClient = Depends(inference_client),
    model: str = Depends(model_id),
):
    _ = request
    try:
        return await _critique(
            EvaluationRequest(document_type=payload.document_type, raw_text=payload.text),
            client,
            model,
        )
    except EvaluationError as exc:
        _raise_http_error(exc)


@router.post("/critique/upload", response_model=CritiqueResponse)
@rate_limit()
async def critique_upload(
    request: Request,
    document_type: str = Form(...),
    file: UploadFile = File(...),
    client: InferenceClient = Depends(inference_client),
    model: str = Depends(model_id),
):
    _ = request
    try:
        evaluation = await _uploaded_request(document_type, file)
        return await _critique(evaluation, client, model)
    except EvaluationError as exc:
        _raise_http_error(exc)


@router.post("/detect", response_model=DetectionResponse)
@rate_limit()
async def detect_text(
    request: Request,
    payload: EvaluateTextRequest,
    client: InferenceClient = Depends(inference_client),
    model: str = Depends(model_id),
    ingestor: DocumentIngestor = Depends(document_ingestor),
):
    _ = request
    try:
        return await _detection(
            EvaluationRequest(document_type=payload.document_type, raw_text=payload.text),
            client,
            model,
            ingestor,
        )
    except EvaluationError as exc:
        _raise_http_error(exc)


@router.post("/detect/upload", response_model=DetectionResponse)
@rate_limit()
async def detect_upload(
    request: Request,
    document_type: str = Form(...),
    file: UploadFile = File(...),
    client: InferenceClient = Depends(inference_client),
    model: str = Depends(model_id),
    ingestor: DocumentIngestor = Depends(document_ingestor),
):
    _ = request
    try:
        evaluation = await _uploaded_request(document_type, file)
        return await _detection(evaluation, client, model, ingestor)
    except EvaluationError as exc:
        _raise_http_error(exc)
