from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from doc_pipeline.processing import (
    DocumentProcessingService,
    InvalidRequest,
    JobAlreadyFinished,
    NotFoundError,
    QueueClosed,
)

from api.dependencies import get_service
from api.schemas import ProcessRequest

router = APIRouter(prefix="/documents", tags=["documents"])


@router.post("/upload")
async def upload_document(
    file: Optional[UploadFile] = File(None),
    service: DocumentProcessingService = Depends(get_service),
):
    if file is None:
        raise HTTPException(status_code=400, detail="No file uploaded")
    payload = await file.read()
    try:
        document = service.documents.save_upload(payload, file.filename, file.content_type)
    except InvalidRequest as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return {
        "documentId": document.id,
        "fileName": document.file_name,
        "contentType": document.content_type,
        "fileSize": document.size,
        "status": "uploaded",
    }


@router.get("/languages/{document_id}")
def detect_languages(document_id: str, service: DocumentProcessingService = Depends(get_service)):
    try:
        languages = service.documents.detect_languages(document_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    return [language.to_dict() for language in languages]


@router.post("/process")
def process_document(body: ProcessRequest, service: DocumentProcessingService = Depends(get_service)):
    try:
        job_id = service.submit(body.document_id, body.to_options())
    except (InvalidRequest, NotFoundError) as exc:
        # An unknown document is a bad submission, not a missing resource.
        raise HTTPException(status_code=400, detail=str(exc))
    except QueueClosed as exc:
        raise HTTPException(status_code=503, detail=str(exc))
    return {"jobId": job_id, "status": "started"}


@router.get("/status/{job_id}")
def get_processing_status(job_id: str, service: DocumentProcessingService = Depends(get_service)):
    try:
        job = service.get_status(job_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    return job.to_dict()


@router.get("/extract/{job_id}")
def get_extracted_content(job_id: str, service: DocumentProcessingService = Depends(get_service)):
    try:
        artifact = service.get_extract(job_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    return artifact.to_dict()


@router.post("/cancel/{job_id}")
def cancel_processing(job_id: str, service: DocumentProcessingService = Depends(get_service)):
    try:
        service.cancel(job_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except JobAlreadyFinished as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    return {"jobId": job_id, "status": "cancelling"}
