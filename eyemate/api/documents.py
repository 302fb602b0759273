"""
Medical document upload and download endpoints
"""
from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session
from typing import List, Optional
from pathlib import Path
import logging

from eyemate.core.database import get_db
from eyemate.core.dependencies import get_current_patient
from eyemate.models.patient import Patient
from eyemate.schemas.document import DocumentResponse
from eyemate.services.document_service import DocumentError, DocumentService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=DocumentResponse, status_code=status.HTTP_201_CREATED)
async def upload_document(
        file: UploadFile = File(...),
        title: Optional[str] = Form(None),
        document_type: str = Form("other"),
        description: Optional[str] = Form(None),
        patient: Patient = Depends(get_current_patient),
        db: Session = Depends(get_db)
):
    content = await file.read()
    try:
        return DocumentService(db).save_document(
            patient.id,
            file_name=file.filename,
            mime_type=file.content_type,
            content=content,
            title=title,
            document_type=document_type,
            description=description,
        )
    except DocumentError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("", response_model=List[DocumentResponse])
async def list_documents(
        document_type: Optional[str] = Query(None),
        patient: Patient = Depends(get_current_patient),
        db: Session = Depends(get_db)
):
    return DocumentService(db).get_documents(patient.id, document_type=document_type)


@router.get("/{document_id}/download")
async def download_document(
        document_id: int,
        patient: Patient = Depends(get_current_patient),
        db: Session = Depends(get_db)
):
    document = DocumentService(db).get_document(patient.id, document_id)
    if not document:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Document not found"
        )

    if not Path(document.file_path).is_file():
        logger.warning(f"⚠️ File missing for document {document.id}: {document.file_path}")
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="File not found"
        )

    return FileResponse(document.file_path, media_type=document.mime_type, filename=document.file_name)
