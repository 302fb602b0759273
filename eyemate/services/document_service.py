"""
Medical document storage service
"""
from pathlib import Path
from typing import List, Optional
import logging
import uuid

from sqlalchemy.orm import Session

from eyemate.core.config import get_settings
from eyemate.models.document import MedicalDocument

logger = logging.getLogger(__name__)

settings = get_settings()


class DocumentError(Exception):
    """Upload rejected"""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class DocumentService:

    def __init__(self, db: Session, upload_folder: Optional[str] = None):
        self.db = db
        self.upload_folder = Path(upload_folder or settings.UPLOAD_FOLDER)

    def save_document(
            self,
            patient_id: int,
            file_name: str,
            mime_type: str,
            content: bytes,
            title: Optional[str] = None,
            document_type: str = "other",
            description: Optional[str] = None
    ) -> MedicalDocument:
        if mime_type not in settings.ALLOWED_UPLOAD_TYPES:
            raise DocumentError(f"Unsupported file type: {mime_type}", status_code=415)
        if not content:
            raise DocumentError("Empty file")
        if len(content) > settings.MAX_FILE_SIZE:
            raise DocumentError("File too large", status_code=413)

        original_name = Path(file_name or "document").name
        stored_name = f"{patient_id}_{uuid.uuid4().hex}{Path(original_name).suffix.lower()}"

        self.upload_folder.mkdir(parents=True, exist_ok=True)
        path = self.upload_folder / stored_name
        path.write_bytes(content)

        document = MedicalDocument(
            patient_id=patient_id,
            document_type=document_type,
            title=title or original_name,
            file_name=original_name,
            file_path=str(path),
            file_size=len(content),
            mime_type=mime_type,
            description=description,
        )
        try:
            self.db.add(document)
            self.db.commit()
        except Exception:
            self.db.rollback()
            path.unlink(missing_ok=True)
            raise

        self.db.refresh(document)
        logger.info(f"Document {document.id} stored for patient {patient_id} ({len(content)} bytes)")
        return document

    def get_documents(self, patient_id: int, document_type: Optional[str] = None) -> List[MedicalDocument]:
        query = self.db.query(MedicalDocument).filter(MedicalDocument.patient_id == patient_id)
        if document_type:
            query = query.filter(MedicalDocument.document_type == document_type)
        return query.order_by(MedicalDocument.uploaded_at.desc(), MedicalDocument.id.desc()).all()

    def get_document(self, patient_id: int, document_id: int) -> Optional[MedicalDocument]:
        return self.db.query(MedicalDocument).filter(
            MedicalDocument.id == document_id,
            MedicalDocument.patient_id == patient_id
        ).first()
