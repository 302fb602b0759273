"""
Pydantic schemas for medical documents
"""
from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class DocumentResponse(BaseModel):
    id: int
    document_type: str
    title: str
    file_name: str
    file_size: int
    mime_type: str
    description: Optional[str] = None
    uploaded_at: Optional[datetime] = None

    class Config:
        from_attributes = True
