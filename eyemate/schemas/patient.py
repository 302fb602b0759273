"""
Pydantic schemas for the patient profile and dashboard
"""
from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import date


class PatientProfile(BaseModel):
    """Patient profile joined with the owning user"""
    id: int
    user_id: int
    name: str
    national_id: str
    phone: Optional[str] = None
    address: Optional[str] = None
    age: Optional[int] = None
    glaucoma_type: Optional[str] = None
    glaucoma_stage: Optional[str] = None
    date_first_diagnosed: Optional[date] = None
    primary_hospital: Optional[str] = None
    insurance_type: Optional[str] = None
    insurance_provider: Optional[str] = None


class PatientUpdate(BaseModel):
    """Fields a patient may change; omitted fields are kept"""
    glaucoma_type: Optional[str] = Field(None, max_length=100)
    glaucoma_stage: Optional[str] = Field(None, max_length=50)
    primary_hospital: Optional[str] = Field(None, max_length=255)
    insurance_type: Optional[str] = Field(None, max_length=100)
    insurance_provider: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=20)
    address: Optional[str] = None


class DashboardSummary(BaseModel):
    latest_iop: Optional[dict] = None
    upcoming_appointments: List[dict] = []
    todays_reminders: List[dict] = []
    unread_notifications: int = 0
    adherence_rate_7d: Optional[float] = None
