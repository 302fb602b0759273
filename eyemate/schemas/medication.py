"""
Pydantic schemas for medications, reminders and doses
"""
from pydantic import BaseModel, Field, validator
from typing import Optional, List
from datetime import datetime, time

from eyemate.models.medication import Eye
from eyemate.models.medication_dose import DoseStatus
from eyemate.models.medication_reminder import ReminderStatus

WEEKDAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


class PatientMedicationResponse(BaseModel):
    id: int
    medication_id: int
    name: str
    eye: Eye
    eye_display: str
    dosage: Optional[str] = None
    frequency: Optional[str] = None

    class Config:
        from_attributes = True


class ReminderCreate(BaseModel):
    patient_medication_id: int
    reminder_time: time
    days_of_week: str = ",".join(WEEKDAYS)
    notes: Optional[str] = None

    @validator('reminder_time')
    def truncate_seconds(cls, v):
        return v.replace(second=0, microsecond=0)

    @validator('days_of_week')
    def validate_days(cls, v):
        days = [d.strip() for d in v.split(",") if d.strip()]
        if not days or any(d not in WEEKDAYS for d in days):
            raise ValueError(f"days_of_week must list days from {', '.join(WEEKDAYS)}")
        return ",".join(days)


class ReminderResponse(BaseModel):
    id: int
    patient_medication_id: int
    medication_name: str
    eye_display: str
    reminder_time: time
    days_of_week: Optional[str] = None
    status: ReminderStatus
    responded_at: Optional[datetime] = None
    notes: Optional[str] = None


class DoseCreate(BaseModel):
    patient_medication_id: int
    reminder_id: Optional[int] = None
    status: DoseStatus = DoseStatus.TAKEN
    actual_time: Optional[datetime] = None
    notes: Optional[str] = Field(None, max_length=1000)


class DoseResponse(BaseModel):
    id: int
    patient_medication_id: int
    medication_name: str
    dosage: Optional[str] = None
    scheduled_time: datetime
    actual_time: Optional[datetime] = None
    status: DoseStatus
    status_display: str
    notes: Optional[str] = None


class AdherenceEntry(BaseModel):
    medication_id: int
    medication_name: str
    total_scheduled: int
    total_taken: int
    total_missed: int
    adherence_rate: Optional[float] = None


class AdherenceReport(BaseModel):
    period_days: int
    adherence: List[AdherenceEntry]
