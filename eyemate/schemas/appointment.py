"""
Pydantic schemas for appointments and reschedule requests
"""
from pydantic import BaseModel, Field
from typing import Optional
from datetime import date, datetime, time

from eyemate.models.appointment import AppointmentStatus, RescheduleStatus


class AppointmentResponse(BaseModel):
    id: int
    appointment_date: date
    appointment_time: time
    appointment_type: Optional[str] = None
    doctor_name: Optional[str] = None
    location: Optional[str] = None
    status: AppointmentStatus
    notes: Optional[str] = None

    class Config:
        from_attributes = True


class RescheduleRequestCreate(BaseModel):
    appointment_id: int
    requested_date: date
    requested_time: Optional[time] = None
    reason: Optional[str] = Field(None, max_length=1000)


class RescheduleRequestResponse(BaseModel):
    id: int
    appointment_id: int
    requested_date: date
    requested_time: Optional[time] = None
    reason: Optional[str] = None
    status: RescheduleStatus
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
