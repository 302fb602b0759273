"""
Appointment and reschedule request endpoints
"""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional

from eyemate.core.database import get_db
from eyemate.core.dependencies import get_current_patient
from eyemate.models.appointment import AppointmentStatus
from eyemate.models.patient import Patient
from eyemate.schemas.appointment import (
    AppointmentResponse,
    RescheduleRequestCreate,
    RescheduleRequestResponse,
)
from eyemate.services.appointment_service import AppointmentService, RescheduleError

router = APIRouter()


@router.get("/appointments", response_model=List[AppointmentResponse])
async def list_appointments(
        status_filter: Optional[AppointmentStatus] = Query(None, alias="status"),
        upcoming: bool = Query(False, description="Only today and later"),
        patient: Patient = Depends(get_current_patient),
        db: Session = Depends(get_db)
):
    return AppointmentService(db).get_appointments(patient.id, status=status_filter, upcoming_only=upcoming)


@router.post(
    "/appointment-reschedule-request",
    response_model=RescheduleRequestResponse,
    status_code=status.HTTP_201_CREATED
)
async def request_reschedule(
        request_data: RescheduleRequestCreate,
        patient: Patient = Depends(get_current_patient),
        db: Session = Depends(get_db)
):
    """
    Ask the clinic to move a scheduled appointment
    """
    try:
        request = AppointmentService(db).request_reschedule(patient.id, request_data)
    except RescheduleError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )

    if not request:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Appointment not found"
        )
    return request


@router.get("/reschedule-requests", response_model=List[RescheduleRequestResponse])
async def list_reschedule_requests(
        patient: Patient = Depends(get_current_patient),
        db: Session = Depends(get_db)
):
    return AppointmentService(db).get_reschedule_requests(patient.id)
