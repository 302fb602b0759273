"""
Medication, reminder and dose endpoints
"""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date

from eyemate.core.database import get_db
from eyemate.core.dependencies import get_current_patient
from eyemate.models.medication_reminder import ReminderStatus
from eyemate.models.patient import Patient
from eyemate.schemas.medication import (
    AdherenceReport,
    DoseCreate,
    DoseResponse,
    PatientMedicationResponse,
    ReminderCreate,
    ReminderResponse,
)
from eyemate.services.medication_service import MedicationService

router = APIRouter()


@router.get("", response_model=List[PatientMedicationResponse])
async def list_medications(
        patient: Patient = Depends(get_current_patient),
        db: Session = Depends(get_db)
):
    """Active medications of the patient"""
    return MedicationService(db).get_active_medications(patient.id)


@router.get("/reminders", response_model=List[ReminderResponse])
async def list_reminders(
        status_filter: Optional[ReminderStatus] = Query(None, alias="status"),
        patient: Patient = Depends(get_current_patient),
        db: Session = Depends(get_db)
):
    return MedicationService(db).get_reminders(patient.id, status=status_filter)


@router.post("/reminders", response_model=ReminderResponse, status_code=status.HTTP_201_CREATED)
async def create_reminder(
        reminder_data: ReminderCreate,
        patient: Patient = Depends(get_current_patient),
        db: Session = Depends(get_db)
):
    reminder = MedicationService(db).create_reminder(patient.id, reminder_data)
    if not reminder:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Medication not found"
        )
    return reminder


@router.post("/usage", response_model=DoseResponse, status_code=status.HTTP_201_CREATED)
async def record_usage(
        dose_data: DoseCreate,
        patient: Patient = Depends(get_current_patient),
        db: Session = Depends(get_db)
):
    """Record a dose; a Taken dose suppresses today's reminders for that medication"""
    service = MedicationService(db)
    dose = service.record_dose(patient.id, dose_data)
    if not dose:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Medication not found"
        )

    return {
        "id": dose.id,
        "patient_medication_id": dose.patient_medication_id,
        "medication_name": dose.patient_medication.name,
        "dosage": dose.patient_medication.dosage,
        "scheduled_time": dose.scheduled_time,
        "actual_time": dose.actual_time,
        "status": dose.status,
        "status_display": dose.status_display,
        "notes": dose.notes,
    }


@router.get("/adherence", response_model=AdherenceReport)
async def adherence(
        period: int = Query(30, ge=1, le=365),
        patient: Patient = Depends(get_current_patient),
        db: Session = Depends(get_db)
):
    return {
        "period_days": period,
        "adherence": MedicationService(db).get_adherence(patient.id, period_days=period),
    }


@router.get("/usage-history", response_model=List[DoseResponse])
async def usage_history(
        period: int = Query(7, ge=1, le=365),
        on_date: Optional[date] = Query(None, alias="date"),
        patient: Patient = Depends(get_current_patient),
        db: Session = Depends(get_db)
):
    return MedicationService(db).get_usage_history(patient.id, period_days=period, on_date=on_date)
