"""
Patient profile, dashboard and IOP endpoints
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List

from eyemate.core.database import get_db
from eyemate.core.dependencies import (
    get_current_patient,
    get_pagination_params,
    get_push_service,
    PaginationParams
)
from eyemate.models.patient import Patient
from eyemate.schemas.iop import IOPAnalytics, IOPCreated, IOPMeasurementCreate, IOPMeasurementResponse
from eyemate.schemas.patient import DashboardSummary, PatientProfile, PatientUpdate
from eyemate.services.iop_service import IOPService
from eyemate.services.patient_service import PatientService
from eyemate.services.push_service import PushService

router = APIRouter()


@router.get("/profile", response_model=PatientProfile)
async def get_profile(
        patient: Patient = Depends(get_current_patient),
        db: Session = Depends(get_db)
):
    return PatientService(db).get_profile(patient)


@router.put("/profile", response_model=PatientProfile)
async def update_profile(
        patient_update: PatientUpdate,
        patient: Patient = Depends(get_current_patient),
        db: Session = Depends(get_db)
):
    """
    Update the profile; omitted fields are left unchanged
    """
    return PatientService(db).update_profile(patient, patient_update)


@router.get("/dashboard", response_model=DashboardSummary)
async def get_dashboard(
        patient: Patient = Depends(get_current_patient),
        db: Session = Depends(get_db)
):
    return PatientService(db).get_dashboard(patient)


@router.post("/iop-measurement", response_model=IOPCreated, status_code=status.HTTP_201_CREATED)
async def record_iop(
        data: IOPMeasurementCreate,
        patient: Patient = Depends(get_current_patient),
        db: Session = Depends(get_db),
        push_service: PushService = Depends(get_push_service)
):
    """
    Record an IOP measurement; high readings send an alert push
    """
    record, high = IOPService(db, push_service).record_measurement(patient, data)
    return {
        "message": "บันทึกค่าความดันลูกตาสำเร็จ",
        "success": True,
        "measurement": record,
        "high_iop_alert": high,
    }


@router.get("/iop-measurements", response_model=List[IOPMeasurementResponse])
async def list_iop(
        pagination: PaginationParams = Depends(get_pagination_params),
        patient: Patient = Depends(get_current_patient),
        db: Session = Depends(get_db)
):
    return IOPService(db).get_measurements(patient.id, skip=pagination.skip, limit=pagination.limit)


@router.get("/iop-analytics", response_model=IOPAnalytics)
async def iop_analytics(
        period: int = Query(90, ge=1, le=3650, description="Days to include"),
        patient: Patient = Depends(get_current_patient),
        db: Session = Depends(get_db)
):
    return IOPService(db).get_analytics(patient.id, period_days=period)
