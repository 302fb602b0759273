"""
Pydantic schemas for IOP measurements
"""
from pydantic import BaseModel, Field, root_validator
from typing import Optional, List
from datetime import date, datetime


class IOPMeasurementCreate(BaseModel):
    left_eye_iop: Optional[float] = Field(None, ge=0, le=80, description="mmHg")
    right_eye_iop: Optional[float] = Field(None, ge=0, le=80, description="mmHg")
    target_iop_left: Optional[float] = Field(None, ge=0, le=80)
    target_iop_right: Optional[float] = Field(None, ge=0, le=80)
    measurement_method: Optional[str] = Field(None, max_length=100)
    measured_date: Optional[date] = None
    notes: Optional[str] = None

    @root_validator(skip_on_failure=True)
    def require_one_eye(cls, values):
        if values.get('left_eye_iop') is None and values.get('right_eye_iop') is None:
            raise ValueError('At least one eye measurement is required')
        return values


class IOPMeasurementResponse(BaseModel):
    id: int
    measured_date: date
    left_eye_iop: Optional[float] = None
    right_eye_iop: Optional[float] = None
    target_iop_left: Optional[float] = None
    target_iop_right: Optional[float] = None
    measurement_method: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class IOPCreated(BaseModel):
    message: str
    success: bool = True
    measurement: IOPMeasurementResponse
    high_iop_alert: bool = False


class EyeStatistics(BaseModel):
    average: Optional[float] = None
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    latest: Optional[float] = None
    above_target: int = 0


class IOPAnalytics(BaseModel):
    period_days: int
    measurement_count: int
    left_eye: EyeStatistics
    right_eye: EyeStatistics
    trend: List[IOPMeasurementResponse] = []
