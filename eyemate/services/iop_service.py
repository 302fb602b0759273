"""
IOP measurement service
"""
from sqlalchemy.orm import Session
from datetime import timedelta
from typing import List, Optional, Dict, Any
import logging

from eyemate.core.clock import Clock, local_now
from eyemate.core.config import get_settings
from eyemate.models.iop_record import IOPRecord
from eyemate.models.patient import Patient
from eyemate.schemas.iop import IOPMeasurementCreate
from eyemate.services.push_service import PushService

logger = logging.getLogger(__name__)

settings = get_settings()


def eye_statistics(values: List[Optional[float]], targets: List[Optional[float]]) -> Dict[str, Any]:
    """Summary of one eye's readings, oldest first"""
    readings = [v for v in values if v is not None]
    if not readings:
        return {"above_target": 0}

    return {
        "average": round(sum(readings) / len(readings), 1),
        "minimum": min(readings),
        "maximum": max(readings),
        "latest": readings[-1],
        "above_target": sum(
            1 for value, target in zip(values, targets)
            if value is not None and target is not None and value > target
        ),
    }


class IOPService:

    def __init__(self, db: Session, push_service: Optional[PushService] = None, clock: Clock = local_now):
        self.db = db
        self.push = push_service
        self.clock = clock

    def record_measurement(self, patient: Patient, data: IOPMeasurementCreate) -> tuple:
        """
        Store a measurement and alert the patient when it is high.

        Returns the record and whether the high-IOP alert fired.
        """
        record = IOPRecord(
            patient_id=patient.id,
            measured_date=data.measured_date or self.clock().date(),
            left_eye_iop=data.left_eye_iop,
            right_eye_iop=data.right_eye_iop,
            target_iop_left=data.target_iop_left,
            target_iop_right=data.target_iop_right,
            measurement_method=data.measurement_method,
            notes=data.notes,
        )
        self.db.add(record)
        self.db.commit()
        self.db.refresh(record)

        high = record.is_high(settings.HIGH_IOP_THRESHOLD)
        if high and self.push is not None:
            logger.info(f"High IOP for patient {patient.id}: L={record.left_eye_iop} R={record.right_eye_iop}")
            self.push.send_high_iop_alert(patient.user_id, record.left_eye_iop, record.right_eye_iop)

        return record, high

    def get_measurements(self, patient_id: int, skip: int = 0, limit: int = 50) -> List[IOPRecord]:
        return self.db.query(IOPRecord).filter(
            IOPRecord.patient_id == patient_id
        ).order_by(IOPRecord.measured_date.desc(), IOPRecord.id.desc()).offset(skip).limit(limit).all()

    def get_analytics(self, patient_id: int, period_days: int = 90) -> Dict[str, Any]:
        since = self.clock().date() - timedelta(days=period_days)
        records = self.db.query(IOPRecord).filter(
            IOPRecord.patient_id == patient_id,
            IOPRecord.measured_date >= since
        ).order_by(IOPRecord.measured_date, IOPRecord.id).all()

        return {
            "period_days": period_days,
            "measurement_count": len(records),
            "left_eye": eye_statistics(
                [r.left_eye_iop for r in records],
                [r.target_iop_left for r in records]
            ),
            "right_eye": eye_statistics(
                [r.right_eye_iop for r in records],
                [r.target_iop_right for r in records]
            ),
            "trend": records,
        }
