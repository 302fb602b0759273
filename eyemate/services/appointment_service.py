"""
Appointment and reschedule request service
"""
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from eyemate.core.clock import Clock, local_now
from eyemate.models.appointment import (
    Appointment,
    AppointmentStatus,
    RescheduleRequest,
    RescheduleStatus,
)
from eyemate.schemas.appointment import RescheduleRequestCreate

logger = logging.getLogger(__name__)


class RescheduleError(Exception):
    """Reschedule request rejected before it was stored"""


class AppointmentService:

    def __init__(self, db: Session, clock: Clock = local_now):
        self.db = db
        self.clock = clock

    def get_appointments(
            self,
            patient_id: int,
            status: Optional[AppointmentStatus] = None,
            upcoming_only: bool = False
    ) -> List[Appointment]:
        query = self.db.query(Appointment).filter(Appointment.patient_id == patient_id)

        if status:
            query = query.filter(Appointment.status == status)
        if upcoming_only:
            query = query.filter(Appointment.appointment_date >= self.clock().date())

        return query.order_by(Appointment.appointment_date.desc(), Appointment.appointment_time.desc()).all()

    def get_appointment(self, patient_id: int, appointment_id: int) -> Optional[Appointment]:
        return self.db.query(Appointment).filter(
            Appointment.id == appointment_id,
            Appointment.patient_id == patient_id
        ).first()

    def request_reschedule(self, patient_id: int, data: RescheduleRequestCreate) -> Optional[RescheduleRequest]:
        """None when the appointment is not the patient's"""
        appointment = self.get_appointment(patient_id, data.appointment_id)
        if not appointment:
            return None

        if appointment.status != AppointmentStatus.SCHEDULED:
            raise RescheduleError("Only scheduled appointments can be rescheduled")
        if data.requested_date < self.clock().date():
            raise RescheduleError("Requested date is in the past")

        pending = self.db.query(RescheduleRequest).filter(
            RescheduleRequest.appointment_id == appointment.id,
            RescheduleRequest.status == RescheduleStatus.PENDING
        ).first()
        if pending:
            raise RescheduleError("A reschedule request for this appointment is already pending")

        request = RescheduleRequest(
            appointment_id=appointment.id,
            patient_id=patient_id,
            requested_date=data.requested_date,
            requested_time=data.requested_time,
            reason=data.reason,
            status=RescheduleStatus.PENDING,
        )
        self.db.add(request)
        self.db.commit()
        self.db.refresh(request)

        logger.info(f"Reschedule requested for appointment {appointment.id} -> {data.requested_date}")
        return request

    def get_reschedule_requests(self, patient_id: int) -> List[RescheduleRequest]:
        return self.db.query(RescheduleRequest).filter(
            RescheduleRequest.patient_id == patient_id
        ).order_by(RescheduleRequest.created_at.desc(), RescheduleRequest.id.desc()).all()
