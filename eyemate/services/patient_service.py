"""
Patient profile and dashboard service
"""
from sqlalchemy.orm import Session
from datetime import date
from typing import Optional
import logging

from eyemate.core.clock import Clock, local_now
from eyemate.models.appointment import Appointment, AppointmentStatus
from eyemate.models.iop_record import IOPRecord
from eyemate.models.medication import PatientMedication, PatientMedicationStatus
from eyemate.models.medication_reminder import MedicationReminder
from eyemate.models.patient import Patient
from eyemate.schemas.patient import PatientUpdate
from eyemate.services.medication_service import MedicationService
from eyemate.services.notification_service import NotificationService

logger = logging.getLogger(__name__)

USER_FIELDS = ("phone", "address")


def age_on(birth_date: Optional[date], today: date) -> Optional[int]:
    if birth_date is None:
        return None
    return today.year - birth_date.year - (
            (today.month, today.day) < (birth_date.month, birth_date.day)
    )


class PatientService:
    """Service for the patient's own profile"""

    def __init__(self, db: Session, clock: Clock = local_now):
        self.db = db
        self.clock = clock

    def get_profile(self, patient: Patient) -> dict:
        user = patient.user
        return {
            "id": patient.id,
            "user_id": user.id,
            "name": user.name,
            "national_id": user.national_id,
            "phone": user.phone,
            "address": user.address,
            "age": age_on(user.date_of_birth, self.clock().date()),
            "glaucoma_type": patient.glaucoma_type,
            "glaucoma_stage": patient.glaucoma_stage,
            "date_first_diagnosed": patient.date_first_diagnosed,
            "primary_hospital": patient.primary_hospital,
            "insurance_type": patient.insurance_type,
            "insurance_provider": patient.insurance_provider,
        }

    def update_profile(self, patient: Patient, patient_update: PatientUpdate) -> dict:
        """Update the patient and user rows in one transaction"""
        update_data = patient_update.dict(exclude_unset=True)

        try:
            for field, value in update_data.items():
                if value is None:
                    continue
                target = patient.user if field in USER_FIELDS else patient
                setattr(target, field, value)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(patient)
        logger.info(f"Patient profile updated (ID: {patient.id})")
        return self.get_profile(patient)

    def get_dashboard(self, patient: Patient) -> dict:
        now = self.clock()
        today = now.date()

        latest = self.db.query(IOPRecord).filter(
            IOPRecord.patient_id == patient.id
        ).order_by(IOPRecord.measured_date.desc(), IOPRecord.id.desc()).first()

        appointments = self.db.query(Appointment).filter(
            Appointment.patient_id == patient.id,
            Appointment.status == AppointmentStatus.SCHEDULED,
            Appointment.appointment_date >= today,
        ).order_by(Appointment.appointment_date, Appointment.appointment_time).limit(3).all()

        reminders = self.db.query(MedicationReminder).join(PatientMedication).filter(
            MedicationReminder.patient_id == patient.id,
            PatientMedication.status == PatientMedicationStatus.ACTIVE,
        ).order_by(MedicationReminder.reminder_time).all()

        adherence = MedicationService(self.db, self.clock).get_adherence(patient.id, period_days=7)
        scheduled = sum(entry["total_scheduled"] for entry in adherence)
        taken = sum(entry["total_taken"] for entry in adherence)

        return {
            "latest_iop": {
                "measured_date": latest.measured_date.isoformat(),
                "left_eye_iop": latest.left_eye_iop,
                "right_eye_iop": latest.right_eye_iop,
            } if latest else None,
            "upcoming_appointments": [
                {
                    "id": a.id,
                    "appointment_date": a.appointment_date.isoformat(),
                    "appointment_time": a.appointment_time.strftime("%H:%M"),
                    "doctor_name": a.doctor_name,
                }
                for a in appointments
            ],
            "todays_reminders": [
                {
                    "id": r.id,
                    "medication_name": r.patient_medication.name,
                    "reminder_time": r.reminder_time.strftime("%H:%M"),
                    "status": r.status.value,
                }
                for r in reminders
            ],
            "unread_notifications": NotificationService(self.db, self.clock).unread_count(patient.user_id),
            "adherence_rate_7d": round(taken / scheduled * 100, 2) if scheduled else None,
        }
