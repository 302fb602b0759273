"""
Patient medication, reminder and dose service
"""
from sqlalchemy.orm import Session, joinedload
from sqlalchemy import and_, case, func
from typing import List, Optional, Dict, Any
from datetime import date, datetime, time, timedelta
import logging

from eyemate.core.clock import Clock, local_now
from eyemate.models.medication import Medication, PatientMedication, PatientMedicationStatus
from eyemate.models.medication_dose import MedicationDose, DoseStatus
from eyemate.models.medication_reminder import MedicationReminder, ReminderStatus
from eyemate.schemas.medication import DoseCreate, ReminderCreate

logger = logging.getLogger(__name__)


class MedicationService:
    """Medications prescribed to a patient and their reminders and doses"""

    def __init__(self, db: Session, clock: Clock = local_now):
        self.db = db
        self.clock = clock

    def get_active_medications(self, patient_id: int) -> List[PatientMedication]:
        return self.db.query(PatientMedication).options(
            joinedload(PatientMedication.medication)
        ).filter(
            PatientMedication.patient_id == patient_id,
            PatientMedication.status == PatientMedicationStatus.ACTIVE
        ).order_by(PatientMedication.created_at.desc(), PatientMedication.id.desc()).all()

    def get_patient_medication(self, patient_id: int, patient_medication_id: int) -> Optional[PatientMedication]:
        return self.db.query(PatientMedication).filter(
            PatientMedication.id == patient_medication_id,
            PatientMedication.patient_id == patient_id
        ).first()

    # ------------------------------------------------------------------
    # Reminders
    # ------------------------------------------------------------------

    def get_reminders(self, patient_id: int, status: Optional[ReminderStatus] = None) -> List[Dict[str, Any]]:
        query = self.db.query(MedicationReminder).filter(MedicationReminder.patient_id == patient_id)
        if status:
            query = query.filter(MedicationReminder.status == status)

        return [self._reminder_dict(r) for r in query.order_by(MedicationReminder.reminder_time).all()]

    def create_reminder(self, patient_id: int, reminder_data: ReminderCreate) -> Optional[Dict[str, Any]]:
        """Create a Pending reminder; None when the medication is not the patient's"""
        patient_medication = self.get_patient_medication(patient_id, reminder_data.patient_medication_id)
        if not patient_medication:
            return None

        reminder = MedicationReminder(
            patient_id=patient_id,
            patient_medication_id=patient_medication.id,
            reminder_time=reminder_data.reminder_time,
            days_of_week=reminder_data.days_of_week,
            notes=reminder_data.notes,
            status=ReminderStatus.PENDING,
        )
        self.db.add(reminder)
        self.db.commit()
        self.db.refresh(reminder)

        logger.info(f"Reminder created for {patient_medication.name} at {reminder.reminder_time} (ID: {reminder.id})")
        return self._reminder_dict(reminder)

    def _reminder_dict(self, reminder: MedicationReminder) -> Dict[str, Any]:
        patient_medication = reminder.patient_medication
        return {
            "id": reminder.id,
            "patient_medication_id": reminder.patient_medication_id,
            "medication_name": patient_medication.name,
            "eye_display": patient_medication.eye_display,
            "reminder_time": reminder.reminder_time,
            "days_of_week": reminder.days_of_week,
            "status": reminder.status,
            "responded_at": reminder.responded_at,
            "notes": reminder.notes,
        }

    # ------------------------------------------------------------------
    # Doses
    # ------------------------------------------------------------------

    def record_dose(self, patient_id: int, dose_data: DoseCreate) -> Optional[MedicationDose]:
        """
        Record a dose the patient reports.

        A referenced reminder is marked Sent, which takes it out of the
        scheduler's Pending sweeps for the rest of the day.
        """
        patient_medication = self.get_patient_medication(patient_id, dose_data.patient_medication_id)
        if not patient_medication:
            return None

        now = self.clock()
        dose = MedicationDose(
            patient_medication_id=patient_medication.id,
            scheduled_time=now,
            actual_time=dose_data.actual_time or now,
            status=dose_data.status,
            notes=dose_data.notes,
        )
        self.db.add(dose)

        if dose_data.reminder_id:
            self.db.query(MedicationReminder).filter(
                MedicationReminder.id == dose_data.reminder_id,
                MedicationReminder.patient_id == patient_id
            ).update(
                {"status": ReminderStatus.SENT, "responded_at": now},
                synchronize_session=False
            )

        self.db.commit()
        self.db.refresh(dose)

        logger.info(f"Dose recorded for patient medication {patient_medication.id}: {dose.status.value}")
        return dose

    def get_usage_history(
            self,
            patient_id: int,
            period_days: int = 7,
            on_date: Optional[date] = None
    ) -> List[Dict[str, Any]]:
        query = self.db.query(MedicationDose).join(PatientMedication).filter(
            PatientMedication.patient_id == patient_id
        )

        if on_date:
            start = datetime.combine(on_date, time.min)
            query = query.filter(
                MedicationDose.scheduled_time >= start,
                MedicationDose.scheduled_time < start + timedelta(days=1)
            )
        else:
            query = query.filter(MedicationDose.scheduled_time >= self.clock() - timedelta(days=period_days))

        return [
            {
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
            for dose in query.order_by(MedicationDose.scheduled_time.desc()).all()
        ]

    def get_adherence(self, patient_id: int, period_days: int = 30) -> List[Dict[str, Any]]:
        """Taken vs recorded doses per active medication over the period"""
        since = self.clock() - timedelta(days=period_days)

        rows = self.db.query(
            PatientMedication.id,
            Medication.name,
            func.count(MedicationDose.id),
            func.sum(case((MedicationDose.status == DoseStatus.TAKEN, 1), else_=0)),
            func.sum(case((MedicationDose.status == DoseStatus.MISSED, 1), else_=0)),
        ).join(
            Medication, PatientMedication.medication_id == Medication.id
        ).outerjoin(
            MedicationDose,
            and_(
                MedicationDose.patient_medication_id == PatientMedication.id,
                MedicationDose.scheduled_time >= since
            )
        ).filter(
            PatientMedication.patient_id == patient_id,
            PatientMedication.status == PatientMedicationStatus.ACTIVE
        ).group_by(PatientMedication.id, Medication.name).order_by(PatientMedication.id).all()

        report = []
        for medication_id, name, total, taken, missed in rows:
            taken = int(taken or 0)
            report.append({
                "medication_id": medication_id,
                "medication_name": name,
                "total_scheduled": total,
                "total_taken": taken,
                "total_missed": int(missed or 0),
                "adherence_rate": round(taken / total * 100, 2) if total else None,
            })
        return report
