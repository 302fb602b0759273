"""
Medication reminder and reminder ledger models
"""
from sqlalchemy import Column, Integer, String, Text, Date, DateTime, Time, Enum, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import enum

from eyemate.core.database import Base


class ReminderStatus(str, enum.Enum):
    PENDING = "Pending"
    SENT = "Sent"
    MISSED = "Missed"


class MedicationReminder(Base):
    """Daily time-of-day reminder for one patient medication"""
    __tablename__ = "medication_reminders"

    id = Column(Integer, primary_key=True, index=True)
    patient_id = Column(Integer, ForeignKey("patients.id"), nullable=False, index=True)
    patient_medication_id = Column(Integer, ForeignKey("patient_medications.id"), nullable=False, index=True)
    reminder_time = Column(Time, nullable=False)
    days_of_week = Column(String(50), default="Mon,Tue,Wed,Thu,Fri,Sat,Sun")
    status = Column(Enum(ReminderStatus), nullable=False, default=ReminderStatus.PENDING, index=True)
    responded_at = Column(DateTime, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    patient_medication = relationship("PatientMedication", back_populates="reminders")

    def __repr__(self):
        return f"<MedicationReminder(id={self.id}, time={self.reminder_time}, status={self.status.value})>"


class MedicationReminderLog(Base):
    """One row per on-time reminder push per day"""
    __tablename__ = "medication_reminder_logs"
    __table_args__ = (
        UniqueConstraint("reminder_id", "reminder_date", name="uq_medication_reminder_day"),
    )

    id = Column(Integer, primary_key=True, index=True)
    reminder_id = Column(Integer, ForeignKey("medication_reminders.id"), nullable=False)
    reminder_date = Column(Date, nullable=False)
    sent_at = Column(DateTime, nullable=False)
