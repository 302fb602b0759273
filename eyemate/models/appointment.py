"""
Appointment, reminder log and reschedule request models
"""
from datetime import datetime

from sqlalchemy import Column, Integer, String, Text, Date, DateTime, Time, Enum, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import enum

from eyemate.core.database import Base


class AppointmentStatus(str, enum.Enum):
    SCHEDULED = "Scheduled"
    MISSED = "Missed"
    CANCELLED = "Cancelled"
    COMPLETED = "Completed"


class ReminderType(str, enum.Enum):
    SAME_DAY = "same_day"
    NEXT_DAY = "next_day"
    THREE_DAYS = "three_days"


class RescheduleStatus(str, enum.Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class Appointment(Base):
    """Clinic appointment"""
    __tablename__ = "appointments"

    id = Column(Integer, primary_key=True, index=True)
    patient_id = Column(Integer, ForeignKey("patients.id"), nullable=False, index=True)
    appointment_date = Column(Date, nullable=False, index=True)
    appointment_time = Column(Time, nullable=False)
    appointment_type = Column(String(100), nullable=True)
    doctor_name = Column(String(255), nullable=True)
    location = Column(String(255), nullable=True)
    status = Column(Enum(AppointmentStatus), nullable=False, default=AppointmentStatus.SCHEDULED, index=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime, nullable=True)

    patient = relationship("Patient", back_populates="appointments")
    reminder_logs = relationship("AppointmentReminderLog", back_populates="appointment")

    def __repr__(self):
        return f"<Appointment(id={self.id}, at={self.appointment_date} {self.appointment_time}, status={self.status.value})>"

    @property
    def starts_at(self) -> datetime:
        return datetime.combine(self.appointment_date, self.appointment_time)


class AppointmentReminderLog(Base):
    """Ledger of appointment reminders, one per appointment, type and day"""
    __tablename__ = "appointment_reminders"
    __table_args__ = (
        UniqueConstraint("appointment_id", "reminder_type", "sent_on", name="uq_appointment_reminder_day"),
    )

    id = Column(Integer, primary_key=True, index=True)
    appointment_id = Column(Integer, ForeignKey("appointments.id"), nullable=False)
    reminder_type = Column(Enum(ReminderType), nullable=False)
    sent_on = Column(Date, nullable=False)
    sent_at = Column(DateTime, nullable=False)
    status = Column(String(20), nullable=False, default="Sent")

    appointment = relationship("Appointment", back_populates="reminder_logs")


class RescheduleRequest(Base):
    """Patient request to move an appointment"""
    __tablename__ = "appointment_reschedule_requests"

    id = Column(Integer, primary_key=True, index=True)
    appointment_id = Column(Integer, ForeignKey("appointments.id"), nullable=False)
    patient_id = Column(Integer, ForeignKey("patients.id"), nullable=False, index=True)
    requested_date = Column(Date, nullable=False)
    requested_time = Column(Time, nullable=True)
    reason = Column(Text, nullable=True)
    status = Column(Enum(RescheduleStatus), nullable=False, default=RescheduleStatus.PENDING)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    appointment = relationship("Appointment")
