"""
Medication dose record model
"""
from sqlalchemy import Column, Integer, DateTime, ForeignKey, Enum, Text
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import enum

from eyemate.core.database import Base


class DoseStatus(str, enum.Enum):
    """Dose states"""
    TAKEN = "Taken"
    MISSED = "Missed"
    LATE = "Late"


DOSE_STATUS_DISPLAY = {
    DoseStatus.TAKEN: "ใช้แล้ว",
    DoseStatus.MISSED: "พลาด",
    DoseStatus.LATE: "ใช้ช้า",
}


class MedicationDose(Base):
    """A dose the patient reported"""
    __tablename__ = "medication_doses"

    id = Column(Integer, primary_key=True, index=True)
    patient_medication_id = Column(Integer, ForeignKey("patient_medications.id"), nullable=False, index=True)
    scheduled_time = Column(DateTime, nullable=False, index=True)
    actual_time = Column(DateTime, nullable=True)
    status = Column(Enum(DoseStatus), nullable=False, default=DoseStatus.TAKEN)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    patient_medication = relationship("PatientMedication", back_populates="doses")

    @property
    def status_display(self) -> str:
        return DOSE_STATUS_DISPLAY.get(self.status, str(self.status))
