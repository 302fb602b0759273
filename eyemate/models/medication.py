"""
Medication catalog and patient medication models
"""
from sqlalchemy import Column, Integer, String, Text, DateTime, Enum, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import enum

from eyemate.core.database import Base


class Eye(str, enum.Enum):
    LEFT = "left"
    RIGHT = "right"
    BOTH = "both"


EYE_DISPLAY = {
    Eye.LEFT: "ตาซ้าย",
    Eye.RIGHT: "ตาขวา",
    Eye.BOTH: "ทั้งสองตา",
}


class PatientMedicationStatus(str, enum.Enum):
    ACTIVE = "Active"
    DISCONTINUED = "Discontinued"


class Medication(Base):
    """Catalog entry for an eye medication"""
    __tablename__ = "medications"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    type = Column(String(100), nullable=True)
    dosage_form = Column(String(100), nullable=True)
    active_ingredient = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    side_effects = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    prescriptions = relationship("PatientMedication", back_populates="medication")

    def __repr__(self):
        return f"<Medication(id={self.id}, name='{self.name}')>"


class PatientMedication(Base):
    """A medication prescribed to a patient"""
    __tablename__ = "patient_medications"

    id = Column(Integer, primary_key=True, index=True)
    patient_id = Column(Integer, ForeignKey("patients.id"), nullable=False, index=True)
    medication_id = Column(Integer, ForeignKey("medications.id"), nullable=False)
    eye = Column(Enum(Eye), nullable=False, default=Eye.BOTH)
    dosage = Column(String(100), nullable=True)
    frequency = Column(String(100), nullable=True)
    status = Column(
        Enum(PatientMedicationStatus),
        nullable=False,
        default=PatientMedicationStatus.ACTIVE
    )

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    patient = relationship("Patient", back_populates="medications")
    medication = relationship("Medication", back_populates="prescriptions")
    reminders = relationship("MedicationReminder", back_populates="patient_medication", cascade="all, delete-orphan")
    doses = relationship("MedicationDose", back_populates="patient_medication", cascade="all, delete-orphan")

    @property
    def name(self) -> str:
        return self.medication.name if self.medication else ""

    @property
    def eye_display(self) -> str:
        return EYE_DISPLAY.get(self.eye, str(self.eye))
