"""
Patient profile model
"""
from sqlalchemy import Column, Integer, String, Date, DateTime, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from eyemate.core.database import Base


class Patient(Base):
    """Glaucoma patient profile attached to a user account"""
    __tablename__ = "patients"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False)

    # Clinical profile
    glaucoma_type = Column(String(100), nullable=True)
    glaucoma_stage = Column(String(50), nullable=True)
    date_first_diagnosed = Column(Date, nullable=True)
    primary_hospital = Column(String(255), nullable=True)

    # Insurance
    insurance_type = Column(String(100), nullable=True)
    insurance_provider = Column(String(255), nullable=True)

    # Metadata
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    user = relationship("User", back_populates="patient")
    iop_records = relationship("IOPRecord", back_populates="patient", cascade="all, delete-orphan")
    medications = relationship("PatientMedication", back_populates="patient", cascade="all, delete-orphan")
    appointments = relationship("Appointment", back_populates="patient", cascade="all, delete-orphan")
    documents = relationship("MedicalDocument", back_populates="patient", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Patient(id={self.id}, user_id={self.user_id})>"
