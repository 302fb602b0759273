"""
Intraocular pressure measurement model
"""
from sqlalchemy import Column, Integer, String, Text, Date, DateTime, Float, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from eyemate.core.database import Base


class IOPRecord(Base):
    """One IOP measurement (mmHg) for both eyes"""
    __tablename__ = "iop_records"

    id = Column(Integer, primary_key=True, index=True)
    patient_id = Column(Integer, ForeignKey("patients.id"), nullable=False, index=True)
    measured_date = Column(Date, nullable=False)
    left_eye_iop = Column(Float, nullable=True)
    right_eye_iop = Column(Float, nullable=True)
    target_iop_left = Column(Float, nullable=True)
    target_iop_right = Column(Float, nullable=True)
    measurement_method = Column(String(100), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    patient = relationship("Patient", back_populates="iop_records")

    def is_high(self, threshold: float) -> bool:
        """Either eye above ``threshold``"""
        return any(
            value is not None and value > threshold
            for value in (self.left_eye_iop, self.right_eye_iop)
        )
