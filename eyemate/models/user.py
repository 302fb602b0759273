"""
User model
"""
from sqlalchemy import Column, Integer, String, Boolean, Date, DateTime, Enum, Text
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import enum

from eyemate.core.database import Base


class UserRole(str, enum.Enum):
    """User roles"""
    ADMIN = "ADMIN"
    PATIENT = "PATIENT"


class User(Base):
    """Account that can log in to the application"""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    national_id = Column(String(13), unique=True, index=True, nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=True)
    name = Column(String(255), nullable=False)
    hashed_password = Column(String(255), nullable=False)

    role = Column(
        Enum(UserRole, name="userrole"),
        nullable=False,
        default=UserRole.PATIENT
    )

    is_active = Column(Boolean, default=True)
    phone = Column(String(20), nullable=True)
    address = Column(Text, nullable=True)
    date_of_birth = Column(Date, nullable=True)

    # Metadata
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
    last_login = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    patient = relationship("Patient", back_populates="user", uselist=False)
    push_subscriptions = relationship("PushSubscription", back_populates="user")

    def __repr__(self):
        return f"<User(id={self.id}, national_id='{self.national_id}', role='{self.role.value}')>"

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def is_patient(self) -> bool:
        return self.role == UserRole.PATIENT
