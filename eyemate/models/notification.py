"""
In-app notification model
"""
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship
import enum

from eyemate.core.database import Base


class NotificationType(str, enum.Enum):
    MEDICATION_REMINDER = "medication_reminder"
    MISSED_MEDICATION = "missed_medication"
    APPOINTMENT_REMINDER = "appointment_reminder"
    MISSED_APPOINTMENT = "missed_appointment"
    HIGH_IOP_ALERT = "high_iop_alert"
    PUSH_NOTIFICATION = "push_notification"


class NotificationPriority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class NotificationStatus(str, enum.Enum):
    UNREAD = "Unread"
    READ = "Read"
    # push delivery log rows
    SENT = "sent"
    FAILED = "failed"


class Notification(Base):
    """Durable record of an alert shown in the app"""
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    recipient_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    type = Column(String(50), nullable=False)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    priority = Column(String(10), nullable=False, default=NotificationPriority.MEDIUM.value)
    status = Column(String(10), nullable=False, default=NotificationStatus.UNREAD.value)
    sent_at = Column(DateTime, nullable=False)
    read_at = Column(DateTime, nullable=True)

    recipient = relationship("User")

    def __repr__(self):
        return f"<Notification(id={self.id}, type='{self.type}', status='{self.status}')>"
