# eyemate/models/__init__.py

from .user import User, UserRole
from .patient import Patient
from .iop_record import IOPRecord
from .medication import Medication, PatientMedication, PatientMedicationStatus, Eye
from .medication_reminder import MedicationReminder, MedicationReminderLog, ReminderStatus
from .medication_dose import MedicationDose, DoseStatus
from .appointment import (
    Appointment,
    AppointmentStatus,
    AppointmentReminderLog,
    ReminderType,
    RescheduleRequest,
    RescheduleStatus,
)
from .notification import Notification, NotificationType, NotificationPriority, NotificationStatus
from .push_subscription import PushSubscription
from .document import MedicalDocument

__all__ = [
    "User",
    "UserRole",
    "Patient",
    "IOPRecord",
    "Medication",
    "PatientMedication",
    "PatientMedicationStatus",
    "Eye",
    "MedicationReminder",
    "MedicationReminderLog",
    "ReminderStatus",
    "MedicationDose",
    "DoseStatus",
    "Appointment",
    "AppointmentStatus",
    "AppointmentReminderLog",
    "ReminderType",
    "RescheduleRequest",
    "RescheduleStatus",
    "Notification",
    "NotificationType",
    "NotificationPriority",
    "NotificationStatus",
    "PushSubscription",
    "MedicalDocument",
]
