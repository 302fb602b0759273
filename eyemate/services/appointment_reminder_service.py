"""
Appointment reminder firing rules and the missed appointment sweep
"""
from datetime import datetime, timedelta
from typing import List, Optional
import logging

from sqlalchemy import update
from sqlalchemy.orm import Session

from eyemate.core.clock import Clock, local_now
from eyemate.core.config import get_settings
from eyemate.models.appointment import (
    Appointment,
    AppointmentReminderLog,
    AppointmentStatus,
    ReminderType,
)
from eyemate.models.notification import NotificationPriority, NotificationType
from eyemate.services.ledger import claim_once
from eyemate.services.notification_service import NotificationService
from eyemate.services.push_service import PushService, appointment_message

logger = logging.getLogger(__name__)

settings = get_settings()

# days until the appointment -> (local hour it fires at, reminder type)
REMINDER_SCHEDULE = {
    0: (8, ReminderType.SAME_DAY),
    1: (18, ReminderType.NEXT_DAY),
    3: (9, ReminderType.THREE_DAYS),
}

LOOKAHEAD_DAYS = max(REMINDER_SCHEDULE)


def reminder_type_for(days_until: int, hour: int) -> Optional[ReminderType]:
    """Reminder type to fire for an appointment ``days_until`` away at ``hour``"""
    rule = REMINDER_SCHEDULE.get(days_until)
    if rule is None or rule[0] != hour:
        return None
    return rule[1]


class AppointmentReminderService:
    """Hourly appointment reminders and the 6-hourly overdue sweep"""

    def __init__(self, db: Session, push_service: PushService, clock: Clock = local_now):
        self.db = db
        self.push = push_service
        self.clock = clock
        self.notifications = NotificationService(db, clock)
        self.overdue_window = timedelta(hours=settings.OVERDUE_APPOINTMENT_WINDOW_HOURS)

    def find_upcoming(self, now: datetime) -> List[Appointment]:
        today = now.date()
        return self.db.query(Appointment).filter(
            Appointment.status == AppointmentStatus.SCHEDULED,
            Appointment.appointment_date >= today,
            Appointment.appointment_date <= today + timedelta(days=LOOKAHEAD_DAYS),
        ).order_by(Appointment.appointment_date, Appointment.appointment_time, Appointment.id).all()

    def check_upcoming(self) -> int:
        """Send the reminders whose firing window is open now"""
        now = self.clock()
        appointments = self.find_upcoming(now)
        sent = 0

        for appointment in appointments:
            days_until = (appointment.appointment_date - now.date()).days
            reminder_type = reminder_type_for(days_until, now.hour)
            if reminder_type is None:
                continue

            try:
                if self._send_reminder(appointment, reminder_type, days_until, now):
                    sent += 1
                    logger.info(f"📅 Sent {reminder_type.value} reminder for appointment {appointment.id}")
            except Exception as e:
                self.db.rollback()
                logger.error(f"Appointment reminder {appointment.id} failed: {e}")

        logger.info(f"✅ Processed {len(appointments)} appointments, sent {sent} reminders")
        return sent

    def _send_reminder(
            self,
            appointment: Appointment,
            reminder_type: ReminderType,
            days_until: int,
            now: datetime
    ) -> bool:
        owner = self._owner_user_id(appointment)
        if owner is None:
            return False

        entry = AppointmentReminderLog(
            appointment_id=appointment.id,
            reminder_type=reminder_type,
            sent_on=now.date(),
            sent_at=now,
            status="Sent",
        )
        if not claim_once(self.db, entry):
            return False

        self.push.send_appointment_reminder(
            owner,
            appointment.appointment_date,
            appointment.appointment_time,
            days_until,
        )

        title, message = appointment_message(days_until, appointment.appointment_date, appointment.appointment_time)
        self.notifications.add(
            owner,
            NotificationType.APPOINTMENT_REMINDER,
            title,
            message,
            NotificationPriority.HIGH,
        )
        self.db.commit()
        return True

    def find_overdue(self, now: datetime) -> List[Appointment]:
        """Scheduled appointments that started before ``now`` and within the window"""
        earliest = now - self.overdue_window
        candidates = self.db.query(Appointment).filter(
            Appointment.status == AppointmentStatus.SCHEDULED,
            Appointment.appointment_date >= earliest.date(),
            Appointment.appointment_date <= now.date(),
        ).order_by(Appointment.appointment_date, Appointment.appointment_time, Appointment.id).all()

        return [a for a in candidates if earliest <= a.starts_at < now]

    def check_overdue(self) -> int:
        """Mark overdue appointments Missed and notify the patient"""
        now = self.clock()
        overdue = self.find_overdue(now)
        marked = 0

        for appointment in overdue:
            try:
                if self._mark_missed(appointment, now):
                    marked += 1
                    logger.info(f"⚠️ Marked appointment {appointment.id} as missed")
            except Exception as e:
                self.db.rollback()
                logger.error(f"Overdue appointment {appointment.id} failed: {e}")

        if marked:
            logger.info(f"⚠️ Found {marked} overdue appointments")
        return marked

    def _mark_missed(self, appointment: Appointment, now: datetime) -> bool:
        owner = self._owner_user_id(appointment)
        if owner is None:
            return False

        result = self.db.execute(
            update(Appointment)
            .where(
                Appointment.id == appointment.id,
                Appointment.status == AppointmentStatus.SCHEDULED,
            )
            .values(status=AppointmentStatus.MISSED, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            self.db.rollback()
            return False

        self.notifications.add(
            owner,
            NotificationType.MISSED_APPOINTMENT,
            "นัดหมายที่พลาด",
            "คุณพลาดนัดหมายแพทย์ กรุณาติดต่อคลินิกเพื่อนัดใหม่",
            NotificationPriority.HIGH,
        )
        self.db.commit()
        return True

    def _owner_user_id(self, appointment: Appointment) -> Optional[int]:
        if appointment.patient is None:
            logger.warning(f"Appointment {appointment.id} has no patient, skipping")
            return None
        return appointment.patient.user_id
