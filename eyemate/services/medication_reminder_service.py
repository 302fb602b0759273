"""
Medication reminder firing rules
"""
from datetime import date, datetime, time, timedelta
from typing import List, Optional
import logging

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from eyemate.core.clock import Clock, local_now
from eyemate.core.config import get_settings
from eyemate.models.medication_dose import MedicationDose, DoseStatus
from eyemate.models.medication_reminder import (
    MedicationReminder,
    MedicationReminderLog,
    ReminderStatus,
)
from eyemate.models.notification import NotificationPriority, NotificationType
from eyemate.services.ledger import claim_once
from eyemate.services.notification_service import NotificationService
from eyemate.services.push_service import PushService

logger = logging.getLogger(__name__)

settings = get_settings()


def taken_dose_exists(day: date):
    """Correlated EXISTS: the reminder's medication has a Taken dose on ``day``"""
    start = datetime.combine(day, time.min)
    return select(MedicationDose.id).where(
        MedicationDose.patient_medication_id == MedicationReminder.patient_medication_id,
        MedicationDose.status == DoseStatus.TAKEN,
        MedicationDose.scheduled_time >= start,
        MedicationDose.scheduled_time < start + timedelta(days=1),
    ).correlate(MedicationReminder).exists()


class MedicationReminderService:
    """
    Upcoming and missed medication checks.

    A reminder fires on time of day, not date: it is Pending until the
    patient responds (Sent) or the missed check gives up on it (Missed),
    and the daily rollover makes it Pending again.
    """

    def __init__(
            self,
            db: Session,
            push_service: PushService,
            clock: Clock = local_now,
            grace_minutes: Optional[int] = None
    ):
        self.db = db
        self.push = push_service
        self.clock = clock
        self.notifications = NotificationService(db, clock)
        self.grace = timedelta(minutes=settings.MISSED_MEDICATION_GRACE_MINUTES if grace_minutes is None else grace_minutes)

    def find_upcoming(self, now: datetime) -> List[MedicationReminder]:
        """Pending reminders due in the minute of ``now`` with no Taken dose today"""
        minute_start = now.time().replace(second=0, microsecond=0)
        minute_end = minute_start.replace(second=59, microsecond=999999)

        return self.db.query(MedicationReminder).filter(
            MedicationReminder.status == ReminderStatus.PENDING,
            MedicationReminder.reminder_time >= minute_start,
            MedicationReminder.reminder_time <= minute_end,
            ~taken_dose_exists(now.date()),
        ).order_by(MedicationReminder.id).all()

    def find_missed(self, now: datetime) -> List[MedicationReminder]:
        """Pending reminders more than the grace period late today with no Taken dose"""
        cutoff = now - self.grace
        if cutoff.date() != now.date():
            # too early in the day for anything to be that late
            return []

        return self.db.query(MedicationReminder).filter(
            MedicationReminder.status == ReminderStatus.PENDING,
            MedicationReminder.reminder_time < cutoff.time(),
            ~taken_dose_exists(now.date()),
        ).order_by(MedicationReminder.id).all()

    def check_upcoming(self) -> int:
        """Push on-time reminders; returns how many reminders fired"""
        now = self.clock()
        reminders = self.find_upcoming(now)
        fired = 0

        for reminder in reminders:
            try:
                if self._send_upcoming(reminder, now):
                    fired += 1
            except Exception as e:
                self.db.rollback()
                logger.error(f"Upcoming reminder {reminder.id} failed: {e}")

        logger.info(f"✅ Sent {fired} of {len(reminders)} medication reminders")
        return fired

    def _send_upcoming(self, reminder: MedicationReminder, now: datetime) -> bool:
        owner = self._owner_user_id(reminder)
        if owner is None:
            return False

        entry = MedicationReminderLog(reminder_id=reminder.id, reminder_date=now.date(), sent_at=now)
        if not claim_once(self.db, entry):
            return False

        self.push.send_medication_reminder(owner, reminder.patient_medication.name, reminder.reminder_time)
        logger.info(f"🔔 Sent reminder {reminder.id} to user {owner}")
        return True

    def check_missed(self) -> int:
        """Mark late reminders Missed and alert the patient"""
        now = self.clock()
        reminders = self.find_missed(now)
        marked = 0

        for reminder in reminders:
            try:
                if self._mark_missed(reminder, now):
                    marked += 1
            except Exception as e:
                self.db.rollback()
                logger.error(f"Missed reminder {reminder.id} failed: {e}")

        logger.info(f"✅ Processed {marked} missed medication reminders")
        return marked

    def _mark_missed(self, reminder: MedicationReminder, now: datetime) -> bool:
        owner = self._owner_user_id(reminder)
        if owner is None:
            return False
        name = reminder.patient_medication.name

        # Pending -> Missed only if still Pending and still untaken
        result = self.db.execute(
            update(MedicationReminder)
            .where(
                MedicationReminder.id == reminder.id,
                MedicationReminder.status == ReminderStatus.PENDING,
                ~taken_dose_exists(now.date()),
            )
            .values(status=ReminderStatus.MISSED)
            .execution_options(synchronize_session=False)
        )
        self.db.commit()
        if result.rowcount != 1:
            return False

        self.push.send_medication_reminder(owner, name, reminder.reminder_time)
        self.notifications.add(
            owner,
            NotificationType.MISSED_MEDICATION,
            "ยังไม่ได้หยอดยา",
            f"ยังไม่ได้หยอดยา {name} ตามเวลาที่กำหนด",
            NotificationPriority.HIGH,
        )
        self.db.commit()
        return True

    def reset_daily(self) -> int:
        """Return Sent and Missed reminders to Pending for the new day"""
        result = self.db.execute(
            update(MedicationReminder)
            .where(MedicationReminder.status.in_([ReminderStatus.SENT, ReminderStatus.MISSED]))
            .values(status=ReminderStatus.PENDING)
            .execution_options(synchronize_session=False)
        )
        self.db.commit()
        logger.info(f"🔄 Reset {result.rowcount} medication reminders to Pending")
        return result.rowcount

    def _owner_user_id(self, reminder: MedicationReminder) -> Optional[int]:
        patient_medication = reminder.patient_medication
        if patient_medication is None or patient_medication.patient is None:
            logger.warning(f"Reminder {reminder.id} has no patient medication owner, skipping")
            return None
        return patient_medication.patient.user_id
