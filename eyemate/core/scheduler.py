"""
Background reminder scheduler.

Every job opens its own session, runs one sweep to completion and closes
the session. Failures are logged and left to the next tick: there is no
retry inside a run, the cadence is the retry policy.
"""
from typing import Callable, Optional
import logging

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from sqlalchemy.orm import Session

from eyemate.core.clock import Clock, local_now, local_timezone
from eyemate.core.database import SessionLocal
from eyemate.services.appointment_reminder_service import AppointmentReminderService
from eyemate.services.medication_reminder_service import MedicationReminderService
from eyemate.services.push_service import PushGateway, PushService, WebPushGateway

logger = logging.getLogger(__name__)


class ReminderScheduler:
    """Owns the periodic medication and appointment reminder jobs"""

    def __init__(
            self,
            session_factory: Callable[[], Session] = SessionLocal,
            gateway: Optional[PushGateway] = None,
            clock: Clock = local_now,
            timezone=None
    ):
        self.session_factory = session_factory
        self.gateway = gateway or WebPushGateway()
        self.clock = clock
        self.timezone = timezone or local_timezone()
        self._scheduler: Optional[BackgroundScheduler] = None

    @property
    def running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    def start(self):
        if self.running:
            return

        self._scheduler = BackgroundScheduler(timezone=self.timezone)
        jobs = [
            ("medication_upcoming", self.run_upcoming_medications, CronTrigger(minute="*", timezone=self.timezone)),
            ("medication_missed", self.run_missed_medications, CronTrigger(minute="*/15", timezone=self.timezone)),
            ("medication_rollover", self.run_medication_rollover, CronTrigger(hour=0, minute=0, timezone=self.timezone)),
            ("appointment_upcoming", self.run_upcoming_appointments, CronTrigger(minute=0, timezone=self.timezone)),
            ("appointment_overdue", self.run_overdue_appointments, CronTrigger(hour="*/6", minute=0, timezone=self.timezone)),
        ]
        for job_id, func, trigger in jobs:
            self._scheduler.add_job(
                func,
                trigger=trigger,
                id=job_id,
                replace_existing=True,
                max_instances=1,
                coalesce=True,
            )

        self._scheduler.start()
        logger.info(f"🔔 Reminder scheduler started ({len(jobs)} jobs, {self.timezone})")

    def stop(self):
        if not self.running:
            return
        self._scheduler.shutdown(wait=False)
        self._scheduler = None
        logger.info("🛑 Reminder scheduler stopped")

    # ------------------------------------------------------------------
    # Job bodies, callable directly for tests and manual runs
    # ------------------------------------------------------------------

    def run_upcoming_medications(self) -> int:
        return self._run("medication_upcoming", lambda db, push: MedicationReminderService(db, push, self.clock).check_upcoming())

    def run_missed_medications(self) -> int:
        return self._run("medication_missed", lambda db, push: MedicationReminderService(db, push, self.clock).check_missed())

    def run_medication_rollover(self) -> int:
        return self._run("medication_rollover", lambda db, push: MedicationReminderService(db, push, self.clock).reset_daily())

    def run_upcoming_appointments(self) -> int:
        return self._run("appointment_upcoming", lambda db, push: AppointmentReminderService(db, push, self.clock).check_upcoming())

    def run_overdue_appointments(self) -> int:
        return self._run("appointment_overdue", lambda db, push: AppointmentReminderService(db, push, self.clock).check_overdue())

    def _run(self, name: str, job) -> int:
        db = self.session_factory()
        try:
            push = PushService(db, self.gateway, self.clock)
            return job(db, push)
        except Exception:
            db.rollback()
            logger.exception(f"Scheduler job {name} failed")
            return 0
        finally:
            db.close()
