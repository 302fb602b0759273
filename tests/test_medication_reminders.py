from datetime import datetime, time

from eyemate.core.clock import fixed_clock
from eyemate.core.scheduler import ReminderScheduler
from eyemate.models import (
    DoseStatus,
    MedicationReminder,
    MedicationReminderLog,
    Notification,
    ReminderStatus,
)
from eyemate.services.medication_reminder_service import MedicationReminderService
from eyemate.services.push_service import PushService

from conftest import NOW


def service_at(db, gateway, moment):
    clock = fixed_clock(moment)
    return MedicationReminderService(db, PushService(db, gateway, clock), clock)


def status_of(db, reminder):
    db.expire_all()
    return db.get(MedicationReminder, reminder.id).status


def setup_patient(factory, subscribed=True):
    patient = factory.patient()
    if subscribed:
        factory.subscription(patient.user)
    medication = factory.medication(patient)
    return patient, medication


class TestUpcoming:

    def test_fires_in_the_reminder_minute(self, db, factory, gateway):
        _, medication = setup_patient(factory)
        reminder = factory.reminder(medication, at=time(8, 0))

        fired = service_at(db, gateway, datetime(2025, 3, 10, 8, 0, 42)).check_upcoming()

        assert fired == 1
        assert gateway.titles == ["เวลาหยอดยาตา"]
        log = db.query(MedicationReminderLog).one()
        assert (log.reminder_id, log.reminder_date) == (reminder.id, NOW.date())

    def test_other_minutes_do_not_fire(self, db, factory, gateway):
        _, medication = setup_patient(factory)
        factory.reminder(medication, at=time(8, 0))

        assert service_at(db, gateway, datetime(2025, 3, 10, 7, 59)).check_upcoming() == 0
        assert service_at(db, gateway, datetime(2025, 3, 10, 8, 1)).check_upcoming() == 0
        assert gateway.deliveries == []

    def test_repeated_run_in_same_minute_sends_once(self, db, factory, gateway):
        _, medication = setup_patient(factory)
        factory.reminder(medication, at=time(8, 0))
        service = service_at(db, gateway, NOW)

        assert service.check_upcoming() == 1
        assert service.check_upcoming() == 0
        assert len(gateway.deliveries) == 1
        assert db.query(MedicationReminderLog).count() == 1

    def test_overlapping_runs_claim_once(self, session_factory, factory, gateway):
        _, medication = setup_patient(factory)
        reminder = factory.reminder(medication, at=time(8, 0))

        first_db, second_db = session_factory(), session_factory()
        first, second = service_at(first_db, gateway, NOW), service_at(second_db, gateway, NOW)

        # both runs see the candidate before either has sent it
        assert [r.id for r in first.find_upcoming(NOW)] == [reminder.id]
        assert [r.id for r in second.find_upcoming(NOW)] == [reminder.id]

        assert first.check_upcoming() == 1
        assert second.check_upcoming() == 0

        assert len(gateway.deliveries) == 1
        assert first_db.query(MedicationReminderLog).count() == 1
        first_db.close()
        second_db.close()

    def test_taken_dose_suppresses_reminder(self, db, factory, gateway):
        _, medication = setup_patient(factory)
        factory.reminder(medication, at=time(8, 0))
        factory.dose(medication, datetime(2025, 3, 10, 7, 50), status=DoseStatus.TAKEN)

        assert service_at(db, gateway, NOW).check_upcoming() == 0
        assert gateway.deliveries == []

    def test_yesterdays_dose_does_not_suppress(self, db, factory, gateway):
        _, medication = setup_patient(factory)
        factory.reminder(medication, at=time(8, 0))
        factory.dose(medication, datetime(2025, 3, 9, 8, 0), status=DoseStatus.TAKEN)

        assert service_at(db, gateway, NOW).check_upcoming() == 1

    def test_non_pending_reminders_are_ignored(self, db, factory, gateway):
        _, medication = setup_patient(factory)
        factory.reminder(medication, at=time(8, 0), status=ReminderStatus.SENT)

        assert service_at(db, gateway, NOW).check_upcoming() == 0


class TestMissed:

    def test_zero_grace_period_is_respected(self, db, factory, gateway):
        _, medication = setup_patient(factory)
        reminder = factory.reminder(medication, at=time(8, 0))
        clock = fixed_clock(datetime(2025, 3, 10, 8, 0, 30))
        service = MedicationReminderService(db, PushService(db, gateway, clock), clock, grace_minutes=0)

        assert service.check_missed() == 1
        assert status_of(db, reminder) == ReminderStatus.MISSED

    def test_marked_missed_after_grace_period(self, db, factory, gateway):
        patient, medication = setup_patient(factory)
        reminder = factory.reminder(medication, at=time(8, 0))

        marked = service_at(db, gateway, datetime(2025, 3, 10, 8, 16)).check_missed()

        assert marked == 1
        assert status_of(db, reminder) == ReminderStatus.MISSED
        assert gateway.titles == ["เวลาหยอดยาตา"]
        alert = db.query(Notification).filter(Notification.type == "missed_medication").one()
        assert alert.recipient_id == patient.user_id
        assert alert.priority == "high"
        assert alert.status == "Unread"
        assert alert.title == "ยังไม่ได้หยอดยา"

    def test_within_grace_period_stays_pending(self, db, factory, gateway):
        _, medication = setup_patient(factory)
        reminder = factory.reminder(medication, at=time(8, 0))

        assert service_at(db, gateway, datetime(2025, 3, 10, 8, 14)).check_missed() == 0
        assert service_at(db, gateway, datetime(2025, 3, 10, 8, 15)).check_missed() == 0
        assert status_of(db, reminder) == ReminderStatus.PENDING

    def test_taken_dose_prevents_missed(self, db, factory, gateway):
        _, medication = setup_patient(factory)
        reminder = factory.reminder(medication, at=time(8, 0))
        factory.dose(medication, datetime(2025, 3, 10, 8, 5), status=DoseStatus.TAKEN)

        assert service_at(db, gateway, datetime(2025, 3, 10, 8, 30)).check_missed() == 0
        assert status_of(db, reminder) == ReminderStatus.PENDING

    def test_missed_dose_record_does_not_count_as_taken(self, db, factory, gateway):
        _, medication = setup_patient(factory)
        reminder = factory.reminder(medication, at=time(8, 0))
        factory.dose(medication, datetime(2025, 3, 10, 8, 5), status=DoseStatus.MISSED)

        assert service_at(db, gateway, datetime(2025, 3, 10, 8, 30)).check_missed() == 1
        assert status_of(db, reminder) == ReminderStatus.MISSED

    def test_only_pending_reminders_become_missed(self, db, factory, gateway):
        _, medication = setup_patient(factory)
        sent = factory.reminder(medication, at=time(8, 0), status=ReminderStatus.SENT)
        missed = factory.reminder(medication, at=time(7, 0), status=ReminderStatus.MISSED)

        assert service_at(db, gateway, datetime(2025, 3, 10, 9, 0)).check_missed() == 0
        assert status_of(db, sent) == ReminderStatus.SENT
        assert status_of(db, missed) == ReminderStatus.MISSED
        assert gateway.deliveries == []

    def test_second_sweep_does_not_repeat(self, db, factory, gateway):
        _, medication = setup_patient(factory)
        factory.reminder(medication, at=time(8, 0))

        assert service_at(db, gateway, datetime(2025, 3, 10, 8, 30)).check_missed() == 1
        assert service_at(db, gateway, datetime(2025, 3, 10, 8, 45)).check_missed() == 0
        assert len(gateway.deliveries) == 1
        assert db.query(Notification).filter(Notification.type == "missed_medication").count() == 1

    def test_no_missed_sweep_across_midnight(self, db, factory, gateway):
        _, medication = setup_patient(factory)
        reminder = factory.reminder(medication, at=time(23, 55))

        assert service_at(db, gateway, datetime(2025, 3, 11, 0, 5)).check_missed() == 0
        assert status_of(db, reminder) == ReminderStatus.PENDING

    def test_unsubscribed_patient_still_gets_inbox_alert(self, db, factory, gateway):
        _, medication = setup_patient(factory, subscribed=False)
        factory.reminder(medication, at=time(8, 0))

        assert service_at(db, gateway, datetime(2025, 3, 10, 8, 20)).check_missed() == 1
        assert gateway.deliveries == []
        types = [n.type for n in db.query(Notification).all()]
        assert types == ["missed_medication"]


def test_daily_rollover_returns_reminders_to_pending(db, factory, gateway):
    _, medication = setup_patient(factory)
    sent = factory.reminder(medication, at=time(8, 0), status=ReminderStatus.SENT)
    missed = factory.reminder(medication, at=time(20, 0), status=ReminderStatus.MISSED)
    pending = factory.reminder(medication, at=time(12, 0))

    assert service_at(db, gateway, datetime(2025, 3, 11, 0, 0)).reset_daily() == 2
    assert {status_of(db, r) for r in (sent, missed, pending)} == {ReminderStatus.PENDING}


def test_scheduler_runs_jobs_in_own_session(session_factory, factory, gateway):
    _, medication = setup_patient(factory)
    factory.reminder(medication, at=time(8, 0))
    scheduler = ReminderScheduler(session_factory=session_factory, gateway=gateway, clock=fixed_clock(NOW))

    assert scheduler.run_upcoming_medications() == 1
    assert scheduler.run_upcoming_medications() == 0
    assert not scheduler.running


def test_scheduler_job_failure_is_contained(session_factory, gateway):
    def broken_clock():
        raise RuntimeError("clock unavailable")

    scheduler = ReminderScheduler(session_factory=session_factory, gateway=gateway, clock=broken_clock)

    assert scheduler.run_missed_medications() == 0
    assert scheduler.run_overdue_appointments() == 0


def test_scheduler_registers_all_jobs(session_factory, gateway):
    scheduler = ReminderScheduler(session_factory=session_factory, gateway=gateway, clock=fixed_clock(NOW))
    scheduler.start()
    try:
        assert scheduler.running
        assert {job.id for job in scheduler._scheduler.get_jobs()} == {
            "medication_upcoming",
            "medication_missed",
            "medication_rollover",
            "appointment_upcoming",
            "appointment_overdue",
        }
    finally:
        scheduler.stop()
    assert not scheduler.running
