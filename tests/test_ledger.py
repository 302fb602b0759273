from datetime import timedelta

from eyemate.models import MedicationReminderLog
from eyemate.services.ledger import claim_once

from conftest import NOW


def test_second_claim_for_same_day_is_refused(db, factory):
    medication = factory.medication(factory.patient())
    reminder = factory.reminder(medication)

    first = claim_once(db, MedicationReminderLog(reminder_id=reminder.id, reminder_date=NOW.date(), sent_at=NOW))
    second = claim_once(db, MedicationReminderLog(reminder_id=reminder.id, reminder_date=NOW.date(), sent_at=NOW))

    assert first is True
    assert second is False
    assert db.query(MedicationReminderLog).count() == 1


def test_session_usable_after_refused_claim(db, factory):
    medication = factory.medication(factory.patient())
    reminder = factory.reminder(medication)
    claim_once(db, MedicationReminderLog(reminder_id=reminder.id, reminder_date=NOW.date(), sent_at=NOW))
    claim_once(db, MedicationReminderLog(reminder_id=reminder.id, reminder_date=NOW.date(), sent_at=NOW))

    tomorrow = NOW.date() + timedelta(days=1)
    assert claim_once(db, MedicationReminderLog(reminder_id=reminder.id, reminder_date=tomorrow, sent_at=NOW))
    assert db.query(MedicationReminderLog).count() == 2
