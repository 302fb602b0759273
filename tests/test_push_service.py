from datetime import date, time

from eyemate.models import Notification, NotificationStatus, PushSubscription
from eyemate.services.push_service import (
    DeliveryStatus,
    PushService,
    appointment_message,
    format_thai_date,
)

from conftest import NOW


def test_no_subscriptions_sends_nothing(db, factory, push_service, gateway):
    user = factory.user()

    result = push_service.send_push_notification(user.id, "title", "body")

    assert result.to_dict() == {"sent": 0, "failed": 0}
    assert gateway.deliveries == []
    assert db.query(Notification).count() == 0


def test_gone_subscription_is_deactivated_without_affecting_others(db, factory, push_service, gateway):
    user = factory.user()
    healthy = factory.subscription(user, endpoint="https://push.example.com/ok")
    gone = factory.subscription(user, endpoint="https://push.example.com/gone")
    gateway.outcomes[gone.endpoint] = DeliveryStatus.GONE

    result = push_service.send_push_notification(user.id, "เวลาหยอดยาตา", "body")

    assert (result.sent, result.failed) == (1, 1)
    db.refresh(healthy)
    db.refresh(gone)
    assert healthy.is_active and healthy.last_sent_at == NOW
    assert not gone.is_active
    assert gone.last_sent_at is None

    log = db.query(Notification).one()
    assert log.status == NotificationStatus.SENT.value
    assert log.type == "push_notification"


def test_transient_failure_keeps_subscription_active(db, factory, push_service, gateway):
    user = factory.user()
    subscription = factory.subscription(user)
    gateway.outcomes[subscription.endpoint] = DeliveryStatus.ERROR

    result = push_service.send_push_notification(user.id, "title", "body")

    assert (result.sent, result.failed) == (0, 1)
    db.refresh(subscription)
    assert subscription.is_active
    assert db.query(Notification).one().status == NotificationStatus.FAILED.value


def test_inactive_subscriptions_are_skipped(factory, push_service, gateway):
    user = factory.user()
    factory.subscription(user, is_active=False)

    result = push_service.send_push_notification(user.id, "title", "body")

    assert result.sent == 0
    assert gateway.deliveries == []


def test_gateway_exception_is_reported_as_failure(db, factory, clock):
    class ExplodingGateway:
        def deliver(self, endpoint, keys, payload):
            raise RuntimeError("network down")

    user = factory.user()
    factory.subscription(user)

    result = PushService(db, ExplodingGateway(), clock).send_push_notification(user.id, "title", "body")

    assert (result.sent, result.failed) == (0, 1)
    assert db.query(Notification).one().status == NotificationStatus.FAILED.value


def test_gateway_exception_does_not_stop_other_deliveries(db, factory, clock):
    class FlakyGateway:
        def __init__(self):
            self.attempted = []

        def deliver(self, endpoint, keys, payload):
            self.attempted.append(endpoint)
            if endpoint.endswith("/bad"):
                raise RuntimeError("connection reset")
            return DeliveryStatus.OK

    user = factory.user()
    first = factory.subscription(user, endpoint="https://push.example.com/1")
    bad = factory.subscription(user, endpoint="https://push.example.com/bad")
    third = factory.subscription(user, endpoint="https://push.example.com/3")
    gateway = FlakyGateway()

    result = PushService(db, gateway, clock).send_push_notification(user.id, "title", "body")

    assert (result.sent, result.failed) == (2, 1)
    assert gateway.attempted == [first.endpoint, bad.endpoint, third.endpoint]
    for subscription in (first, bad, third):
        db.refresh(subscription)
    assert first.last_sent_at == NOW and third.last_sent_at == NOW
    assert bad.is_active and bad.last_sent_at is None
    log = db.query(Notification).one()
    assert log.status == NotificationStatus.SENT.value


def test_payload_shape(factory, push_service, gateway):
    user = factory.user()
    factory.subscription(user)

    push_service.send_medication_reminder(user.id, "Latanoprost", time(20, 0))

    _, payload = gateway.deliveries[0]
    assert payload["title"] == "เวลาหยอดยาตา"
    assert "Latanoprost" in payload["body"]
    assert payload["icon"] and payload["badge"]
    assert payload["data"]["url"] == "/medications"
    assert payload["data"]["reminderTime"] == "20:00"
    assert payload["data"]["timestamp"] == int(NOW.timestamp() * 1000)


def test_subscribe_reactivates_known_endpoint(db, factory, push_service):
    user = factory.user()
    first = push_service.subscribe(user.id, "https://push.example.com/a", "k1", "a1")
    push_service.unsubscribe(user.id, "https://push.example.com/a")

    again = push_service.subscribe(user.id, "https://push.example.com/a", "k2", "a2")

    assert again.id == first.id
    assert again.is_active
    assert again.p256dh_key == "k2"
    assert db.query(PushSubscription).count() == 1
    assert push_service.active_subscription_count(user.id) == 1


def test_unsubscribe_unknown_endpoint(factory, push_service):
    user = factory.user()
    assert push_service.unsubscribe(user.id, "https://push.example.com/missing") is False


def test_thai_date_uses_buddhist_year():
    assert format_thai_date(date(2025, 3, 10)) == "10/3/2568"


def test_appointment_message_wording():
    day = date(2025, 3, 13)
    assert appointment_message(0, day, time(9, 30)) == ("นัดหมายแพทย์วันนี้", "คุณมีนัดพบแพทย์วันนี้เวลา 09:30")
    assert appointment_message(1, day, time(9, 30))[0] == "นัดหมายแพทย์พรุ่งนี้"
    title, body = appointment_message(3, day, time(9, 30))
    assert title == "แจ้งเตือนนัดหมายแพทย์"
    assert "13/3/2568" in body and "3 วัน" in body
