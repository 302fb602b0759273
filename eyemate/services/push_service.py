"""
Push notification dispatch over Web Push
"""
from dataclasses import dataclass
from datetime import date, time
from typing import Optional, List
import enum
import json
import logging

from pywebpush import webpush, WebPushException
from sqlalchemy.orm import Session

from eyemate.core.clock import Clock, local_now
from eyemate.core.config import get_settings
from eyemate.models.notification import (
    Notification,
    NotificationPriority,
    NotificationStatus,
    NotificationType,
)
from eyemate.models.push_subscription import PushSubscription

logger = logging.getLogger(__name__)

settings = get_settings()

# Status codes push services return for subscriptions that no longer exist
GONE_STATUS_CODES = (404, 410)


class DeliveryStatus(str, enum.Enum):
    OK = "ok"
    GONE = "gone"
    ERROR = "error"


class PushGateway:
    """Delivers one payload to one push endpoint"""

    def deliver(self, endpoint: str, keys: dict, payload: dict) -> DeliveryStatus:
        raise NotImplementedError


class WebPushGateway(PushGateway):
    """Gateway backed by pywebpush and the VAPID keys from settings"""

    def __init__(self, private_key: Optional[str] = None, claims_email: Optional[str] = None):
        self.private_key = private_key or settings.VAPID_PRIVATE_KEY
        self.claims_email = claims_email or settings.VAPID_CLAIMS_EMAIL

    def deliver(self, endpoint: str, keys: dict, payload: dict) -> DeliveryStatus:
        try:
            webpush(
                subscription_info={"endpoint": endpoint, "keys": keys},
                data=json.dumps(payload, default=str),
                vapid_private_key=self.private_key,
                vapid_claims={"sub": self.claims_email},
            )
            return DeliveryStatus.OK
        except WebPushException as e:
            status_code = getattr(e.response, "status_code", None)
            if status_code in GONE_STATUS_CODES:
                return DeliveryStatus.GONE
            logger.warning(f"Push delivery failed ({status_code}): {e}")
            return DeliveryStatus.ERROR
        except Exception as e:
            logger.warning(f"Push delivery error: {e}")
            return DeliveryStatus.ERROR


@dataclass
class PushResult:
    sent: int = 0
    failed: int = 0

    def to_dict(self) -> dict:
        return {"sent": self.sent, "failed": self.failed}


def format_thai_date(value: date) -> str:
    """d/m/yyyy in the Buddhist calendar, as the app displays dates"""
    return f"{value.day}/{value.month}/{value.year + 543}"


def format_time(value: time) -> str:
    return value.strftime("%H:%M")


def appointment_message(days_until: int, appointment_date: date, appointment_time: time) -> tuple:
    """Localized (title, body) for an appointment reminder"""
    at = format_time(appointment_time)
    if days_until == 0:
        return "นัดหมายแพทย์วันนี้", f"คุณมีนัดพบแพทย์วันนี้เวลา {at}"
    if days_until == 1:
        return "นัดหมายแพทย์พรุ่งนี้", f"คุณมีนัดพบแพทย์พรุ่งนี้เวลา {at}"
    return (
        "แจ้งเตือนนัดหมายแพทย์",
        f"คุณมีนัดพบแพทย์อีก {days_until} วัน ({format_thai_date(appointment_date)} เวลา {at})",
    )


class PushService:
    """
    Sends push notifications to every active subscription of a user.

    Bookkeeping (last_sent_at, deactivation, the delivery log row) is
    committed here, so callers commit their own pending work before
    dispatching.
    """

    def __init__(self, db: Session, gateway: Optional[PushGateway] = None, clock: Clock = local_now):
        self.db = db
        self.gateway = gateway or WebPushGateway()
        self.clock = clock

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def get_active_subscriptions(self, user_id: int) -> List[PushSubscription]:
        return self.db.query(PushSubscription).filter(
            PushSubscription.user_id == user_id,
            PushSubscription.is_active.is_(True)
        ).order_by(PushSubscription.id).all()

    def subscribe(self, user_id: int, endpoint: str, p256dh: str, auth: str) -> PushSubscription:
        """Register an endpoint, reactivating it when already known"""
        subscription = self.db.query(PushSubscription).filter(
            PushSubscription.user_id == user_id,
            PushSubscription.endpoint == endpoint
        ).first()

        if subscription:
            subscription.p256dh_key = p256dh
            subscription.auth_key = auth
            subscription.is_active = True
        else:
            subscription = PushSubscription(
                user_id=user_id,
                endpoint=endpoint,
                p256dh_key=p256dh,
                auth_key=auth,
                is_active=True,
            )
            self.db.add(subscription)

        self.db.commit()
        self.db.refresh(subscription)
        logger.info(f"Push subscription {subscription.id} active for user {user_id}")
        return subscription

    def unsubscribe(self, user_id: int, endpoint: str) -> bool:
        updated = self.db.query(PushSubscription).filter(
            PushSubscription.user_id == user_id,
            PushSubscription.endpoint == endpoint
        ).update({"is_active": False}, synchronize_session=False)
        self.db.commit()
        return updated > 0

    def active_subscription_count(self, user_id: int) -> int:
        return self.db.query(PushSubscription).filter(
            PushSubscription.user_id == user_id,
            PushSubscription.is_active.is_(True)
        ).count()

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def build_payload(self, title: str, body: str, data: Optional[dict] = None) -> dict:
        now = self.clock()
        return {
            "title": title,
            "body": body,
            "icon": settings.PUSH_ICON,
            "badge": settings.PUSH_BADGE,
            "data": {
                "url": "/dashboard",
                "timestamp": int(now.timestamp() * 1000),
                **(data or {}),
            },
        }

    def send_push_notification(
            self,
            user_id: int,
            title: str,
            body: str,
            data: Optional[dict] = None
    ) -> PushResult:
        """
        Deliver to all active subscriptions of ``user_id``.

        Never raises. Gone endpoints are deactivated, transient failures
        are only counted.
        """
        try:
            subscriptions = self.get_active_subscriptions(user_id)
            if not subscriptions:
                logger.info(f"No active push subscriptions for user {user_id}")
                return PushResult()

            payload = self.build_payload(title, body, data)
            result = PushResult()

            for subscription in subscriptions:
                outcome = self._deliver(subscription, payload)

                if outcome == DeliveryStatus.OK:
                    result.sent += 1
                    subscription.last_sent_at = self.clock()
                    continue

                result.failed += 1
                if outcome == DeliveryStatus.GONE:
                    subscription.is_active = False
                    logger.info(f"Deactivated gone push subscription {subscription.id}")
                else:
                    logger.warning(f"Push to subscription {subscription.id} failed")

            self._log_delivery(user_id, title, body, result)
            self.db.commit()
            return result

        except Exception as e:
            self.db.rollback()
            logger.error(f"Send push notification error for user {user_id}: {e}")
            return PushResult(sent=0, failed=1)

    def _deliver(self, subscription: PushSubscription, payload: dict) -> DeliveryStatus:
        """One delivery attempt; a gateway exception counts as a transient error"""
        try:
            return self.gateway.deliver(subscription.endpoint, subscription.keys, payload)
        except Exception as e:
            logger.warning(f"Push gateway error for subscription {subscription.id}: {e}")
            return DeliveryStatus.ERROR

    def _log_delivery(self, user_id: int, title: str, body: str, result: PushResult):
        status = NotificationStatus.SENT if result.sent > 0 else NotificationStatus.FAILED
        self.db.add(Notification(
            recipient_id=user_id,
            type=NotificationType.PUSH_NOTIFICATION.value,
            title=title,
            message=body,
            priority=NotificationPriority.MEDIUM.value,
            status=status.value,
            sent_at=self.clock(),
        ))

    # ------------------------------------------------------------------
    # Typed senders
    # ------------------------------------------------------------------

    def send_medication_reminder(self, user_id: int, medication_name: str, reminder_time: time) -> PushResult:
        return self.send_push_notification(
            user_id,
            "เวลาหยอดยาตา",
            f"ถึงเวลาหยอดยา {medication_name} แล้ว",
            {
                "type": NotificationType.MEDICATION_REMINDER.value,
                "medicationName": medication_name,
                "reminderTime": format_time(reminder_time),
                "url": "/medications",
            }
        )

    def send_appointment_reminder(
            self,
            user_id: int,
            appointment_date: date,
            appointment_time: time,
            days_until: int
    ) -> PushResult:
        title, body = appointment_message(days_until, appointment_date, appointment_time)
        return self.send_push_notification(
            user_id,
            title,
            body,
            {
                "type": NotificationType.APPOINTMENT_REMINDER.value,
                "appointmentDate": appointment_date.isoformat(),
                "appointmentTime": format_time(appointment_time),
                "daysUntil": days_until,
                "url": "/appointments",
            }
        )

    def send_high_iop_alert(
            self,
            user_id: int,
            left_eye_iop: Optional[float],
            right_eye_iop: Optional[float]
    ) -> PushResult:
        return self.send_push_notification(
            user_id,
            "ค่าความดันลูกตาสูง",
            "ค่าความดันลูกตาของคุณสูงกว่าปกติ กรุณาติดต่อแพทย์",
            {
                "type": NotificationType.HIGH_IOP_ALERT.value,
                "leftEyeIOP": left_eye_iop,
                "rightEyeIOP": right_eye_iop,
                "url": "/iop-analytics",
            }
        )
