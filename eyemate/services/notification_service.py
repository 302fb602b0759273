"""
In-app notification service
"""
from sqlalchemy.orm import Session
from typing import List, Optional

from eyemate.core.clock import Clock, local_now
from eyemate.models.notification import (
    Notification,
    NotificationPriority,
    NotificationStatus,
    NotificationType,
)

# Delivery log rows written by the push layer are not shown in the inbox
INBOX_STATUSES = (NotificationStatus.UNREAD.value, NotificationStatus.READ.value)


class NotificationService:
    """Create and read in-app notifications"""

    def __init__(self, db: Session, clock: Clock = local_now):
        self.db = db
        self.clock = clock

    def add(
            self,
            recipient_id: int,
            type: NotificationType,
            title: str,
            message: str,
            priority: NotificationPriority = NotificationPriority.MEDIUM
    ) -> Notification:
        """Stage an unread notification; the caller commits"""
        notification = Notification(
            recipient_id=recipient_id,
            type=type.value,
            title=title,
            message=message,
            priority=priority.value,
            status=NotificationStatus.UNREAD.value,
            sent_at=self.clock(),
        )
        self.db.add(notification)
        return notification

    def get_inbox(
            self,
            user_id: int,
            unread_only: bool = False,
            skip: int = 0,
            limit: int = 50
    ) -> List[Notification]:
        query = self.db.query(Notification).filter(Notification.recipient_id == user_id)

        if unread_only:
            query = query.filter(Notification.status == NotificationStatus.UNREAD.value)
        else:
            query = query.filter(Notification.status.in_(INBOX_STATUSES))

        return query.order_by(Notification.sent_at.desc(), Notification.id.desc()).offset(skip).limit(limit).all()

    def unread_count(self, user_id: int) -> int:
        return self.db.query(Notification).filter(
            Notification.recipient_id == user_id,
            Notification.status == NotificationStatus.UNREAD.value
        ).count()

    def mark_read(self, user_id: int, notification_id: int) -> Optional[Notification]:
        notification = self.db.query(Notification).filter(
            Notification.id == notification_id,
            Notification.recipient_id == user_id
        ).first()
        if not notification:
            return None

        if notification.status == NotificationStatus.UNREAD.value:
            notification.status = NotificationStatus.READ.value
            notification.read_at = self.clock()
            self.db.commit()
            self.db.refresh(notification)

        return notification
