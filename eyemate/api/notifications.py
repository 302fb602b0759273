"""
In-app notification inbox and push subscription endpoints
"""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import List
import logging

from eyemate.core.config import get_settings
from eyemate.core.database import get_db
from eyemate.core.dependencies import (
    get_current_patient,
    get_current_user,
    get_pagination_params,
    get_push_service,
    PaginationParams
)
from eyemate.models.patient import Patient
from eyemate.models.user import User
from eyemate.schemas.notification import (
    NotificationResponse,
    PushStatus,
    SubscribeRequest,
    TestPushRequest,
    UnsubscribeRequest,
)
from eyemate.services.notification_service import NotificationService
from eyemate.services.push_service import PushService

logger = logging.getLogger(__name__)

settings = get_settings()

# Mounted under /patient
inbox_router = APIRouter()

# Mounted under /notifications
router = APIRouter()


@inbox_router.get("/notifications", response_model=List[NotificationResponse])
async def list_notifications(
        unread_only: bool = Query(False),
        pagination: PaginationParams = Depends(get_pagination_params),
        patient: Patient = Depends(get_current_patient),
        db: Session = Depends(get_db)
):
    return NotificationService(db).get_inbox(
        patient.user_id,
        unread_only=unread_only,
        skip=pagination.skip,
        limit=pagination.limit
    )


@inbox_router.put("/notifications/{notification_id}/read", response_model=NotificationResponse)
async def mark_notification_read(
        notification_id: int,
        patient: Patient = Depends(get_current_patient),
        db: Session = Depends(get_db)
):
    notification = NotificationService(db).mark_read(patient.user_id, notification_id)
    if not notification:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Notification not found"
        )
    return notification


@router.get("/vapid-public-key")
async def vapid_public_key():
    if not settings.VAPID_PUBLIC_KEY:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Push notifications are not configured"
        )
    return {"publicKey": settings.VAPID_PUBLIC_KEY}


@router.post("/subscribe")
async def subscribe(
        body: SubscribeRequest,
        current_user: User = Depends(get_current_user),
        push_service: PushService = Depends(get_push_service)
):
    """
    Register this browser for push and send a welcome notification
    """
    subscription = body.subscription
    push_service.subscribe(
        current_user.id,
        subscription.endpoint,
        subscription.keys.p256dh,
        subscription.keys.auth
    )

    result = push_service.send_push_notification(
        current_user.id,
        "การแจ้งเตือนพร้อมใช้งาน",
        "คุณจะได้รับการแจ้งเตือนการหยอดยาและนัดหมายจาก EyeMate"
    )
    logger.info(f"🔔 User {current_user.id} subscribed to push ({result.sent} welcome sent)")

    return {"success": True, "message": "Subscribed to push notifications"}


@router.post("/unsubscribe")
async def unsubscribe(
        body: UnsubscribeRequest,
        current_user: User = Depends(get_current_user),
        push_service: PushService = Depends(get_push_service)
):
    if not push_service.unsubscribe(current_user.id, body.endpoint):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Subscription not found"
        )
    return {"success": True, "message": "Unsubscribed from push notifications"}


@router.get("/status", response_model=PushStatus)
async def push_status(
        current_user: User = Depends(get_current_user),
        push_service: PushService = Depends(get_push_service)
):
    count = push_service.active_subscription_count(current_user.id)
    return {"enabled": count > 0, "active_subscriptions": count}


@router.post("/test")
async def send_test_push(
        body: TestPushRequest,
        current_user: User = Depends(get_current_user),
        push_service: PushService = Depends(get_push_service)
):
    result = push_service.send_push_notification(current_user.id, body.title, body.body)
    return {"success": result.sent > 0, **result.to_dict()}
