"""
Pydantic schemas for notifications and push subscriptions
"""
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class NotificationResponse(BaseModel):
    id: int
    type: str
    title: str
    message: str
    priority: str
    status: str
    sent_at: datetime
    read_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class SubscriptionKeys(BaseModel):
    p256dh: str
    auth: str


class PushSubscriptionData(BaseModel):
    endpoint: str = Field(..., min_length=1, max_length=500)
    keys: SubscriptionKeys


class SubscribeRequest(BaseModel):
    subscription: PushSubscriptionData


class UnsubscribeRequest(BaseModel):
    endpoint: str = Field(..., min_length=1)


class TestPushRequest(BaseModel):
    title: str = "ทดสอบการแจ้งเตือน"
    body: str = "นี่คือการแจ้งเตือนทดสอบ"


class PushStatus(BaseModel):
    enabled: bool
    active_subscriptions: int
