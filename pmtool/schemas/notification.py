# pmtool/schemas/notification.py

from datetime import datetime
from typing import Optional
from pydantic import BaseModel


class Notification(BaseModel):
    """Schema for notification responses."""

    id: str
    user_id: str
    message: str
    read: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class NotificationReadAll(BaseModel):
    updated: int
