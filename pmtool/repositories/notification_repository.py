# File: pmtool/repositories/notification_repository.py

from typing import List

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from pmtool.db.models.notification import Notification
from pmtool.repositories.base_repository import BaseRepository


class NotificationRepository(BaseRepository[Notification]):
    """Repository for user notifications."""

    def __init__(self, session: Session):
        super().__init__(session=session, model=Notification)

    def list_for_user(self, user_id: str, skip: int = 0, limit: int = 100) -> List[Notification]:
        """Notifications of a user, newest first."""
        stmt = (
            select(Notification)
            .where(Notification.user_id == user_id)
            .order_by(Notification.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        return list(self.session.execute(stmt).scalars().all())

    def mark_all_read(self, user_id: str) -> int:
        """
        Flag every unread notification of the user as read.

        Returns:
            int: Number of notifications updated
        """
        stmt = (
            update(Notification)
            .where(Notification.user_id == user_id)
            .where(Notification.read.is_(False))
            .values(read=True)
        )
        result = self.session.execute(stmt)
        self.session.commit()
        return result.rowcount
