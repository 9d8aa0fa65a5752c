# File: pmtool/services/notification_service.py
"""
Notification service for PMTool.

Notifications are stored per user and pushed in real time to every WebSocket
the recipient has open. Services create notifications from worker threads,
so pushes are scheduled onto the event loop that owns each socket.
"""

import asyncio
import logging
import threading
from typing import Any, Dict, List, Optional, Set

from fastapi import WebSocket
from sqlalchemy.orm import Session

from pmtool.core.exceptions import EntityNotFoundException
from pmtool.db.models.notification import Notification
from pmtool.repositories.notification_repository import NotificationRepository
from pmtool.services.base_service import BaseService

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Tracks open notification sockets per user id."""

    def __init__(self):
        self.active_connections: Dict[str, Dict[WebSocket, asyncio.AbstractEventLoop]] = {}
        self._lock = threading.Lock()
        # Strong references to scheduled sends until they finish
        self._pending: Set[asyncio.Task] = set()

    async def connect(self, user_id: str, websocket: WebSocket) -> None:
        await websocket.accept()
        loop = asyncio.get_running_loop()
        with self._lock:
            self.active_connections.setdefault(user_id, {})[websocket] = loop
        logger.info(f"Notification socket opened for user {user_id}")

    def disconnect(self, user_id: str, websocket: WebSocket) -> None:
        with self._lock:
            sockets = self.active_connections.get(user_id)
            if sockets is None:
                return
            sockets.pop(websocket, None)
            if not sockets:
                del self.active_connections[user_id]
        logger.info(f"Notification socket closed for user {user_id}")

    def connection_count(self, user_id: str) -> int:
        with self._lock:
            return len(self.active_connections.get(user_id, {}))

    async def send_to_user(self, user_id: str, message: Dict[str, Any]) -> int:
        """
        Send a JSON message to every socket of the user on the current loop.

        Sockets that fail to send are dropped.

        Returns:
            Number of sockets the message was delivered to
        """
        loop = asyncio.get_running_loop()
        with self._lock:
            targets = [
                ws for ws, ws_loop in self.active_connections.get(user_id, {}).items()
                if ws_loop is loop
            ]
        delivered = 0
        for websocket in targets:
            try:
                await websocket.send_json(message)
                delivered += 1
            except Exception as e:
                logger.warning(f"Dropping notification socket of user {user_id}: {e}")
                self.disconnect(user_id, websocket)
        return delivered

    def notify(self, user_id: str, message: Dict[str, Any]) -> None:
        """
        Schedule a push to the user's sockets from synchronous code.

        Each socket's own event loop performs the send.
        """
        with self._lock:
            loops = set(self.active_connections.get(user_id, {}).values())
        if not loops:
            return

        try:
            current = asyncio.get_running_loop()
        except RuntimeError:
            current = None

        for loop in loops:
            if loop is current:
                task = loop.create_task(self.send_to_user(user_id, message))
                self._pending.add(task)
                task.add_done_callback(self._pending.discard)
            elif loop.is_running():
                asyncio.run_coroutine_threadsafe(self.send_to_user(user_id, message), loop)


# Process-wide socket registry
connection_manager = ConnectionManager()


class NotificationService(BaseService[Notification]):
    """
    Service for creating and reading user notifications.
    """

    repository: NotificationRepository

    def __init__(
        self,
        session: Session,
        repository: Optional[NotificationRepository] = None,
        manager: Optional[ConnectionManager] = None,
    ):
        super().__init__(session, repository=repository or NotificationRepository(session))
        self.manager = manager if manager is not None else connection_manager

    def create_notification(self, user_id: str, message: str) -> Notification:
        """
        Store a notification and push it to the user's open sockets.

        Args:
            user_id: Recipient
            message: One-line notification text

        Returns:
            The stored notification
        """
        with self.transaction():
            notification = self.repository.create({"user_id": user_id, "message": message})

        self._log_operation("create", "Notification", notification.id, user_id=user_id)
        self.manager.notify(
            user_id,
            {
                "type": "notification",
                "id": notification.id,
                "message": notification.message,
                "read": notification.read,
                "created_at": notification.created_at.isoformat() if notification.created_at else None,
            },
        )
        return notification

    def list_for_user(self, user_id: str, skip: int = 0, limit: int = 100) -> List[Notification]:
        return self.repository.list_for_user(user_id, skip=skip, limit=limit)

    def mark_as_read(self, notification_id: str, user_id: str) -> Notification:
        """
        Mark one of the user's notifications as read.

        Raises:
            EntityNotFoundException: If the notification does not exist or
                belongs to another user
        """
        notification = self.repository.get_by_id(notification_id)
        if notification is None or notification.user_id != user_id:
            raise EntityNotFoundException("Notification", notification_id)

        with self.transaction():
            notification = self.repository.update(notification_id, {"read": True})
        return notification

    def mark_all_as_read(self, user_id: str) -> int:
        with self.transaction():
            updated = self.repository.mark_all_read(user_id)
        self._log_operation("mark_all_read", "Notification", user_id=user_id, details={"updated": updated})
        return updated
