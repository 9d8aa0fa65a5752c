# File: pmtool/api/endpoints/notifications.py
"""
Notification endpoints for PMTool, including the real-time WebSocket feed.
"""

import logging
from typing import Any, List

from fastapi import APIRouter, Depends, HTTPException, Path, Query, WebSocket, WebSocketDisconnect, status
from sqlalchemy.orm import Session

from pmtool.api.deps import get_current_active_user, get_notification_service, resolve_user_from_token
from pmtool.core.exceptions import EntityNotFoundException
from pmtool.db.models.user import User
from pmtool.db.session import get_db
from pmtool.schemas.notification import Notification, NotificationReadAll
from pmtool.services.notification_service import NotificationService, connection_manager

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", response_model=List[Notification])
def list_notifications(
    *,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    current_user: User = Depends(get_current_active_user),
    notification_service: NotificationService = Depends(get_notification_service),
) -> Any:
    """The current user's notifications, newest first."""
    return notification_service.list_for_user(current_user.id, skip=skip, limit=limit)


@router.put("/read-all", response_model=NotificationReadAll)
def mark_all_notifications_read(
    *,
    current_user: User = Depends(get_current_active_user),
    notification_service: NotificationService = Depends(get_notification_service),
) -> Any:
    return {"updated": notification_service.mark_all_as_read(current_user.id)}


@router.put("/{notification_id}/read", response_model=Notification)
def mark_notification_read(
    *,
    notification_id: str = Path(..., description="The notification to mark as read"),
    current_user: User = Depends(get_current_active_user),
    notification_service: NotificationService = Depends(get_notification_service),
) -> Any:
    try:
        return notification_service.mark_as_read(notification_id, current_user.id)
    except EntityNotFoundException:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Notification with ID {notification_id} not found",
        )


@router.websocket("/ws")
async def notifications_ws(
    websocket: WebSocket,
    token: str = Query(...),
    db: Session = Depends(get_db),
):
    """
    Push notifications to the authenticated user as they are created.

    Messages are JSON objects with ``"type": "notification"``.
    """
    user = resolve_user_from_token(db, token)
    if user is None or not user.is_active:
        db.close()
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return
    user_id = user.id
    # Return the connection to the pool before the receive loop
    db.close()

    await connection_manager.connect(user_id, websocket)
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        logger.debug(f"Notification socket of user {user_id} disconnected")
    finally:
        connection_manager.disconnect(user_id, websocket)
