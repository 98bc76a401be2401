"""Notification API router: the caller's own notifications only."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from core.logger import get_logger
from core.security import get_current_user
from database import models
from database.deps import get_db_read, get_db_write
from schemas import MessageResponse, NotificationPage, NotificationResponse
from services import notification_service

logger = get_logger("api.notifications")
router = APIRouter(prefix="/api/notifications", tags=["notifications"])


@router.get("", response_model=NotificationPage)
def list_notifications(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db_read),
):
    return notification_service.list_notifications(db, user.id, page, limit)


@router.put("/read-all", response_model=MessageResponse)
def mark_all_as_read(user: models.User = Depends(get_current_user), db: Session = Depends(get_db_write)):
    return notification_service.mark_all_as_read(db, user.id)


@router.put("/{notification_id}/read", response_model=NotificationResponse)
def mark_as_read(notification_id: int, user: models.User = Depends(get_current_user), db: Session = Depends(get_db_write)):
    return notification_service.mark_as_read(db, user.id, notification_id)


@router.delete("/{notification_id}", response_model=MessageResponse)
def delete_notification(
    notification_id: int,
    user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db_write),
):
    return notification_service.delete_notification(db, user.id, notification_id)


@router.delete("", response_model=MessageResponse)
def clear_all(user: models.User = Depends(get_current_user), db: Session = Depends(get_db_write)):
    """Delete every notification the caller owns."""
    return notification_service.clear_all(db, user.id)
