"""Recipient-side notification operations.

Every operation is scoped to the recipient: a user can only read, mark or
delete their own notifications.
"""

import math

from sqlalchemy import delete, update
from sqlalchemy.orm import Session

from core.exceptions import NotFoundError
from core.logger import get_logger
from core.repository import BaseRepository, atomic, count
from database import models
from schemas.notification_schema import MessageResponse, NotificationPage, NotificationResponse, Pagination
from schemas.recipe_schema import RecipeSummary
from schemas.user_schema import UserSummary

logger = get_logger("services.notification_service")


def _to_response(db: Session, notification: models.Notification) -> NotificationResponse:
    response = NotificationResponse.model_validate(notification)
    if notification.sender_id is not None:
        sender = db.get(models.User, notification.sender_id)
        response.sender = UserSummary.model_validate(sender) if sender else None
    if notification.recipe_id is not None:
        recipe = db.get(models.Recipe, notification.recipe_id)
        response.recipe = RecipeSummary.model_validate(recipe) if recipe else None
    return response


def _get_owned(db: Session, user_id: int, notification_id: int) -> models.Notification:
    notification = (
        db.query(models.Notification)
        .filter(models.Notification.id == notification_id, models.Notification.recipient_id == user_id)
        .first()
    )
    if notification is None:
        raise NotFoundError("Notification", notification_id)
    return notification


def list_notifications(db: Session, user_id: int, page: int = 1, limit: int = 20) -> NotificationPage:
    """Newest-first page of the user's notifications with the unread count."""
    query = (
        db.query(models.Notification)
        .filter(models.Notification.recipient_id == user_id)
        .order_by(models.Notification.created_at.desc(), models.Notification.id.desc())
    )
    total = query.count()
    rows = BaseRepository(models.Notification, db).page(query, page, limit)
    return NotificationPage(
        notifications=[_to_response(db, n) for n in rows],
        pagination=Pagination(page=page, limit=limit, total=total, pages=math.ceil(total / limit) if limit else 0),
        unread_count=count(db, models.Notification, recipient_id=user_id, read=False),
    )


def mark_as_read(db: Session, user_id: int, notification_id: int) -> NotificationResponse:
    notification = _get_owned(db, user_id, notification_id)
    if not notification.read:
        notification.read = True
        db.commit()
        db.refresh(notification)
    return _to_response(db, notification)


def mark_all_as_read(db: Session, user_id: int) -> MessageResponse:
    with atomic(db):
        affected = db.execute(
            update(models.Notification)
            .where(models.Notification.recipient_id == user_id, models.Notification.read.is_(False))
            .values(read=True)
            .execution_options(synchronize_session=False)
        ).rowcount
    logger.info("Marked %s notifications read for user %s", affected, user_id)
    return MessageResponse(message="All notifications marked as read", affected=affected)


def delete_notification(db: Session, user_id: int, notification_id: int) -> MessageResponse:
    _get_owned(db, user_id, notification_id)
    with atomic(db):
        db.execute(delete(models.Notification).where(models.Notification.id == notification_id))
    return MessageResponse(message="Notification deleted", affected=1)


def clear_all(db: Session, user_id: int) -> MessageResponse:
    with atomic(db):
        affected = db.execute(
            delete(models.Notification)
            .where(models.Notification.recipient_id == user_id)
            .execution_options(synchronize_session=False)
        ).rowcount
    logger.info("Cleared %s notifications for user %s", affected, user_id)
    return MessageResponse(message="All notifications cleared", affected=affected)
