"""Notification dispatcher.

Creates notification records for social events while suppressing
near-duplicate noise: an event matching an existing notification on
(recipient, type, sender, recipe) created within the de-duplication window is
dropped. Notifications are best-effort; `dispatch` never raises, it logs
store failures and returns None so the triggering operation is unaffected.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.config import NOTIFICATION_DEDUPE_WINDOW_SECONDS, NOTIFICATION_MAX_ATTEMPTS
from core.logger import get_logger
from database import models
from schemas.enums import NotificationType

logger = get_logger("services.notification_dispatcher")

# Login notifications fire on every login and welcome only once per
# account, so neither goes through the duplicate check.
DEDUPE_POLICY = {
    NotificationType.WELCOME: False,
    NotificationType.LOGIN: False,
}


@dataclass
class NotificationEvent:
    """A social event that may produce a notification."""

    recipient_id: int
    type: NotificationType
    title: str
    message: str
    sender_id: Optional[int] = None
    recipe_id: Optional[int] = None
    dedupe: Optional[bool] = None

    @property
    def should_dedupe(self) -> bool:
        if self.dedupe is not None:
            return self.dedupe
        return DEDUPE_POLICY.get(NotificationType(self.type), True)


class NotificationDispatcher:
    """Persists notifications with a de-duplication window.

    Args:
        window: Interval during which identical events are suppressed.
        max_attempts: Number of persistence attempts before giving up.
        clock: Callable returning the current naive UTC time.
    """

    def __init__(
        self,
        window: timedelta = timedelta(seconds=NOTIFICATION_DEDUPE_WINDOW_SECONDS),
        max_attempts: int = NOTIFICATION_MAX_ATTEMPTS,
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        self.window = window
        self.max_attempts = max(1, max_attempts)
        self.clock = clock

    def is_duplicate(self, db: Session, event: NotificationEvent, now: datetime) -> bool:
        """Return True if an equivalent notification exists inside the window."""
        query = db.query(models.Notification.id).filter(
            models.Notification.recipient_id == event.recipient_id,
            models.Notification.type == NotificationType(event.type).value,
            models.Notification.created_at >= now - self.window,
        )
        if event.sender_id is not None:
            query = query.filter(models.Notification.sender_id == event.sender_id)
        if event.recipe_id is not None:
            query = query.filter(models.Notification.recipe_id == event.recipe_id)
        return query.first() is not None

    def dispatch(self, db: Session, event: NotificationEvent) -> Optional[models.Notification]:
        """Persist a notification for `event` unless it is suppressed.

        Returns the stored notification, or None when the event was a
        duplicate, a self-notification, or could not be persisted.
        """
        event_type = NotificationType(event.type)
        if event.sender_id is not None and event.sender_id == event.recipient_id:
            logger.debug("Self notification suppressed: %s for user %s", event_type.value, event.recipient_id)
            return None

        for attempt in range(1, self.max_attempts + 1):
            try:
                now = self.clock()
                if event.should_dedupe and self.is_duplicate(db, event, now):
                    logger.info(
                        "Duplicate notification prevented: %s recipient=%s sender=%s recipe=%s",
                        event_type.value, event.recipient_id, event.sender_id, event.recipe_id,
                    )
                    return None
                notification = models.Notification(
                    recipient_id=event.recipient_id,
                    sender_id=event.sender_id,
                    type=event_type.value,
                    title=event.title,
                    message=event.message,
                    recipe_id=event.recipe_id,
                    read=False,
                    created_at=now,
                )
                db.add(notification)
                db.commit()
                db.refresh(notification)
                logger.info("Notification %s created for user %s", event_type.value, event.recipient_id)
                return notification
            except SQLAlchemyError:
                db.rollback()
                logger.exception(
                    "Failed to create %s notification for user %s (attempt %s/%s)",
                    event_type.value, event.recipient_id, attempt, self.max_attempts,
                )
        return None


def _display_name(user: models.User) -> str:
    return user.username or user.name or "Someone"


def welcome_event(user: models.User) -> NotificationEvent:
    return NotificationEvent(
        recipient_id=user.id,
        type=NotificationType.WELCOME,
        title="Welcome to Food Recipe App! 🎉",
        message=(
            "We're excited to have you here! Start exploring delicious recipes "
            "and share your culinary creations with the community."
        ),
    )


def login_event(user: models.User) -> NotificationEvent:
    return NotificationEvent(
        recipient_id=user.id,
        type=NotificationType.LOGIN,
        title="Welcome back, Chef! 👨‍🍳",
        message="Good to see you again! Ready to cook something amazing today?",
    )


def follow_event(follower: models.User, followed_id: int) -> NotificationEvent:
    return NotificationEvent(
        recipient_id=followed_id,
        sender_id=follower.id,
        type=NotificationType.FOLLOW,
        title="New Follower! 👥",
        message=f"{_display_name(follower)} started following you",
    )


def recipe_added_event(recipe: models.Recipe) -> NotificationEvent:
    return NotificationEvent(
        recipient_id=recipe.author_id,
        recipe_id=recipe.id,
        type=NotificationType.RECIPE_ADDED,
        title="Recipe Published! 📝",
        message=(
            f'Your recipe "{recipe.title}" has been published and is now available '
            "for others to discover and enjoy!"
        ),
    )


def recipe_liked_event(liker: models.User, recipe: models.Recipe) -> NotificationEvent:
    return NotificationEvent(
        recipient_id=recipe.author_id,
        sender_id=liker.id,
        recipe_id=recipe.id,
        type=NotificationType.RECIPE_LIKED,
        title="Your Recipe Got a Like! ❤️",
        message=f'{_display_name(liker)} liked your recipe "{recipe.title}"',
    )


def recipe_saved_event(saver: models.User, recipe: models.Recipe) -> NotificationEvent:
    return NotificationEvent(
        recipient_id=recipe.author_id,
        sender_id=saver.id,
        recipe_id=recipe.id,
        type=NotificationType.RECIPE_SAVED,
        title="Recipe Saved! 📌",
        message=f'{_display_name(saver)} saved your recipe "{recipe.title}" to their collection',
    )


def review_added_event(reviewer: models.User, recipe: models.Recipe) -> NotificationEvent:
    return NotificationEvent(
        recipient_id=recipe.author_id,
        sender_id=reviewer.id,
        recipe_id=recipe.id,
        type=NotificationType.REVIEW_ADDED,
        title="New Review! ⭐",
        message=f'{_display_name(reviewer)} left a review on your recipe "{recipe.title}"',
    )


def achievement_event(user_id: int, achievement: str) -> NotificationEvent:
    return NotificationEvent(
        recipient_id=user_id,
        type=NotificationType.ACHIEVEMENT,
        title="Achievement Unlocked! 🏆",
        message=achievement,
    )


notification_dispatcher = NotificationDispatcher()
