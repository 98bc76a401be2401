"""Account operations: registration, login, password management and account deletion."""

import hashlib
import secrets
from datetime import datetime, timedelta
from typing import Dict, List

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.config import FRONTEND_URL, PASSWORD_RESET_EXPIRE_MINUTES
from core.exceptions import AuthenticationError, InvalidStateError
from core.logger import get_logger
from core.repository import atomic, save
from core.security import create_access_token, hash_password, verify_password
from database import models
from schemas.user_schema import (
    ChangePasswordRequest, LoginRequest, RegisterRequest, TokenResponse, UserSummary,
)
from services import stats_service
from services.email_service import EmailSender, email_sender
from services.notification_dispatcher import (
    NotificationDispatcher, login_event, notification_dispatcher, welcome_event,
)
from services.recipe_service import RecipeDeletion
from services.social_graph import get_user_or_404

logger = get_logger("services.auth_service")


def _digest(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def _find_by_email(db: Session, email: str):
    return db.query(models.User).filter(func.lower(models.User.email) == email.lower()).first()


def _token_response(user: models.User) -> TokenResponse:
    return TokenResponse(access_token=create_access_token(user.id), user=UserSummary.model_validate(user))


def _user_with_reset_token(db: Session, token: str):
    return (
        db.query(models.User)
        .filter(
            models.User.password_reset_token == _digest(token),
            models.User.password_reset_expires > datetime.utcnow(),
        )
        .first()
    )


def register(
    db: Session,
    payload: RegisterRequest,
    dispatcher: NotificationDispatcher = notification_dispatcher,
) -> TokenResponse:
    """Create a local account and send the welcome notification.

    Raises:
        InvalidStateError: EMAIL_EXISTS or USERNAME_EXISTS.
    """
    email = payload.email.lower()
    if _find_by_email(db, email):
        raise InvalidStateError("User already exists", code="EMAIL_EXISTS")
    if db.query(models.User.id).filter(func.lower(models.User.username) == payload.username.lower()).first():
        raise InvalidStateError("Username already taken", code="USERNAME_EXISTS")

    user = models.User(
        name=payload.name.strip(),
        username=payload.username,
        email=email,
        password_hash=hash_password(payload.password),
        provider="local",
    )
    try:
        user = save(db, user)
    except IntegrityError:
        db.rollback()
        raise InvalidStateError("User already exists", code="EMAIL_EXISTS")

    logger.info("User registered id=%s username=%s", user.id, user.username)
    dispatcher.dispatch(db, welcome_event(user))
    return _token_response(user)


def login(
    db: Session,
    payload: LoginRequest,
    dispatcher: NotificationDispatcher = notification_dispatcher,
) -> TokenResponse:
    """Authenticate with email and password.

    Raises:
        AuthenticationError: INVALID_CREDENTIALS on unknown email, wrong
            password, or an account that only signs in through OAuth.
    """
    user = _find_by_email(db, payload.email)
    if user is None or not verify_password(payload.password, user.password_hash):
        logger.info("Failed login for %s", payload.email)
        raise AuthenticationError("Invalid credentials", code="INVALID_CREDENTIALS")

    user.last_active = datetime.utcnow()
    save(db, user)
    dispatcher.dispatch(db, login_event(user))
    logger.info("User %s logged in", user.id)
    return _token_response(user)


def change_password(db: Session, user_id: int, payload: ChangePasswordRequest) -> None:
    user = get_user_or_404(db, user_id)
    if not verify_password(payload.current_password, user.password_hash):
        raise AuthenticationError("Current password is incorrect", code="INVALID_CREDENTIALS")
    user.password_hash = hash_password(payload.new_password)
    user.last_password_reset = datetime.utcnow()
    save(db, user)
    logger.info("Password changed for user %s", user_id)


def request_password_reset(db: Session, email: str, sender: EmailSender = email_sender) -> str:
    """Issue a reset token and mail it to the account owner.

    Only the SHA-256 digest of the token is stored. Unknown addresses get
    the same response so callers cannot probe for accounts.
    """
    message = "If an account exists for that email, a reset link has been sent"
    user = _find_by_email(db, email)
    if user is None:
        logger.info("Password reset requested for unknown email")
        return message

    token = secrets.token_urlsafe(32)
    user.password_reset_token = _digest(token)
    user.password_reset_expires = datetime.utcnow() + timedelta(minutes=PASSWORD_RESET_EXPIRE_MINUTES)
    save(db, user)

    reset_url = f"{FRONTEND_URL}/reset-password/{token}"
    sender.send(
        user.email,
        "Password reset request",
        (
            "You requested a password reset.\n\n"
            f"Open this link within {PASSWORD_RESET_EXPIRE_MINUTES} minutes to choose a new password:\n"
            f"{reset_url}\n\n"
            "If you did not request this, you can ignore this email."
        ),
    )
    logger.info("Password reset issued for user %s", user.id)
    return message


def reset_password(db: Session, token: str, new_password: str) -> TokenResponse:
    """Set a new password using a reset token.

    Raises:
        AuthenticationError: INVALID_RESET_TOKEN when the token is unknown or expired.
    """
    user = _user_with_reset_token(db, token)
    if user is None:
        raise AuthenticationError("Invalid or expired reset token", code="INVALID_RESET_TOKEN")

    user.password_hash = hash_password(new_password)
    user.password_reset_token = None
    user.password_reset_expires = None
    user.last_password_reset = datetime.utcnow()
    save(db, user)
    logger.info("Password reset completed for user %s", user.id)
    return _token_response(user)


def verify_reset_token(db: Session, token: str) -> bool:
    """Return whether `token` is a live password reset token, without consuming it."""
    return _user_with_reset_token(db, token) is not None


class AccountDeletion:
    """Removes an account and everything hanging off it.

    The user's own recipes go first, each through `RecipeDeletion`. The
    remaining rows (follow edges in both directions, favorites, saves,
    reviews, badges and received notifications) are deleted with the user
    in one transaction; notifications the user sent are kept with the
    sender detached. `reconcile` then refreshes the ratings of the recipes
    they reviewed and the counters of every user related to them.
    """

    def __init__(self, db: Session, user_id: int):
        self.db = db
        self.user_id = user_id
        self.affected_user_ids: set = set()
        self.reviewed_recipe_ids: set = set()
        self.cleanup: Dict[str, int] = {}

    def _ids(self, column, where) -> List[int]:
        return [row[0] for row in self.db.execute(select(column).where(where)).all()]

    def run(self) -> Dict[str, int]:
        db = self.db
        uid = self.user_id
        get_user_or_404(db, uid)

        recipe_ids = self._ids(models.Recipe.id, models.Recipe.author_id == uid)
        for recipe_id in recipe_ids:
            deletion = RecipeDeletion(db, uid, recipe_id)
            deletion.run()
            self.affected_user_ids.update(deletion.affected_user_ids)
        self.cleanup["recipes"] = len(recipe_ids)

        with atomic(db):
            self.affected_user_ids.update(self._ids(models.Follow.following_id, models.Follow.follower_id == uid))
            self.affected_user_ids.update(self._ids(models.Follow.follower_id, models.Follow.following_id == uid))
            self.affected_user_ids.update(
                self._ids(
                    models.Recipe.author_id,
                    models.Recipe.id.in_(select(models.Favorite.recipe_id).where(models.Favorite.user_id == uid)),
                )
            )
            self.reviewed_recipe_ids.update(self._ids(models.Review.recipe_id, models.Review.author_id == uid))

            self.cleanup["follows"] = db.execute(
                delete(models.Follow).where(or_(models.Follow.follower_id == uid, models.Follow.following_id == uid))
            ).rowcount
            self.cleanup["favorites"] = db.execute(
                delete(models.Favorite).where(models.Favorite.user_id == uid)
            ).rowcount
            self.cleanup["saved"] = db.execute(
                delete(models.SavedRecipe).where(models.SavedRecipe.user_id == uid)
            ).rowcount
            self.cleanup["reviews"] = db.execute(
                delete(models.Review).where(models.Review.author_id == uid)
            ).rowcount
            self.cleanup["badges"] = db.execute(delete(models.Badge).where(models.Badge.user_id == uid)).rowcount
            self.cleanup["notifications"] = db.execute(
                delete(models.Notification).where(models.Notification.recipient_id == uid)
            ).rowcount
            db.execute(
                update(models.Notification).where(models.Notification.sender_id == uid).values(sender_id=None)
            )
            db.execute(delete(models.User).where(models.User.id == uid))
        db.expire_all()

        logger.info("Account %s deleted: %s", uid, self.cleanup)
        self.affected_user_ids.discard(uid)
        self.reconcile()
        return self.cleanup

    def reconcile(self) -> None:
        for recipe_id in sorted(self.reviewed_recipe_ids):
            try:
                stats_service.recompute_recipe_rating(self.db, recipe_id)
            except Exception:
                self.db.rollback()
                logger.exception("Rating reconciliation failed for recipe %s after deleting account %s",
                                 recipe_id, self.user_id)
        for user_id in sorted(self.affected_user_ids):
            stats_service.recompute_stats(self.db, user_id)


def delete_account(db: Session, user_id: int) -> Dict[str, int]:
    """Delete the account of `user_id` with its recipes and social graph rows."""
    return AccountDeletion(db, user_id).run()
