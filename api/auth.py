"""Authentication API router.

Registration, login, password management and account deletion. Tokens
returned here are bearer tokens accepted by every authenticated route.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from core.exceptions import AuthenticationError
from core.logger import get_logger
from core.security import get_current_user
from database import models
from database.deps import get_db_read, get_db_write, get_dispatcher, get_email_sender
from schemas import (
    ChangePasswordRequest, DeleteResponse, EnrichedProfile, ForgotPasswordRequest, LoginRequest, MessageResponse,
    RegisterRequest, ResetPasswordRequest, ResetTokenStatus, TokenResponse,
)
from services import auth_service, profile_service

logger = get_logger("api.auth")
router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register", response_model=TokenResponse, status_code=201)
def register(payload: RegisterRequest, db: Session = Depends(get_db_write), dispatcher=Depends(get_dispatcher)):
    """Create an account and return an access token."""
    return auth_service.register(db, payload, dispatcher)


@router.post("/login", response_model=TokenResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db_write), dispatcher=Depends(get_dispatcher)):
    return auth_service.login(db, payload, dispatcher)


@router.get("/me", response_model=EnrichedProfile)
def me(user: models.User = Depends(get_current_user), db: Session = Depends(get_db_write)):
    """Return the caller's enriched profile."""
    return profile_service.get_own_profile(db, user.id)


@router.put("/change-password", response_model=MessageResponse)
def change_password(
    payload: ChangePasswordRequest,
    user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db_write),
):
    auth_service.change_password(db, user.id, payload)
    return MessageResponse(message="Password updated successfully")


@router.post("/forgot-password", response_model=MessageResponse)
def forgot_password(payload: ForgotPasswordRequest, db: Session = Depends(get_db_write), sender=Depends(get_email_sender)):
    """Send a password reset link if the email belongs to an account."""
    return MessageResponse(message=auth_service.request_password_reset(db, payload.email, sender))


@router.post("/reset-password", response_model=TokenResponse)
def reset_password(payload: ResetPasswordRequest, db: Session = Depends(get_db_write)):
    return auth_service.reset_password(db, payload.token, payload.new_password)


@router.get("/verify-reset-token/{token}", response_model=ResetTokenStatus)
def verify_reset_token(token: str, db: Session = Depends(get_db_read)):
    """Check a reset link before showing the new-password form."""
    if not auth_service.verify_reset_token(db, token):
        raise AuthenticationError("Invalid or expired reset token", code="INVALID_RESET_TOKEN")
    return ResetTokenStatus(valid=True, message="Token is valid")


@router.delete("/account", response_model=DeleteResponse)
def delete_account(user: models.User = Depends(get_current_user), db: Session = Depends(get_db_write)):
    """Delete the caller's account, recipes and social connections."""
    user_id = user.id
    cleanup = auth_service.delete_account(db, user_id)
    return DeleteResponse(id=user_id, message="Account deleted successfully", cleanup=cleanup)
