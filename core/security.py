"""Password hashing, JWT issuance and the bearer-token auth dependencies.

Tokens are HS256 JWTs carrying the user id in `sub` and an `exp` claim.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import jwt
from jose.exceptions import ExpiredSignatureError, JWTError
from sqlalchemy.orm import Session

from core.config import ACCESS_TOKEN_EXPIRE_MINUTES, JWT_ALGORITHM, JWT_SECRET
from core.exceptions import AuthenticationError
from core.logger import get_logger
from database import models
from database.deps import get_db_write

logger = get_logger("core.security")

bearer_scheme = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt()
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """Check a password against its bcrypt hash; accounts without one never match."""
    if not hashed_password:
        return False
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        logger.warning("Stored password hash is malformed")
        return False


def create_access_token(user_id: int, expires_delta: Optional[timedelta] = None) -> str:
    """Create a signed access token for `user_id`.

    Args:
        user_id: Subject of the token.
        expires_delta: Custom lifetime; defaults to ACCESS_TOKEN_EXPIRE_MINUTES.

    Returns:
        Encoded JWT string.
    """
    if expires_delta is None:
        expires_delta = timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    now = datetime.now(timezone.utc)
    payload = {"sub": str(user_id), "iat": now, "exp": now + expires_delta}
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> int:
    """Return the user id carried by a valid token.

    Raises:
        AuthenticationError: TOKEN_EXPIRED or INVALID_TOKEN.
    """
    try:
        payload = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except ExpiredSignatureError:
        raise AuthenticationError("Token has expired", code="TOKEN_EXPIRED")
    except JWTError:
        raise AuthenticationError("Invalid token", code="INVALID_TOKEN")
    try:
        return int(payload["sub"])
    except (KeyError, TypeError, ValueError):
        raise AuthenticationError("Invalid token", code="INVALID_TOKEN")


def _resolve_user(db: Session, token: str) -> models.User:
    user_id = decode_access_token(token)
    user = db.get(models.User, user_id)
    if user is None:
        raise AuthenticationError("User not found", code="USER_NOT_FOUND")
    return user


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db_write),
) -> models.User:
    """FastAPI dependency returning the authenticated actor.

    Raises:
        AuthenticationError: NO_TOKEN, INVALID_TOKEN, TOKEN_EXPIRED or USER_NOT_FOUND.
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Not authorized, no token", code="NO_TOKEN")
    return _resolve_user(db, credentials.credentials)


def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db_write),
) -> Optional[models.User]:
    """Like `get_current_user` but anonymous or invalid callers yield None."""
    if credentials is None or not credentials.credentials:
        return None
    try:
        return _resolve_user(db, credentials.credentials)
    except AuthenticationError as exc:
        logger.debug("Ignoring bad optional token: %s", exc.code)
        return None
