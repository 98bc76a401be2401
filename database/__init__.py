"""Database package: ORM models, session factories and request dependencies."""

from .database import (
    write_engine,
    read_engine,
    WriteSessionLocal,
    ReadSessionLocal,
    init_db,
    get_write_session,
    get_read_session,
)
from . import models
from .models import Base, User, Follow, Favorite, SavedRecipe, Recipe, Review, Notification, Badge

__all__ = [
    "write_engine",
    "read_engine",
    "WriteSessionLocal",
    "ReadSessionLocal",
    "init_db",
    "get_write_session",
    "get_read_session",
    "models",
    "Base",
    "User",
    "Follow",
    "Favorite",
    "SavedRecipe",
    "Recipe",
    "Review",
    "Notification",
    "Badge",
]
