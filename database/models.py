"""SQLAlchemy ORM models for the recipe sharing service.

This module defines the database schema: User, Recipe, Review, Notification
and Badge, plus the association tables that hold the social relationship
sets (follows, favorites, saved recipes). Relationship sets use composite
primary keys so set semantics are enforced by the store itself.

The counter columns on User are a denormalized cache maintained by
`services.stats_service`; they can always be recomputed from the
association and entity tables.
"""

from sqlalchemy import (
    Boolean, Column, Integer, String, Float, DateTime, ForeignKey, Text, JSON,
    Index, UniqueConstraint,
)
from sqlalchemy.orm import declarative_base
from datetime import datetime

from core.config import DEFAULT_PROFILE_PICTURE, DEFAULT_COVER_PICTURE

Base = declarative_base()


def engagement_rate(total_likes: int, total_views: int, followers_count: int) -> float:
    """Interactions per follower as a percentage, rounded to one decimal.

    Returns 0 when the user has no followers.
    """
    if not followers_count or followers_count <= 0:
        return 0.0
    return round(((total_likes or 0) + (total_views or 0)) / followers_count * 100, 1)


class User(Base):
    """ORM model representing an application user and their cached counters."""

    __tablename__ = "users"
    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(30), unique=True, nullable=True)
    name = Column(String(50), nullable=False)
    email = Column(String, unique=True, nullable=False, index=True)
    password_hash = Column(String, nullable=True)
    google_id = Column(String, unique=True, nullable=True)
    provider = Column(String, nullable=False, default="local")
    email_verified = Column(Boolean, default=False)
    password_reset_token = Column(String, nullable=True, index=True)
    password_reset_expires = Column(DateTime, nullable=True)
    last_password_reset = Column(DateTime, nullable=True)

    profile_picture = Column(String, default=DEFAULT_PROFILE_PICTURE)
    cover_picture = Column(String, default=DEFAULT_COVER_PICTURE)
    tagline = Column(String(100), nullable=True)
    bio = Column(Text, nullable=True)
    location = Column(String(100), nullable=True)
    website = Column(String, nullable=True)
    cooking_style = Column(String(100), nullable=True)
    social_media = Column(JSON, default=dict)
    interests = Column(JSON, default=list)
    specialties = Column(JSON, default=list)
    favorite_ingredients = Column(JSON, default=list)
    is_verified = Column(Boolean, default=False)
    is_pro_chef = Column(Boolean, default=False)
    pro_chef_info = Column(JSON, nullable=True)
    privacy_settings = Column(JSON, default=dict)
    notification_settings = Column(JSON, default=dict)

    recipes_count = Column(Integer, nullable=False, default=0)
    favorites_count = Column(Integer, nullable=False, default=0)
    reviews_count = Column(Integer, nullable=False, default=0)
    followers_count = Column(Integer, nullable=False, default=0)
    following_count = Column(Integer, nullable=False, default=0)
    total_likes = Column(Integer, nullable=False, default=0)
    total_views = Column(Integer, nullable=False, default=0)

    member_since = Column(DateTime, default=datetime.utcnow)
    last_active = Column(DateTime, default=datetime.utcnow)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class Follow(Base):
    """Follow edge: `follower_id` follows `following_id`."""

    __tablename__ = "follows"
    follower_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    following_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)


class Favorite(Base):
    """A user's favorite recipe. Favorites are the only like mechanism."""

    __tablename__ = "favorites"
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    recipe_id = Column(Integer, ForeignKey("recipes.id", ondelete="CASCADE"), primary_key=True, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)


class SavedRecipe(Base):
    """A recipe bookmarked into a user's collection."""

    __tablename__ = "saved_recipes"
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    recipe_id = Column(Integer, ForeignKey("recipes.id", ondelete="CASCADE"), primary_key=True, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)


class Recipe(Base):
    """ORM model representing a published recipe.

    Ingredients are stored as a JSON list of `{name, amount}` objects and
    instructions as a JSON list of `{text, image_url}` steps.
    """

    __tablename__ = "recipes"
    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    ingredients = Column(JSON, default=list)
    instructions = Column(JSON, default=list)
    prep_time = Column(Integer, nullable=False)
    cook_time = Column(Integer, nullable=False)
    servings = Column(Integer, nullable=False)
    difficulty = Column(String, nullable=False)
    category = Column(String, nullable=False, index=True)
    image_url = Column(String, nullable=True)
    author_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    rating = Column(Float, nullable=False, default=0.0)
    review_count = Column(Integer, nullable=False, default=0)
    views = Column(Integer, nullable=False, default=0)
    nutrition = Column(JSON, default=dict)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class Review(Base):
    """ORM model storing a user's rating and comment for a recipe."""

    __tablename__ = "reviews"
    id = Column(Integer, primary_key=True, index=True)
    rating = Column(Integer, nullable=False)  # 1-5
    comment = Column(String(1000), nullable=False)
    recipe_id = Column(Integer, ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False, index=True)
    author_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint("author_id", "recipe_id", name="uq_review_author_recipe"),
        Index("ix_review_author_created", "author_id", "created_at"),
    )


class Notification(Base):
    """In-app notification owned by its recipient."""

    __tablename__ = "notifications"
    id = Column(Integer, primary_key=True, index=True)
    recipient_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    sender_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    type = Column(String, nullable=False)
    title = Column(String, nullable=False)
    message = Column(Text, nullable=False)
    recipe_id = Column(Integer, ForeignKey("recipes.id", ondelete="SET NULL"), nullable=True)
    read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        Index("ix_notification_recipient_created", "recipient_id", "created_at"),
        Index("ix_notification_recipient_read", "recipient_id", "read"),
    )


class Badge(Base):
    """Achievement badge earned by a user."""

    __tablename__ = "badges"
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)
    icon = Column(String, nullable=False, default="🏆")
    description = Column(String, nullable=False, default="")
    earned_at = Column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint("user_id", "name", name="uq_badge_user_name"),
    )
