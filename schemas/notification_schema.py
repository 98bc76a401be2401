"""Schemas for notification listings and recipient-side actions."""

from datetime import datetime
from pydantic import BaseModel, ConfigDict
from typing import List, Optional

from .recipe_schema import RecipeSummary
from .user_schema import UserSummary


class NotificationResponse(BaseModel):
    """Notification with sender and recipe summaries populated."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    recipient_id: int
    type: str
    title: str
    message: str
    read: bool
    sender: Optional[UserSummary] = None
    recipe: Optional[RecipeSummary] = None
    created_at: datetime


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class NotificationPage(BaseModel):
    notifications: List[NotificationResponse]
    pagination: Pagination
    unread_count: int


class MessageResponse(BaseModel):
    message: str
    affected: Optional[int] = None
