"""Pydantic schema package for request and response models."""

from .enums import Category, Difficulty, NotificationType, SharePlatform, UserLevel
from .user_schema import (
    UserSummary, RegisterRequest, LoginRequest, TokenResponse, ProfileUpdateRequest,
    ChangePasswordRequest, ForgotPasswordRequest, ResetPasswordRequest, ResetTokenStatus,
    BadgeCreateRequest, BadgeResponse, ChefSummary,
)
from .recipe_schema import (
    RecipeCreateRequest, RecipeUpdateRequest, RecipeDetail, RecipePage, RecipeView,
    ReviewCreateRequest, ReviewResponse, ReviewPage, ShareRequest, ShareResponse,
    ReportRequest, DeleteResponse,
)
from .profile_schema import (
    UserStats, EnrichedProfile, UserProfileResponse, AuthorProfileResponse, UserListPage, ChefList,
)
from .social_schema import FollowResult, FavoriteResult, SaveResult
from .notification_schema import NotificationResponse, NotificationPage, MessageResponse

__all__ = [
    "Category",
    "Difficulty",
    "NotificationType",
    "SharePlatform",
    "UserLevel",
    "UserSummary",
    "RegisterRequest",
    "LoginRequest",
    "TokenResponse",
    "ProfileUpdateRequest",
    "ChangePasswordRequest",
    "ForgotPasswordRequest",
    "ResetPasswordRequest",
    "ResetTokenStatus",
    "BadgeCreateRequest",
    "BadgeResponse",
    "ChefSummary",
    "RecipeCreateRequest",
    "RecipeUpdateRequest",
    "RecipeDetail",
    "RecipePage",
    "RecipeView",
    "ReviewCreateRequest",
    "ReviewResponse",
    "ReviewPage",
    "ShareRequest",
    "ShareResponse",
    "ReportRequest",
    "DeleteResponse",
    "UserStats",
    "EnrichedProfile",
    "UserProfileResponse",
    "AuthorProfileResponse",
    "UserListPage",
    "ChefList",
    "FollowResult",
    "FavoriteResult",
    "SaveResult",
    "NotificationResponse",
    "NotificationPage",
    "MessageResponse",
]
