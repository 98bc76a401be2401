"""Schemas for user statistics and the enriched profile read model."""

from datetime import datetime
from pydantic import BaseModel, ConfigDict
from typing import Dict, List, Optional

from .recipe_schema import RecipeDetail, RecipeSummary
from .user_schema import BadgeResponse, UserSummary


class UserStats(BaseModel):
    """Authoritative aggregate statistics for one user.

    All fields default to zero so `UserStats()` is the documented default
    returned when stats cannot be computed.
    """

    recipes_count: int = 0
    favorites_count: int = 0
    reviews_count: int = 0
    saved_recipes_count: int = 0
    followers_count: int = 0
    following_count: int = 0
    total_likes: int = 0
    total_views: int = 0
    total_interactions: int = 0
    engagement_rate: float = 0.0


class RecentReview(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    rating: int
    comment: str
    recipe_id: int
    recipe_title: Optional[str] = None
    created_at: Optional[datetime] = None


class EnrichedProfile(UserStats):
    """Profile view-model: stats merged with the user's public projection."""

    id: Optional[int] = None
    username: str = ""
    name: str = ""
    email: Optional[str] = None
    profile_picture: str = ""
    cover_picture: str = ""
    tagline: Optional[str] = None
    bio: Optional[str] = None
    location: Optional[str] = None
    website: Optional[str] = None
    cooking_style: Optional[str] = None
    social_media: Dict[str, Optional[str]] = {}
    interests: List[str] = []
    specialties: List[str] = []
    favorite_ingredients: List[str] = []
    is_verified: bool = False
    is_pro_chef: bool = False
    pro_chef_info: Optional[dict] = None
    member_since: Optional[datetime] = None
    last_active: Optional[datetime] = None
    recent_recipes: List[RecipeSummary] = []
    recent_reviews: List[RecentReview] = []
    saved_recipes: List[RecipeSummary] = []
    favorites: List[RecipeSummary] = []
    followers: List[UserSummary] = []
    following: List[UserSummary] = []
    badges: List[BadgeResponse] = []
    user_level: str = "New Cook"


class UserProfileResponse(EnrichedProfile):
    is_following: bool = False


class AuthorProfileResponse(UserProfileResponse):
    recipes: List[RecipeDetail] = []
    is_own_profile: bool = False


class UserListPage(BaseModel):
    users: List[UserSummary]
    page: int
    limit: int
    total: int


class ChefList(BaseModel):
    users: list
    total: int
