"""Schemas for user accounts, authentication and profile edits."""

from datetime import datetime
from pydantic import BaseModel, ConfigDict, EmailStr, Field
from typing import Dict, List, Optional


class UserSummary(BaseModel):
    """Compact user reference embedded in other payloads."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: Optional[str] = None
    name: Optional[str] = None
    profile_picture: Optional[str] = None
    followers_count: int = 0
    recipes_count: int = 0


class RegisterRequest(BaseModel):
    """Request payload for creating a local account."""

    name: str = Field(..., min_length=2, max_length=50, examples=["Jane Cook"])
    username: str = Field(..., min_length=3, max_length=30, pattern=r"^[A-Za-z0-9_.]+$", examples=["janecooks"])
    email: EmailStr = Field(..., examples=["jane@example.com"])
    password: str = Field(..., min_length=6, examples=["s3cret!"])


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserSummary


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=6)


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    token: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=6)


class ResetTokenStatus(BaseModel):
    valid: bool
    message: str


class SocialMedia(BaseModel):
    twitter: Optional[str] = None
    instagram: Optional[str] = None
    facebook: Optional[str] = None
    youtube: Optional[str] = None
    linkedin: Optional[str] = None


class PrivacySettings(BaseModel):
    show_email: bool = False
    show_followers: bool = True
    show_following: bool = True
    show_activity: bool = True


class NotificationSettings(BaseModel):
    email_notifications: bool = True
    push_notifications: bool = True
    follower_notifications: bool = True
    recipe_notifications: bool = True


class ProChefInfo(BaseModel):
    certification: Optional[str] = None
    experience: Optional[str] = None
    restaurant: Optional[str] = None
    awards: List[str] = []


class ProfileUpdateRequest(BaseModel):
    """Partial profile update; fields left unset are not modified."""

    model_config = ConfigDict(extra="forbid")

    username: Optional[str] = Field(None, min_length=3, max_length=30, pattern=r"^[A-Za-z0-9_.]+$")
    email: Optional[EmailStr] = None
    name: Optional[str] = Field(None, min_length=2, max_length=50)
    tagline: Optional[str] = Field(None, max_length=100)
    bio: Optional[str] = Field(None, max_length=1000)
    location: Optional[str] = Field(None, max_length=100)
    website: Optional[str] = None
    cooking_style: Optional[str] = Field(None, max_length=100)
    interests: Optional[List[str]] = None
    specialties: Optional[List[str]] = None
    favorite_ingredients: Optional[List[str]] = None
    social_media: Optional[SocialMedia] = None
    privacy_settings: Optional[PrivacySettings] = None
    notification_settings: Optional[NotificationSettings] = None
    is_pro_chef: Optional[bool] = None
    pro_chef_info: Optional[ProChefInfo] = None


class BadgeCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=80, examples=["First Recipe"])
    icon: str = "🏆"
    description: str = ""


class BadgeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str
    icon: str
    description: str
    earned_at: Optional[datetime] = None


class ChefSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: Optional[str] = None
    profile_picture: Optional[str] = None
    bio: Optional[str] = None
    recipes_count: int = 0
    followers_count: int = 0
    is_verified: bool = False
    social_media: Dict[str, Optional[str]] = {}
    created_at: Optional[datetime] = None
