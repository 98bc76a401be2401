"""Results returned by social graph operations (follow, favorite, save)."""

from pydantic import BaseModel


class FollowResult(BaseModel):
    is_following: bool
    followers_count: int
    following_count: int
    message: str = ""


class FavoriteResult(BaseModel):
    is_favorited: bool
    favorites_count: int
    likes_count: int
    message: str = ""


class SaveResult(BaseModel):
    is_saved: bool
    saved_recipes_count: int
    message: str = ""
