"""Profile API router.

Own and public profiles, stats, follow relationships, collections, badges
and the chefs directory. Handlers only translate HTTP into
`profile_service` and `social_graph` calls.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile
from sqlalchemy.orm import Session

from core.logger import get_logger
from core.security import get_current_user, get_optional_user
from database import models
from database.deps import get_db_read, get_db_write, get_dispatcher, get_image_storage
from schemas import (
    AuthorProfileResponse, BadgeCreateRequest, BadgeResponse, ChefList, EnrichedProfile, FollowResult,
    ProfileUpdateRequest, RecipeDetail, UserListPage, UserProfileResponse, UserStats,
)
from services import profile_service, social_graph

logger = get_logger("api.profile")
router = APIRouter(prefix="/api/profile", tags=["profile"])


@router.get("", response_model=EnrichedProfile)
def get_profile(user: models.User = Depends(get_current_user), db: Session = Depends(get_db_write)):
    return profile_service.get_own_profile(db, user.id)


@router.put("", response_model=EnrichedProfile)
def update_profile(
    payload: ProfileUpdateRequest,
    user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db_write),
):
    """Update the caller's profile fields; omitted fields stay unchanged."""
    return profile_service.update_profile(db, user.id, payload)


@router.get("/stats", response_model=UserStats)
def get_own_stats(user: models.User = Depends(get_current_user), db: Session = Depends(get_db_write)):
    return profile_service.get_stats(db, user.id)


@router.post("/picture", response_model=EnrichedProfile)
def upload_profile_picture(
    image: UploadFile = File(...),
    user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db_write),
    storage=Depends(get_image_storage),
):
    url = storage.store(image, "profile")
    return profile_service.set_profile_picture(db, user.id, url)


@router.post("/cover", response_model=EnrichedProfile)
def upload_cover_picture(
    image: UploadFile = File(...),
    user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db_write),
    storage=Depends(get_image_storage),
):
    url = storage.store(image, "cover")
    return profile_service.set_cover_picture(db, user.id, url)


@router.get("/saved", response_model=List[RecipeDetail])
def saved_recipes(user: models.User = Depends(get_current_user), db: Session = Depends(get_db_read)):
    return profile_service.list_saved_recipes(db, user.id)


@router.get("/favorites", response_model=List[RecipeDetail])
def favorite_recipes(user: models.User = Depends(get_current_user), db: Session = Depends(get_db_read)):
    return profile_service.list_favorite_recipes(db, user.id)


@router.get("/badges", response_model=List[BadgeResponse])
def badges(user: models.User = Depends(get_current_user), db: Session = Depends(get_db_read)):
    return profile_service.list_badges(db, user.id)


@router.post("/badges", response_model=List[BadgeResponse], status_code=201)
def add_badge(
    payload: BadgeCreateRequest,
    user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db_write),
    dispatcher=Depends(get_dispatcher),
):
    return profile_service.add_badge(db, user.id, payload, dispatcher)


@router.get("/chefs", response_model=ChefList)
def chefs(limit: int = Query(20, ge=1, le=100), db: Session = Depends(get_db_read)):
    """List chefs ranked by recipe count, then followers."""
    return profile_service.list_chefs(db, limit)


@router.get("/users/{user_id}", response_model=UserProfileResponse)
def public_profile(
    user_id: int,
    viewer: Optional[models.User] = Depends(get_optional_user),
    db: Session = Depends(get_db_write),
):
    return profile_service.get_user_profile(db, viewer.id if viewer else None, user_id)


@router.get("/authors/{author_id}", response_model=AuthorProfileResponse)
def author_profile(
    author_id: int,
    viewer: Optional[models.User] = Depends(get_optional_user),
    db: Session = Depends(get_db_write),
):
    """Author page shown next to a recipe: profile plus latest recipes."""
    return profile_service.get_author_profile(db, viewer.id if viewer else None, author_id)


@router.get("/users/{user_id}/stats", response_model=UserStats)
def user_stats(user_id: int, db: Session = Depends(get_db_write)):
    return profile_service.get_stats(db, user_id)


@router.post("/users/{user_id}/follow", response_model=FollowResult)
def toggle_follow(
    user_id: int,
    user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db_write),
    dispatcher=Depends(get_dispatcher),
):
    """Follow the user, or unfollow if already following."""
    return social_graph.toggle_follow(db, user.id, user_id, dispatcher)


@router.get("/users/{user_id}/followers", response_model=UserListPage)
def followers(
    user_id: int,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db_read),
):
    return social_graph.list_followers(db, user_id, page, limit)


@router.get("/users/{user_id}/following", response_model=UserListPage)
def following(
    user_id: int,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db_read),
):
    return social_graph.list_following(db, user_id, page, limit)
