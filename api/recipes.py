"""Recipe API router.

Recipe CRUD and listings, favorites and saves, reviews, sharing and
reporting.
"""

from typing import Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile
from sqlalchemy.orm import Session

from core.logger import get_logger
from core.security import get_current_user, get_optional_user
from database import models
from database.deps import get_db_read, get_db_write, get_dispatcher, get_image_storage
from schemas import (
    Category, DeleteResponse, FavoriteResult, MessageResponse, RecipeCreateRequest, RecipeDetail, RecipePage,
    RecipeUpdateRequest, RecipeView, ReportRequest, ReviewCreateRequest, ReviewPage, ReviewResponse,
    SaveResult, ShareRequest, ShareResponse,
)
from services import recipe_service, social_graph

logger = get_logger("api.recipes")
router = APIRouter(prefix="/api/recipes", tags=["recipes"])


@router.get("", response_model=RecipePage)
def list_recipes(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    category: Optional[str] = None,
    difficulty: Optional[str] = None,
    search: Optional[str] = None,
    db: Session = Depends(get_db_read),
):
    return recipe_service.list_recipes(db, page, limit, category, difficulty, search)


@router.get("/search", response_model=RecipePage)
def search_recipes(
    q: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db_read),
):
    """Search titles, descriptions, categories and ingredients."""
    return recipe_service.search_recipes(db, q, page, limit)


@router.get("/category/{category}", response_model=RecipePage)
def recipes_by_category(
    category: Category,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db_read),
):
    return recipe_service.list_recipes(db, page, limit, category=category.value)


@router.get("/user/{user_id}", response_model=RecipePage)
def recipes_by_user(user_id: int, db: Session = Depends(get_db_read)):
    return recipe_service.list_user_recipes(db, user_id)


@router.post("", response_model=RecipeDetail, status_code=201)
def create_recipe(
    payload: RecipeCreateRequest,
    user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db_write),
    dispatcher=Depends(get_dispatcher),
):
    return recipe_service.create_recipe(db, user.id, payload, dispatcher)


@router.get("/{recipe_id}", response_model=RecipeView)
def get_recipe(
    recipe_id: int,
    viewer: Optional[models.User] = Depends(get_optional_user),
    db: Session = Depends(get_db_write),
):
    """Recipe page; counts a view for the recipe and its author."""
    return recipe_service.get_recipe(db, recipe_id, viewer.id if viewer else None)


@router.put("/{recipe_id}", response_model=RecipeDetail)
def update_recipe(
    recipe_id: int,
    payload: RecipeUpdateRequest,
    user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db_write),
):
    return recipe_service.update_recipe(db, user.id, recipe_id, payload)


@router.post("/{recipe_id}/image", response_model=RecipeDetail)
def upload_recipe_image(
    recipe_id: int,
    image: UploadFile = File(...),
    user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db_write),
    storage=Depends(get_image_storage),
):
    recipe_service.get_owned_recipe(db, user.id, recipe_id, "change the image of")
    url = storage.store(image, "recipes")
    return recipe_service.set_recipe_image(db, user.id, recipe_id, url)


@router.delete("/{recipe_id}", response_model=DeleteResponse)
def delete_recipe(recipe_id: int, user: models.User = Depends(get_current_user), db: Session = Depends(get_db_write)):
    """Delete a recipe with its reviews, favorites and saves."""
    cleanup = recipe_service.delete_recipe(db, user.id, recipe_id)
    return DeleteResponse(id=recipe_id, message="Recipe deleted successfully", cleanup=cleanup)


@router.post("/{recipe_id}/favorite", response_model=FavoriteResult)
def add_favorite(
    recipe_id: int,
    user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db_write),
    dispatcher=Depends(get_dispatcher),
):
    return social_graph.add_favorite(db, user.id, recipe_id, dispatcher)


@router.delete("/{recipe_id}/favorite", response_model=FavoriteResult)
def remove_favorite(recipe_id: int, user: models.User = Depends(get_current_user), db: Session = Depends(get_db_write)):
    return social_graph.remove_favorite(db, user.id, recipe_id)


@router.post("/{recipe_id}/favorite/toggle", response_model=FavoriteResult)
def toggle_favorite(
    recipe_id: int,
    user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db_write),
    dispatcher=Depends(get_dispatcher),
):
    return social_graph.toggle_favorite(db, user.id, recipe_id, dispatcher)


@router.post("/{recipe_id}/save", response_model=SaveResult)
def save_recipe(
    recipe_id: int,
    user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db_write),
    dispatcher=Depends(get_dispatcher),
):
    return social_graph.save_recipe(db, user.id, recipe_id, dispatcher)


@router.delete("/{recipe_id}/save", response_model=SaveResult)
def unsave_recipe(recipe_id: int, user: models.User = Depends(get_current_user), db: Session = Depends(get_db_write)):
    return social_graph.unsave_recipe(db, user.id, recipe_id)


@router.get("/{recipe_id}/reviews", response_model=ReviewPage)
def list_reviews(
    recipe_id: int,
    page: int = Query(1, ge=1),
    limit: int = Query(5, ge=1, le=100),
    db: Session = Depends(get_db_read),
):
    return recipe_service.list_reviews(db, recipe_id, page, limit)


@router.post("/{recipe_id}/reviews", response_model=ReviewResponse, status_code=201)
def add_review(
    recipe_id: int,
    payload: ReviewCreateRequest,
    user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db_write),
    dispatcher=Depends(get_dispatcher),
):
    return recipe_service.add_review(db, user.id, recipe_id, payload, dispatcher)


@router.delete("/{recipe_id}/reviews/{review_id}", response_model=MessageResponse)
def delete_review(
    recipe_id: int,
    review_id: int,
    user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db_write),
):
    recipe_service.delete_review(db, user.id, recipe_id, review_id)
    return MessageResponse(message="Review deleted successfully")


@router.post("/{recipe_id}/share", response_model=ShareResponse)
def share_recipe(recipe_id: int, payload: ShareRequest, db: Session = Depends(get_db_read)):
    return recipe_service.share_recipe(db, recipe_id, payload.platform)


@router.post("/{recipe_id}/report", response_model=MessageResponse)
def report_recipe(
    recipe_id: int,
    payload: ReportRequest,
    user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db_read),
):
    recipe_service.report_recipe(db, user.id, recipe_id, payload.reason)
    return MessageResponse(message="Recipe reported successfully")
