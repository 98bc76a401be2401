"""Recipe and review operations.

Covers the recipe lifecycle (create, update, view, delete) and reviews.
Recipe deletion is modelled as an explicit `RecipeDeletion` operation: the
data steps run in a fixed order inside one transaction, and counter
reconciliation for every affected user runs afterwards as a separate,
independently logged step.
"""

import math
from typing import Dict, List, Optional
from urllib.parse import quote

from sqlalchemy import String, cast, delete, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.config import FRONTEND_URL
from core.exceptions import InvalidStateError, NotFoundError, UnauthorizedError, ValidationError
from core.logger import get_logger
from core.repository import BaseRepository, adjust_counter, atomic, count, save
from database import models
from schemas.enums import SharePlatform
from schemas.recipe_schema import (
    RecipeCreateRequest, RecipeDetail, RecipePage, RecipeSummary, RecipeUpdateRequest, RecipeView,
    ReviewCreateRequest, ReviewPage, ReviewResponse, ShareResponse,
)
from schemas.user_schema import UserSummary
from services import stats_service
from services.notification_dispatcher import (
    NotificationDispatcher, notification_dispatcher, recipe_added_event, review_added_event,
)
from services.social_graph import get_recipe_or_404, get_user_or_404, is_favorite, is_saved

logger = get_logger("services.recipe_service")


def _ensure_owner(recipe: models.Recipe, actor_id: int, action: str) -> None:
    if recipe.author_id != actor_id:
        raise UnauthorizedError(f"Not authorized to {action} this recipe")


def to_detail(db: Session, recipe: models.Recipe) -> RecipeDetail:
    """Serialize a recipe with its author summary and like count."""
    detail = RecipeDetail.model_validate(recipe)
    author = db.get(models.User, recipe.author_id)
    detail.author = UserSummary.model_validate(author) if author else None
    detail.likes_count = count(db, models.Favorite, recipe_id=recipe.id)
    return detail


def _page(db: Session, query, page: int, limit: int, search: Optional[str] = None) -> RecipePage:
    total = query.count()
    rows = BaseRepository(models.Recipe, db).page(query.order_by(models.Recipe.created_at.desc()), page, limit)
    return RecipePage(
        recipes=[to_detail(db, r) for r in rows],
        page=page,
        limit=limit,
        total=total,
        pages=math.ceil(total / limit) if limit else 0,
        query=search,
    )


def create_recipe(
    db: Session,
    author_id: int,
    payload: RecipeCreateRequest,
    dispatcher: NotificationDispatcher = notification_dispatcher,
    image_url: Optional[str] = None,
) -> RecipeDetail:
    """Publish a recipe for `author_id` and bump their recipe counter."""
    get_user_or_404(db, author_id)
    data = payload.model_dump(mode="json")
    recipe = models.Recipe(author_id=author_id, image_url=image_url, **data)
    with atomic(db):
        db.add(recipe)
        db.flush()
        adjust_counter(db, models.User, author_id, "recipes_count", 1)
    db.refresh(recipe)
    logger.info("Recipe %s created by user %s", recipe.id, author_id)

    dispatcher.dispatch(db, recipe_added_event(recipe))
    return to_detail(db, recipe)


def update_recipe(db: Session, actor_id: int, recipe_id: int, payload: RecipeUpdateRequest) -> RecipeDetail:
    """Apply a partial update. Only the author may update; the author never changes."""
    recipe = get_recipe_or_404(db, recipe_id)
    _ensure_owner(recipe, actor_id, "update")

    updates = payload.model_dump(mode="json", exclude_unset=True, exclude={"remove_image"})
    for field, value in updates.items():
        setattr(recipe, field, value)
    if payload.remove_image:
        recipe.image_url = None
    recipe = save(db, recipe)
    logger.info("Recipe %s updated fields=%s", recipe_id, sorted(updates))
    return to_detail(db, recipe)


def get_owned_recipe(db: Session, actor_id: int, recipe_id: int, action: str = "update") -> models.Recipe:
    recipe = get_recipe_or_404(db, recipe_id)
    _ensure_owner(recipe, actor_id, action)
    return recipe


def set_recipe_image(db: Session, actor_id: int, recipe_id: int, image_url: str) -> RecipeDetail:
    recipe = get_owned_recipe(db, actor_id, recipe_id, "change the image of")
    recipe.image_url = image_url
    return to_detail(db, save(db, recipe))


def get_recipe(db: Session, recipe_id: int, viewer_id: Optional[int] = None) -> RecipeView:
    """Return a recipe page and record the view on the recipe and its author."""
    recipe = get_recipe_or_404(db, recipe_id)
    with atomic(db):
        adjust_counter(db, models.Recipe, recipe_id, "views", 1)
        adjust_counter(db, models.User, recipe.author_id, "total_views", 1)
    db.refresh(recipe)

    reviews = (
        db.query(models.Review)
        .filter(models.Review.recipe_id == recipe_id)
        .order_by(models.Review.created_at.desc())
        .limit(5)
        .all()
    )
    similar = (
        db.query(models.Recipe)
        .filter(models.Recipe.category == recipe.category, models.Recipe.id != recipe_id)
        .limit(4)
        .all()
    )

    view = RecipeView(**to_detail(db, recipe).model_dump())
    view.reviews = [_review_response(db, r) for r in reviews]
    view.similar_recipes = [RecipeSummary.model_validate(r) for r in similar]
    view.average_rating = stats_service.calculate_average_rating(db, recipe_id)
    if viewer_id is not None:
        view.is_favorite = is_favorite(db, viewer_id, recipe_id)
        view.is_saved = is_saved(db, viewer_id, recipe_id)
    return view


def list_recipes(
    db: Session,
    page: int = 1,
    limit: int = 10,
    category: Optional[str] = None,
    difficulty: Optional[str] = None,
    search: Optional[str] = None,
) -> RecipePage:
    query = db.query(models.Recipe)
    if category:
        query = query.filter(models.Recipe.category == category)
    if difficulty:
        query = query.filter(models.Recipe.difficulty == difficulty)
    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(models.Recipe.title.ilike(pattern), models.Recipe.description.ilike(pattern)))
    return _page(db, query, page, limit)


def search_recipes(db: Session, q: Optional[str], page: int = 1, limit: int = 10) -> RecipePage:
    """Search title, description, category and ingredient names.

    Raises:
        ValidationError: MISSING_QUERY when `q` is blank.
    """
    if not q or not q.strip():
        raise ValidationError("Search query is required", field="q", code="MISSING_QUERY")
    term = q.strip()
    pattern = f"%{term}%"

    query = db.query(models.Recipe).filter(
        or_(
            models.Recipe.title.ilike(pattern),
            models.Recipe.description.ilike(pattern),
            models.Recipe.category.ilike(pattern),
            cast(models.Recipe.ingredients, String).ilike(pattern),
        )
    )
    return _page(db, query, page, limit, search=term)


def list_user_recipes(db: Session, user_id: int, page: int = 1, limit: int = 200) -> RecipePage:
    get_user_or_404(db, user_id)
    return _page(db, db.query(models.Recipe).filter(models.Recipe.author_id == user_id), page, limit)


class RecipeDeletion:
    """Cascade delete of a recipe.

    Data steps run in this order within one transaction: strip the recipe
    from favorites and saved collections, delete its reviews, detach
    notifications, delete the recipe, decrement the author's recipe counter.
    `reconcile` then recomputes stats for everyone whose counters referenced
    the recipe; failures there are logged and repaired by the next
    recomputation rather than undoing the deletion.
    """

    def __init__(self, db: Session, actor_id: int, recipe_id: int):
        self.db = db
        self.actor_id = actor_id
        self.recipe_id = recipe_id
        self.affected_user_ids: set = set()
        self.cleanup: Dict[str, int] = {}

    def _user_ids(self, column, where) -> List[int]:
        return [row[0] for row in self.db.execute(select(column).where(where)).all()]

    def run(self) -> Dict[str, int]:
        db = self.db
        recipe = get_recipe_or_404(db, self.recipe_id)
        _ensure_owner(recipe, self.actor_id, "delete")
        author_id = recipe.author_id

        with atomic(db):
            self.affected_user_ids.update(
                self._user_ids(models.Favorite.user_id, models.Favorite.recipe_id == self.recipe_id)
            )
            self.affected_user_ids.update(
                self._user_ids(models.Review.author_id, models.Review.recipe_id == self.recipe_id)
            )
            self.cleanup["favorites"] = db.execute(
                delete(models.Favorite).where(models.Favorite.recipe_id == self.recipe_id)
            ).rowcount
            self.cleanup["saved"] = db.execute(
                delete(models.SavedRecipe).where(models.SavedRecipe.recipe_id == self.recipe_id)
            ).rowcount
            self.cleanup["reviews"] = db.execute(
                delete(models.Review).where(models.Review.recipe_id == self.recipe_id)
            ).rowcount
            self.cleanup["notifications"] = db.execute(
                update(models.Notification)
                .where(models.Notification.recipe_id == self.recipe_id)
                .values(recipe_id=None)
            ).rowcount
            db.execute(delete(models.Recipe).where(models.Recipe.id == self.recipe_id))
            adjust_counter(db, models.User, author_id, "recipes_count", -1)
        db.expire_all()

        logger.info("Recipe %s deleted by user %s: %s", self.recipe_id, self.actor_id, self.cleanup)
        self.affected_user_ids.add(author_id)
        self.reconcile()
        return self.cleanup

    def reconcile(self) -> None:
        for user_id in sorted(self.affected_user_ids):
            try:
                stats_service.recompute_stats(self.db, user_id)
            except Exception:
                logger.exception("Counter reconciliation failed for user %s after deleting recipe %s",
                                 user_id, self.recipe_id)


def delete_recipe(db: Session, actor_id: int, recipe_id: int) -> Dict[str, int]:
    """Delete a recipe owned by `actor_id` and everything that references it."""
    return RecipeDeletion(db, actor_id, recipe_id).run()


def _review_response(db: Session, review: models.Review) -> ReviewResponse:
    response = ReviewResponse.model_validate(review)
    author = db.get(models.User, review.author_id)
    response.author = UserSummary.model_validate(author) if author else None
    recipe = db.get(models.Recipe, review.recipe_id)
    response.recipe_title = recipe.title if recipe else None
    return response


def add_review(
    db: Session,
    actor_id: int,
    recipe_id: int,
    payload: ReviewCreateRequest,
    dispatcher: NotificationDispatcher = notification_dispatcher,
) -> ReviewResponse:
    """Add the actor's single review of a recipe and refresh the recipe rating.

    Raises:
        InvalidStateError: DUPLICATE_REVIEW if the actor already reviewed it.
    """
    reviewer = get_user_or_404(db, actor_id)
    recipe = get_recipe_or_404(db, recipe_id)

    duplicate = InvalidStateError("You have already reviewed this recipe", code="DUPLICATE_REVIEW")
    if count(db, models.Review, author_id=actor_id, recipe_id=recipe_id):
        raise duplicate

    review = models.Review(author_id=actor_id, recipe_id=recipe_id, rating=payload.rating, comment=payload.comment)
    try:
        with atomic(db):
            db.add(review)
            db.flush()
            adjust_counter(db, models.User, actor_id, "reviews_count", 1)
    except IntegrityError:
        raise duplicate
    db.refresh(review)

    stats_service.recompute_recipe_rating(db, recipe_id)
    dispatcher.dispatch(db, review_added_event(reviewer, recipe))
    logger.info("Review %s added to recipe %s by user %s", review.id, recipe_id, actor_id)
    return _review_response(db, review)


def delete_review(db: Session, actor_id: int, recipe_id: int, review_id: int) -> None:
    """Delete a review owned by `actor_id` and refresh the recipe rating."""
    review = (
        db.query(models.Review)
        .filter(models.Review.id == review_id, models.Review.recipe_id == recipe_id)
        .first()
    )
    if review is None:
        raise NotFoundError("Review", review_id)
    if review.author_id != actor_id:
        raise UnauthorizedError("Not authorized to delete this review")

    with atomic(db):
        removed = db.execute(delete(models.Review).where(models.Review.id == review_id)).rowcount
        if removed:
            adjust_counter(db, models.User, actor_id, "reviews_count", -1)
    stats_service.recompute_recipe_rating(db, recipe_id)
    logger.info("Review %s deleted from recipe %s", review_id, recipe_id)


def list_reviews(db: Session, recipe_id: int, page: int = 1, limit: int = 5) -> ReviewPage:
    get_recipe_or_404(db, recipe_id)
    query = db.query(models.Review).filter(models.Review.recipe_id == recipe_id)
    total = query.count()
    rows = BaseRepository(models.Review, db).page(query.order_by(models.Review.created_at.desc()), page, limit)
    return ReviewPage(
        reviews=[_review_response(db, r) for r in rows],
        page=page,
        limit=limit,
        total=total,
        pages=math.ceil(total / limit) if limit else 0,
    )


def share_recipe(db: Session, recipe_id: int, platform: str) -> ShareResponse:
    """Build a share URL for the given platform.

    Raises:
        ValidationError: UNSUPPORTED_PLATFORM for anything but
            twitter, facebook, whatsapp or copy.
    """
    recipe = get_recipe_or_404(db, recipe_id)
    try:
        platform = SharePlatform(str(platform).lower())
    except ValueError:
        raise ValidationError(f"Unsupported platform: {platform}", field="platform", code="UNSUPPORTED_PLATFORM")

    recipe_url = f"{FRONTEND_URL}/recipes/{recipe_id}"
    encoded_url = quote(recipe_url, safe="")
    encoded_title = quote(recipe.title, safe="")

    if platform is SharePlatform.TWITTER:
        url = f"https://twitter.com/intent/tweet?text={encoded_title}&url={encoded_url}"
    elif platform is SharePlatform.FACEBOOK:
        url = f"https://www.facebook.com/sharer/sharer.php?u={encoded_url}"
    elif platform is SharePlatform.WHATSAPP:
        url = f"https://wa.me/?text={encoded_title}%20{encoded_url}"
    else:
        url = recipe_url

    message = "Link copied to clipboard" if platform is SharePlatform.COPY else f"Share URL generated for {platform.value}"
    return ShareResponse(url=url, message=message)


def report_recipe(db: Session, actor_id: int, recipe_id: int, reason: str) -> None:
    """Record a moderation report for a recipe in the application log."""
    get_recipe_or_404(db, recipe_id)
    if not reason or not reason.strip():
        raise ValidationError("Reason is required", field="reason", code="MISSING_REASON")
    logger.warning("Recipe reported: recipe=%s user=%s reason=%s", recipe_id, actor_id, reason.strip())
