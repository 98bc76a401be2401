"""Profile and statistics facade.

Assembles the enriched profile read model consumed by every profile-viewing
endpoint: the user's public projection merged with freshly recomputed stats,
recent activity, relationship summaries and a derived user level.
"""

from datetime import datetime
from typing import List

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from core.exceptions import InvalidStateError, ValidationError
from core.logger import get_logger
from core.repository import save
from database import models
from schemas.enums import UserLevel
from schemas.profile_schema import (
    AuthorProfileResponse, ChefList, EnrichedProfile, RecentReview, UserProfileResponse, UserStats,
)
from schemas.recipe_schema import RecipeDetail, RecipeSummary
from schemas.user_schema import BadgeCreateRequest, BadgeResponse, ChefSummary, ProfileUpdateRequest, UserSummary
from services import recipe_service, stats_service
from services.notification_dispatcher import NotificationDispatcher, achievement_event, notification_dispatcher
from services.social_graph import get_user_or_404, is_following

logger = get_logger("services.profile_service")

LEVEL_THRESHOLDS = (
    (10000, UserLevel.MASTER_CHEF),
    (5000, UserLevel.EXPERT_CHEF),
    (2000, UserLevel.ADVANCED_CHEF),
    (500, UserLevel.INTERMEDIATE_CHEF),
    (100, UserLevel.BEGINNER_CHEF),
)

PROFILE_FIELDS = (
    "id", "username", "name", "email", "profile_picture", "cover_picture", "tagline", "bio",
    "location", "website", "cooking_style", "social_media", "interests", "specialties",
    "favorite_ingredients", "is_verified", "is_pro_chef", "pro_chef_info", "member_since", "last_active",
)

LIST_FIELDS = ("interests", "specialties", "favorite_ingredients")

REQUIRED_FIELDS = ("username", "email", "name")

RELATION_PREVIEW = 5


def user_points(stats: UserStats) -> int:
    return (
        stats.recipes_count * 10
        + stats.followers_count * 5
        + stats.reviews_count * 3
        + stats.total_likes * 2
        + stats.total_views
    )


def calculate_user_level(stats: UserStats) -> str:
    """Map weighted activity points to one of six ordered level labels."""
    points = user_points(stats)
    for threshold, level in LEVEL_THRESHOLDS:
        if points >= threshold:
            return level.value
    return UserLevel.NEW_COOK.value


def _projection(user: models.User) -> dict:
    data = {field: getattr(user, field) for field in PROFILE_FIELDS}
    for field in ("username", "name", "profile_picture", "cover_picture"):
        data[field] = data[field] or ""
    for field in LIST_FIELDS:
        data[field] = data[field] or []
    data["social_media"] = data["social_media"] or {}
    return data


def _summaries(rows) -> List[RecipeSummary]:
    return [RecipeSummary.model_validate(r) for r in rows]


def _recent_reviews(db: Session, user_id: int) -> List[RecentReview]:
    rows = (
        db.query(models.Review, models.Recipe.title)
        .outerjoin(models.Recipe, models.Recipe.id == models.Review.recipe_id)
        .filter(models.Review.author_id == user_id)
        .order_by(models.Review.created_at.desc())
        .limit(RELATION_PREVIEW)
        .all()
    )
    reviews = []
    for review, title in rows:
        item = RecentReview.model_validate(review)
        item.recipe_title = title
        reviews.append(item)
    return reviews


def _related_users(db: Session, join_on, where) -> List[UserSummary]:
    rows = (
        db.query(models.User)
        .join(models.Follow, join_on)
        .filter(where)
        .order_by(models.Follow.created_at.desc())
        .limit(RELATION_PREVIEW)
        .all()
    )
    return [UserSummary.model_validate(u) for u in rows]


def _collection(db: Session, link_model, user_id: int, limit=None):
    query = (
        db.query(models.Recipe)
        .join(link_model, link_model.recipe_id == models.Recipe.id)
        .filter(link_model.user_id == user_id)
        .order_by(link_model.created_at.desc())
    )
    if limit:
        query = query.limit(limit)
    return query.all()


def enrich(db: Session, user_id: int) -> EnrichedProfile:
    """Build the enriched profile for `user_id`.

    Stats are recomputed (and persisted) on every call. If the user is
    unknown or the profile cannot be assembled, the default-stats shape with
    empty profile fields is returned instead of a partial merge.
    """
    try:
        user = db.get(models.User, user_id)
        if user is None:
            logger.warning("Profile requested for unknown user %s", user_id)
            return EnrichedProfile()

        stats = stats_service.recompute_stats(db, user_id)
        recent_recipes = (
            db.query(models.Recipe)
            .filter(models.Recipe.author_id == user_id)
            .order_by(models.Recipe.created_at.desc())
            .limit(RELATION_PREVIEW)
            .all()
        )
        badges = db.query(models.Badge).filter(models.Badge.user_id == user_id).order_by(models.Badge.earned_at).all()

        return EnrichedProfile(
            **_projection(user),
            **stats.model_dump(),
            recent_recipes=_summaries(recent_recipes),
            recent_reviews=_recent_reviews(db, user_id),
            saved_recipes=_summaries(_collection(db, models.SavedRecipe, user_id, RELATION_PREVIEW)),
            favorites=_summaries(_collection(db, models.Favorite, user_id, RELATION_PREVIEW)),
            followers=_related_users(db, models.Follow.follower_id == models.User.id, models.Follow.following_id == user_id),
            following=_related_users(db, models.Follow.following_id == models.User.id, models.Follow.follower_id == user_id),
            badges=[BadgeResponse.model_validate(b) for b in badges],
            user_level=calculate_user_level(stats),
        )
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error building profile for user %s", user_id)
        return EnrichedProfile()


def get_own_profile(db: Session, user_id: int) -> EnrichedProfile:
    get_user_or_404(db, user_id)
    return enrich(db, user_id)


def get_user_profile(db: Session, viewer_id, user_id: int) -> UserProfileResponse:
    """Public profile of `user_id` as seen by `viewer_id` (may be anonymous).

    The email address is hidden unless the user opted in through privacy settings.
    """
    user = get_user_or_404(db, user_id)
    profile = UserProfileResponse(**enrich(db, user_id).model_dump())
    if viewer_id != user_id and not (user.privacy_settings or {}).get("show_email"):
        profile.email = None
    profile.is_following = bool(viewer_id) and viewer_id != user_id and is_following(db, viewer_id, user_id)
    return profile


def get_author_profile(db: Session, viewer_id, author_id: int) -> AuthorProfileResponse:
    """Author page: public profile plus the author's 10 latest recipes."""
    profile = get_user_profile(db, viewer_id, author_id)
    recipes = (
        db.query(models.Recipe)
        .filter(models.Recipe.author_id == author_id)
        .order_by(models.Recipe.created_at.desc())
        .limit(10)
        .all()
    )
    return AuthorProfileResponse(
        **profile.model_dump(),
        recipes=[recipe_service.to_detail(db, r) for r in recipes],
        is_own_profile=viewer_id == author_id,
    )


def _taken(db: Session, column, value: str, user_id: int) -> bool:
    return (
        db.query(models.User.id)
        .filter(func.lower(column) == value.lower(), models.User.id != user_id)
        .first()
        is not None
    )


def update_profile(db: Session, user_id: int, payload: ProfileUpdateRequest) -> EnrichedProfile:
    """Apply a partial profile update.

    Raises:
        ValidationError: VALIDATION_ERROR when username, email or name is
            explicitly cleared.
        InvalidStateError: USERNAME_EXISTS or EMAIL_EXISTS when the new value
            belongs to another account.
    """
    user = get_user_or_404(db, user_id)
    updates = payload.model_dump(exclude_unset=True)

    for field in REQUIRED_FIELDS:
        if field in updates and updates[field] is None:
            raise ValidationError(f"{field} cannot be empty", field=field)

    if updates.get("username") and _taken(db, models.User.username, updates["username"], user_id):
        raise InvalidStateError("Username already taken", code="USERNAME_EXISTS")
    if updates.get("email"):
        updates["email"] = updates["email"].lower()
        if _taken(db, models.User.email, updates["email"], user_id):
            raise InvalidStateError("Email already registered", code="EMAIL_EXISTS")

    for field in LIST_FIELDS:
        if updates.get(field) is not None:
            updates[field] = [item.strip() for item in updates[field] if item and item.strip()]

    for field, value in updates.items():
        setattr(user, field, value)
    user.last_active = datetime.utcnow()
    try:
        save(db, user)
    except IntegrityError:
        db.rollback()
        # a concurrent update can claim the value between the check above and the commit
        if updates.get("email") and _taken(db, models.User.email, updates["email"], user_id):
            raise InvalidStateError("Email already registered", code="EMAIL_EXISTS")
        if updates.get("username") and _taken(db, models.User.username, updates["username"], user_id):
            raise InvalidStateError("Username already taken", code="USERNAME_EXISTS")
        raise

    logger.info("Profile updated for user %s: %s", user_id, sorted(updates))
    return enrich(db, user_id)


def set_profile_picture(db: Session, user_id: int, url: str) -> EnrichedProfile:
    user = get_user_or_404(db, user_id)
    user.profile_picture = url
    save(db, user)
    return enrich(db, user_id)


def set_cover_picture(db: Session, user_id: int, url: str) -> EnrichedProfile:
    user = get_user_or_404(db, user_id)
    user.cover_picture = url
    save(db, user)
    return enrich(db, user_id)


def get_stats(db: Session, user_id: int) -> UserStats:
    get_user_or_404(db, user_id)
    return stats_service.recompute_stats(db, user_id)


def list_chefs(db: Session, limit: int = 20) -> ChefList:
    """Chefs with at least one recipe, ranked by persisted counters."""
    users = (
        db.query(models.User)
        .filter(models.User.recipes_count > 0)
        .order_by(
            models.User.recipes_count.desc(),
            models.User.followers_count.desc(),
            models.User.created_at.desc(),
        )
        .limit(limit)
        .all()
    )
    chefs = []
    for user in users:
        chef = ChefSummary.model_validate(user)
        chef.social_media = user.social_media or {}
        chefs.append(chef)
    return ChefList(users=chefs, total=len(chefs))


def list_badges(db: Session, user_id: int) -> List[BadgeResponse]:
    get_user_or_404(db, user_id)
    rows = db.query(models.Badge).filter(models.Badge.user_id == user_id).order_by(models.Badge.earned_at).all()
    return [BadgeResponse.model_validate(b) for b in rows]


def add_badge(
    db: Session,
    user_id: int,
    payload: BadgeCreateRequest,
    dispatcher: NotificationDispatcher = notification_dispatcher,
) -> List[BadgeResponse]:
    """Award a badge and notify the user.

    Raises:
        InvalidStateError: BADGE_EXISTS if the user already holds it.
    """
    get_user_or_404(db, user_id)
    exists = InvalidStateError("Badge already earned", code="BADGE_EXISTS")
    if db.query(models.Badge.id).filter(models.Badge.user_id == user_id, models.Badge.name == payload.name).first():
        raise exists
    try:
        save(db, models.Badge(user_id=user_id, **payload.model_dump()))
    except IntegrityError:
        db.rollback()
        raise exists

    dispatcher.dispatch(db, achievement_event(user_id, f'You earned the "{payload.name}" badge!'))
    logger.info("Badge %r awarded to user %s", payload.name, user_id)
    return list_badges(db, user_id)


def list_saved_recipes(db: Session, user_id: int) -> List[RecipeDetail]:
    get_user_or_404(db, user_id)
    return [recipe_service.to_detail(db, r) for r in _collection(db, models.SavedRecipe, user_id)]


def list_favorite_recipes(db: Session, user_id: int) -> List[RecipeDetail]:
    get_user_or_404(db, user_id)
    return [recipe_service.to_detail(db, r) for r in _collection(db, models.Favorite, user_id)]
