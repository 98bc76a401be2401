"""Counter maintenance engine.

Recomputes a user's aggregate statistics from the source tables and writes
the scalar counters back onto the user row, so list views can sort on the
persisted columns while any drift in the incrementally maintained counters is
repaired on demand. Read paths depend on this module being available, so
store failures degrade to the all-zero default statistics instead of
propagating.

Run ``python -m services.stats_service`` to reconcile every user and recipe.
"""

from typing import Dict, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.logger import get_logger
from database import models
from database.models import engagement_rate
from schemas.profile_schema import UserStats

logger = get_logger("services.stats_service")

PERSISTED_COUNTERS = (
    "recipes_count",
    "favorites_count",
    "reviews_count",
    "followers_count",
    "following_count",
    "total_likes",
    "total_views",
)


def default_stats() -> UserStats:
    """Return the all-zero statistics object."""
    return UserStats()


def _scalar(db: Session, stmt) -> int:
    return int(db.execute(stmt).scalar() or 0)


def _count_from_source(db: Session, user_id: int) -> Dict[str, int]:
    """Query every aggregate for `user_id` directly from the source tables."""
    authored = models.Recipe.author_id == user_id
    return {
        "recipes_count": _scalar(db, select(func.count(models.Recipe.id)).where(authored)),
        "favorites_count": _scalar(
            db, select(func.count()).select_from(models.Favorite).where(models.Favorite.user_id == user_id)
        ),
        "reviews_count": _scalar(
            db, select(func.count(models.Review.id)).where(models.Review.author_id == user_id)
        ),
        # Favorites are the like mechanism: likes received are favorites on authored recipes.
        "total_likes": _scalar(
            db,
            select(func.count())
            .select_from(models.Favorite)
            .join(models.Recipe, models.Recipe.id == models.Favorite.recipe_id)
            .where(authored),
        ),
        "total_views": _scalar(db, select(func.coalesce(func.sum(models.Recipe.views), 0)).where(authored)),
        "followers_count": _scalar(
            db, select(func.count()).select_from(models.Follow).where(models.Follow.following_id == user_id)
        ),
        "following_count": _scalar(
            db, select(func.count()).select_from(models.Follow).where(models.Follow.follower_id == user_id)
        ),
        "saved_recipes_count": _scalar(
            db, select(func.count()).select_from(models.SavedRecipe).where(models.SavedRecipe.user_id == user_id)
        ),
    }


def recompute_stats(db: Session, user_id: int) -> UserStats:
    """Recompute a user's statistics and persist the counters on the user row.

    Args:
        db: SQLAlchemy session (write-capable).
        user_id: ID of the user to reconcile.

    Returns:
        `UserStats` reflecting the store at call time. Unknown users and
        store errors yield `default_stats()`; errors are logged.
    """
    try:
        user = db.get(models.User, user_id, populate_existing=True)
        if user is None:
            logger.warning("Stats requested for unknown user %s", user_id)
            return default_stats()

        counts = _count_from_source(db, user_id)
        drifted = {
            field: (getattr(user, field), counts[field])
            for field in PERSISTED_COUNTERS
            if getattr(user, field) != counts[field]
        }
        if drifted:
            logger.info("Reconciling counters for user %s: %s", user_id, drifted)
            for field in PERSISTED_COUNTERS:
                setattr(user, field, counts[field])
            db.commit()

        stats = UserStats(
            **counts,
            total_interactions=counts["total_likes"] + counts["total_views"],
            engagement_rate=engagement_rate(counts["total_likes"], counts["total_views"], counts["followers_count"]),
        )
        logger.debug("Stats for user %s: %s", user_id, stats.model_dump())
        return stats
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error calculating stats for user %s", user_id)
        return default_stats()


def calculate_average_rating(db: Session, recipe_id: int) -> float:
    """Average review rating for a recipe rounded to one decimal (0 if unrated)."""
    average = db.execute(
        select(func.avg(models.Review.rating)).where(models.Review.recipe_id == recipe_id)
    ).scalar()
    return round(float(average), 1) if average is not None else 0.0


def recompute_recipe_rating(db: Session, recipe_id: int) -> Optional[models.Recipe]:
    """Reconcile a recipe's `rating` and `review_count` from its reviews.

    Unlike `recompute_stats` this runs inside write paths, so store errors
    propagate to the caller.
    """
    recipe = db.get(models.Recipe, recipe_id)
    if recipe is None:
        return None
    recipe.rating = calculate_average_rating(db, recipe_id)
    recipe.review_count = _scalar(
        db, select(func.count(models.Review.id)).where(models.Review.recipe_id == recipe_id)
    )
    db.commit()
    db.refresh(recipe)
    return recipe


def reconcile_all(db: Session) -> Dict[str, int]:
    """Repair every user's counters and every recipe's rating."""
    user_ids = [row[0] for row in db.execute(select(models.User.id)).all()]
    recipe_ids = [row[0] for row in db.execute(select(models.Recipe.id)).all()]
    for user_id in user_ids:
        recompute_stats(db, user_id)
    for recipe_id in recipe_ids:
        recompute_recipe_rating(db, recipe_id)
    logger.info("Reconciled %s users and %s recipes", len(user_ids), len(recipe_ids))
    return {"users": len(user_ids), "recipes": len(recipe_ids)}


if __name__ == "__main__":
    from database.database import WriteSessionLocal

    session = WriteSessionLocal()
    try:
        print(reconcile_all(session))
    finally:
        session.close()
