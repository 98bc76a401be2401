"""Social graph operations: follow, favorite and save.

Every operation has the same shape: validate, mutate the relationship row
and the affected counters in one transaction, dispatch a notification for
positive transitions only, then return the new state together with counts
re-read from the store. A counter moves only when the membership insert or
delete actually changed the set, so concurrent duplicate requests cannot
double-count.

Follow is a silent toggle, while adding an existing favorite or save (or
removing an absent one) is rejected with an `InvalidStateError`.
"""

from sqlalchemy.orm import Session

from core.exceptions import InvalidStateError, NotFoundError
from core.logger import get_logger
from core.repository import (
    BaseRepository, add_member, adjust_counter, atomic, count, has_member, read_column, remove_member,
)
from database import models
from schemas.profile_schema import UserListPage
from schemas.social_schema import FavoriteResult, FollowResult, SaveResult
from schemas.user_schema import UserSummary
from services.notification_dispatcher import (
    NotificationDispatcher, follow_event, notification_dispatcher, recipe_liked_event, recipe_saved_event,
)

logger = get_logger("services.social_graph")


def get_user_or_404(db: Session, user_id: int) -> models.User:
    user = db.get(models.User, user_id)
    if user is None:
        raise NotFoundError("User", user_id)
    return user


def get_recipe_or_404(db: Session, recipe_id: int) -> models.Recipe:
    recipe = db.get(models.Recipe, recipe_id)
    if recipe is None:
        raise NotFoundError("Recipe", recipe_id)
    return recipe


def is_following(db: Session, follower_id: int, following_id: int) -> bool:
    return has_member(db, models.Follow, follower_id=follower_id, following_id=following_id)


def is_favorite(db: Session, user_id: int, recipe_id: int) -> bool:
    return has_member(db, models.Favorite, user_id=user_id, recipe_id=recipe_id)


def is_saved(db: Session, user_id: int, recipe_id: int) -> bool:
    return has_member(db, models.SavedRecipe, user_id=user_id, recipe_id=recipe_id)


def toggle_follow(
    db: Session,
    actor_id: int,
    target_id: int,
    dispatcher: NotificationDispatcher = notification_dispatcher,
) -> FollowResult:
    """Follow `target_id` if the actor does not follow them yet, else unfollow.

    Raises:
        InvalidStateError: CANNOT_FOLLOW_SELF when actor and target match.
        NotFoundError: If either user does not exist.
    """
    if actor_id == target_id:
        raise InvalidStateError("You can't follow yourself", code="CANNOT_FOLLOW_SELF")

    actor = get_user_or_404(db, actor_id)
    get_user_or_404(db, target_id)

    was_following = is_following(db, actor_id, target_id)
    changed = False
    with atomic(db):
        if was_following:
            changed = remove_member(db, models.Follow, follower_id=actor_id, following_id=target_id)
            delta = -1
        else:
            changed = add_member(db, models.Follow, follower_id=actor_id, following_id=target_id)
            delta = 1
        if changed:
            adjust_counter(db, models.User, actor_id, "following_count", delta)
            adjust_counter(db, models.User, target_id, "followers_count", delta)

    now_following = not was_following
    if now_following and changed:
        dispatcher.dispatch(db, follow_event(actor, target_id))
    logger.info("User %s %s user %s", actor_id, "followed" if now_following else "unfollowed", target_id)

    return FollowResult(
        is_following=now_following,
        followers_count=read_column(db, models.User, target_id, "followers_count"),
        following_count=read_column(db, models.User, actor_id, "following_count"),
        message="Followed successfully" if now_following else "Unfollowed successfully",
    )


def _favorite_result(db: Session, actor_id: int, recipe_id: int, favorited: bool, message: str) -> FavoriteResult:
    return FavoriteResult(
        is_favorited=favorited,
        favorites_count=read_column(db, models.User, actor_id, "favorites_count"),
        likes_count=count(db, models.Favorite, recipe_id=recipe_id),
        message=message,
    )


def add_favorite(
    db: Session,
    actor_id: int,
    recipe_id: int,
    dispatcher: NotificationDispatcher = notification_dispatcher,
) -> FavoriteResult:
    """Add a recipe to the actor's favorites and count it as a like for its author.

    Raises:
        InvalidStateError: ALREADY_FAVORITED if the recipe is already a favorite.
    """
    actor = get_user_or_404(db, actor_id)
    recipe = get_recipe_or_404(db, recipe_id)
    author_id = recipe.author_id

    with atomic(db):
        if not add_member(db, models.Favorite, user_id=actor_id, recipe_id=recipe_id):
            raise InvalidStateError("Recipe already in favorites", code="ALREADY_FAVORITED")
        adjust_counter(db, models.User, actor_id, "favorites_count", 1)
        adjust_counter(db, models.User, author_id, "total_likes", 1)

    dispatcher.dispatch(db, recipe_liked_event(actor, recipe))
    return _favorite_result(db, actor_id, recipe_id, True, "Recipe added to favorites")


def remove_favorite(db: Session, actor_id: int, recipe_id: int) -> FavoriteResult:
    """Remove a recipe from the actor's favorites. Never notifies.

    Raises:
        InvalidStateError: NOT_IN_FAVORITES if the recipe is not a favorite.
    """
    get_user_or_404(db, actor_id)
    recipe = get_recipe_or_404(db, recipe_id)
    author_id = recipe.author_id

    with atomic(db):
        if not remove_member(db, models.Favorite, user_id=actor_id, recipe_id=recipe_id):
            raise InvalidStateError("Recipe not in favorites", code="NOT_IN_FAVORITES")
        adjust_counter(db, models.User, actor_id, "favorites_count", -1)
        adjust_counter(db, models.User, author_id, "total_likes", -1)

    return _favorite_result(db, actor_id, recipe_id, False, "Recipe removed from favorites")


def toggle_favorite(
    db: Session,
    actor_id: int,
    recipe_id: int,
    dispatcher: NotificationDispatcher = notification_dispatcher,
) -> FavoriteResult:
    if is_favorite(db, actor_id, recipe_id):
        return remove_favorite(db, actor_id, recipe_id)
    return add_favorite(db, actor_id, recipe_id, dispatcher)


def save_recipe(
    db: Session,
    actor_id: int,
    recipe_id: int,
    dispatcher: NotificationDispatcher = notification_dispatcher,
) -> SaveResult:
    """Bookmark a recipe into the actor's collection.

    Raises:
        InvalidStateError: ALREADY_SAVED if the recipe is already saved.
    """
    actor = get_user_or_404(db, actor_id)
    recipe = get_recipe_or_404(db, recipe_id)

    with atomic(db):
        if not add_member(db, models.SavedRecipe, user_id=actor_id, recipe_id=recipe_id):
            raise InvalidStateError("Recipe already saved", code="ALREADY_SAVED")

    dispatcher.dispatch(db, recipe_saved_event(actor, recipe))
    return SaveResult(
        is_saved=True,
        saved_recipes_count=count(db, models.SavedRecipe, user_id=actor_id),
        message="Recipe saved",
    )


def unsave_recipe(db: Session, actor_id: int, recipe_id: int) -> SaveResult:
    """Remove a recipe from the actor's collection.

    Raises:
        InvalidStateError: NOT_IN_SAVED if the recipe is not saved.
    """
    get_user_or_404(db, actor_id)
    with atomic(db):
        if not remove_member(db, models.SavedRecipe, user_id=actor_id, recipe_id=recipe_id):
            raise InvalidStateError("Recipe not in saved recipes", code="NOT_IN_SAVED")

    return SaveResult(
        is_saved=False,
        saved_recipes_count=count(db, models.SavedRecipe, user_id=actor_id),
        message="Recipe removed from saved",
    )


def _user_page(db: Session, user_id: int, join_on, where, page: int, limit: int) -> UserListPage:
    get_user_or_404(db, user_id)
    query = (
        db.query(models.User)
        .join(models.Follow, join_on)
        .filter(where)
        .order_by(models.Follow.created_at.desc())
    )
    users = BaseRepository(models.User, db).page(query, page, limit)
    return UserListPage(
        users=[UserSummary.model_validate(u) for u in users],
        page=page,
        limit=limit,
        total=query.count(),
    )


def list_followers(db: Session, user_id: int, page: int = 1, limit: int = 10) -> UserListPage:
    return _user_page(
        db, user_id,
        models.Follow.follower_id == models.User.id,
        models.Follow.following_id == user_id,
        page, limit,
    )


def list_following(db: Session, user_id: int, page: int = 1, limit: int = 10) -> UserListPage:
    return _user_page(
        db, user_id,
        models.Follow.following_id == models.User.id,
        models.Follow.follower_id == user_id,
        page, limit,
    )
