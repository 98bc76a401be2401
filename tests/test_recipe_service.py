"""Tests for recipe lifecycle, reviews and the deletion cascade."""

import pytest

from core.exceptions import InvalidStateError, NotFoundError, UnauthorizedError, ValidationError
from database import models
from schemas.recipe_schema import RecipeUpdateRequest, ReviewCreateRequest
from services import recipe_service, social_graph
from services.stats_service import recompute_stats


def test_create_recipe_counts_and_notifies(db, make_user, make_recipe):
    chef = make_user("chef")
    recipe = make_recipe(chef)

    db.refresh(chef)
    assert chef.recipes_count == 1
    notification = db.query(models.Notification).filter_by(recipient_id=chef.id).one()
    assert notification.type == "recipe_added"
    assert notification.recipe_id == recipe.id


def test_update_recipe_requires_owner(db, make_user, make_recipe):
    chef = make_user("chef")
    other = make_user("other")
    recipe = make_recipe(chef)

    with pytest.raises(UnauthorizedError):
        recipe_service.update_recipe(db, other.id, recipe.id, RecipeUpdateRequest(title="Mine now"))

    updated = recipe_service.update_recipe(db, chef.id, recipe.id, RecipeUpdateRequest(title="Green Shakshuka"))
    assert updated.title == "Green Shakshuka"
    assert updated.author_id == chef.id
    assert updated.servings == 2


def test_set_recipe_image_requires_owner(db, make_user, make_recipe):
    chef = make_user("chef")
    other = make_user("other")
    recipe = make_recipe(chef)

    with pytest.raises(UnauthorizedError) as exc_info:
        recipe_service.set_recipe_image(db, other.id, recipe.id, "/uploads/recipes/x.png")
    assert exc_info.value.message == "Not authorized to change the image of this recipe"

    updated = recipe_service.set_recipe_image(db, chef.id, recipe.id, "/uploads/recipes/x.png")
    assert updated.image_url == "/uploads/recipes/x.png"


def test_get_recipe_counts_views(db, make_user, make_recipe, dispatcher):
    chef = make_user("chef")
    viewer = make_user("viewer")
    recipe = make_recipe(chef)
    make_recipe(chef, title="Pancakes")
    social_graph.add_favorite(db, viewer.id, recipe.id, dispatcher)

    recipe_service.get_recipe(db, recipe.id)
    view = recipe_service.get_recipe(db, recipe.id, viewer.id)

    assert view.views == 2
    assert view.is_favorite is True
    assert view.is_saved is False
    assert view.likes_count == 1
    assert [r.title for r in view.similar_recipes] == ["Pancakes"]
    db.expire_all()
    assert db.get(models.User, chef.id).total_views == 2


def test_get_missing_recipe(db):
    with pytest.raises(NotFoundError) as exc_info:
        recipe_service.get_recipe(db, 42)
    assert exc_info.value.code == "RECIPE_NOT_FOUND"


def test_search_requires_query(db):
    with pytest.raises(ValidationError) as exc_info:
        recipe_service.search_recipes(db, "   ")
    assert exc_info.value.code == "MISSING_QUERY"


def test_search_matches_ingredients(db, make_user, make_recipe):
    chef = make_user("chef")
    make_recipe(chef, title="Tomato Soup", category="Soups", ingredients=[{"name": "Basil", "amount": "a bunch"}])
    make_recipe(chef, title="Porridge", ingredients=[{"name": "Oats", "amount": "1 cup"}])

    page = recipe_service.search_recipes(db, "basil")

    assert page.total == 1
    assert page.recipes[0].title == "Tomato Soup"
    assert page.query == "basil"


def test_list_recipes_pagination(db, make_user, make_recipe):
    chef = make_user("chef")
    for i in range(5):
        make_recipe(chef, title=f"Recipe {i}")

    page = recipe_service.list_recipes(db, page=2, limit=2)

    assert page.total == 5
    assert page.pages == 3
    assert len(page.recipes) == 2


def test_add_review_updates_rating(db, make_user, make_recipe, dispatcher):
    chef = make_user("chef")
    critic = make_user("critic")
    recipe = make_recipe(chef)

    review = recipe_service.add_review(db, critic.id, recipe.id, ReviewCreateRequest(rating=4, comment="Good"), dispatcher)

    assert review.author.username == "critic"
    assert review.recipe_title == "Shakshuka"
    db.refresh(recipe)
    assert recipe.rating == 4.0
    assert recipe.review_count == 1
    assert db.query(models.Notification).filter_by(recipient_id=chef.id, type="review_added").count() == 1


def test_duplicate_review_rejected_without_changes(db, make_user, make_recipe, dispatcher):
    chef = make_user("chef")
    critic = make_user("critic")
    recipe = make_recipe(chef)
    recipe_service.add_review(db, critic.id, recipe.id, ReviewCreateRequest(rating=5, comment="Great"), dispatcher)

    with pytest.raises(InvalidStateError) as exc_info:
        recipe_service.add_review(db, critic.id, recipe.id, ReviewCreateRequest(rating=1, comment="Bad"), dispatcher)

    assert exc_info.value.code == "DUPLICATE_REVIEW"
    db.refresh(recipe)
    assert recipe.review_count == 1
    assert recipe.rating == 5.0


def test_delete_review(db, make_user, make_recipe, dispatcher):
    chef = make_user("chef")
    critic = make_user("critic")
    recipe = make_recipe(chef)
    review = recipe_service.add_review(db, critic.id, recipe.id, ReviewCreateRequest(rating=3, comment="Fine"), dispatcher)

    with pytest.raises(UnauthorizedError):
        recipe_service.delete_review(db, chef.id, recipe.id, review.id)

    recipe_service.delete_review(db, critic.id, recipe.id, review.id)

    db.refresh(recipe)
    assert recipe.review_count == 0
    assert recipe.rating == 0
    assert recompute_stats(db, critic.id).reviews_count == 0


def test_delete_recipe_cascades(db, make_user, make_recipe, dispatcher):
    chef = make_user("chef")
    fans = [make_user(f"fan{i}") for i in range(3)]
    recipe = make_recipe(chef)
    keep = make_recipe(chef, title="Keeper")
    for fan in fans:
        social_graph.add_favorite(db, fan.id, recipe.id, dispatcher)
    social_graph.save_recipe(db, fans[0].id, recipe.id, dispatcher)
    recipe_service.add_review(db, fans[1].id, recipe.id, ReviewCreateRequest(rating=5, comment="Yum"), dispatcher)
    recipe_id = recipe.id

    cleanup = recipe_service.delete_recipe(db, chef.id, recipe_id)

    # recipe_added, three recipe_liked, recipe_saved and review_added
    assert cleanup == {"favorites": 3, "saved": 1, "reviews": 1, "notifications": 6}
    assert db.query(models.Favorite).filter_by(recipe_id=recipe_id).count() == 0
    assert db.query(models.SavedRecipe).filter_by(recipe_id=recipe_id).count() == 0
    assert db.query(models.Review).filter_by(recipe_id=recipe_id).count() == 0
    assert db.query(models.Notification).filter_by(recipe_id=recipe_id).count() == 0
    assert db.query(models.Recipe).filter_by(id=recipe_id).count() == 0
    assert db.get(models.Recipe, keep.id) is not None

    chef_row = db.get(models.User, chef.id)
    assert chef_row.recipes_count == 1
    assert chef_row.total_likes == 0
    for fan in fans:
        assert db.get(models.User, fan.id).favorites_count == 0
    assert db.get(models.User, fans[1].id).reviews_count == 0


def test_delete_recipe_requires_owner(db, make_user, make_recipe):
    chef = make_user("chef")
    other = make_user("other")
    recipe = make_recipe(chef)

    with pytest.raises(UnauthorizedError):
        recipe_service.delete_recipe(db, other.id, recipe.id)
    assert db.get(models.Recipe, recipe.id) is not None


def test_share_links(db, make_user, make_recipe):
    chef = make_user("chef")
    recipe = make_recipe(chef)

    assert recipe_service.share_recipe(db, recipe.id, "twitter").url.startswith("https://twitter.com/intent/tweet")
    assert "facebook.com" in recipe_service.share_recipe(db, recipe.id, "facebook").url
    assert recipe_service.share_recipe(db, recipe.id, "copy").url.endswith(f"/recipes/{recipe.id}")

    with pytest.raises(ValidationError) as exc_info:
        recipe_service.share_recipe(db, recipe.id, "myspace")
    assert exc_info.value.code == "UNSUPPORTED_PLATFORM"


def test_report_requires_reason(db, make_user, make_recipe):
    chef = make_user("chef")
    recipe = make_recipe(chef)

    with pytest.raises(ValidationError) as exc_info:
        recipe_service.report_recipe(db, chef.id, recipe.id, "")
    assert exc_info.value.code == "MISSING_REASON"
    recipe_service.report_recipe(db, chef.id, recipe.id, "spam")
