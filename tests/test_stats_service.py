"""Tests for counter recomputation and reconciliation."""

from unittest import mock

from sqlalchemy.exc import OperationalError

from database import models
from schemas.profile_schema import UserStats
from services import social_graph, stats_service
from services.stats_service import default_stats, recompute_stats


def test_recompute_is_idempotent(db, make_user, make_recipe, dispatcher):
    chef = make_user("chef")
    fan = make_user("fan")
    recipe = make_recipe(chef)
    social_graph.add_favorite(db, fan.id, recipe.id, dispatcher)
    social_graph.toggle_follow(db, fan.id, chef.id, dispatcher)

    first = recompute_stats(db, chef.id)
    second = recompute_stats(db, chef.id)

    assert first == second
    assert first.recipes_count == 1
    assert first.total_likes == 1
    assert first.followers_count == 1


def test_recompute_repairs_drifted_counters(db, make_user, make_recipe, dispatcher):
    chef = make_user("chef")
    fan = make_user("fan")
    make_recipe(chef)
    make_recipe(chef, title="Soup", category="Soups")
    social_graph.toggle_follow(db, fan.id, chef.id, dispatcher)

    db.query(models.User).filter(models.User.id == chef.id).update(
        {"recipes_count": 40, "followers_count": -3, "total_likes": 7}
    )
    db.commit()

    stats = recompute_stats(db, chef.id)

    assert stats.recipes_count == 2
    assert stats.followers_count == 1
    assert stats.total_likes == 0
    db.expire_all()
    stored = db.get(models.User, chef.id)
    assert (stored.recipes_count, stored.followers_count, stored.total_likes) == (2, 1, 0)


def test_unknown_user_gets_default_stats(db):
    assert recompute_stats(db, 12345) == default_stats()
    assert default_stats() == UserStats()


def test_store_failure_returns_default_stats(db, make_user, make_recipe, dispatcher):
    chef = make_user("chef")
    fan = make_user("fan")
    make_recipe(chef)
    social_graph.toggle_follow(db, fan.id, chef.id, dispatcher)

    failure = OperationalError("SELECT", {}, Exception("down"))
    with mock.patch.object(stats_service, "_count_from_source", side_effect=failure) as counted:
        assert recompute_stats(db, chef.id) == default_stats()

    assert counted.call_count == 1
    assert recompute_stats(db, chef.id).followers_count == 1


def test_saved_recipes_count_comes_from_source(db, make_user, make_recipe, dispatcher):
    chef = make_user("chef")
    reader = make_user("reader")
    first = make_recipe(chef)
    second = make_recipe(chef, title="Pancakes")
    social_graph.save_recipe(db, reader.id, first.id, dispatcher)
    social_graph.save_recipe(db, reader.id, second.id, dispatcher)

    assert recompute_stats(db, reader.id).saved_recipes_count == 2


def test_engagement_rate_is_zero_without_followers(db, make_user, make_recipe, dispatcher):
    chef = make_user("chef")
    fan = make_user("fan")
    recipe = make_recipe(chef)
    social_graph.add_favorite(db, fan.id, recipe.id, dispatcher)
    db.query(models.Recipe).filter(models.Recipe.id == recipe.id).update({"views": 250})
    db.commit()

    stats = recompute_stats(db, chef.id)

    assert stats.followers_count == 0
    assert stats.total_interactions == 251
    assert stats.engagement_rate == 0


def test_engagement_rate_with_followers(db, make_user, make_recipe, dispatcher):
    chef = make_user("chef")
    fans = [make_user(f"fan{i}") for i in range(4)]
    recipe = make_recipe(chef)
    for fan in fans:
        social_graph.toggle_follow(db, fan.id, chef.id, dispatcher)
    social_graph.add_favorite(db, fans[0].id, recipe.id, dispatcher)
    db.query(models.Recipe).filter(models.Recipe.id == recipe.id).update({"views": 9})
    db.commit()

    # (1 like + 9 views) / 4 followers
    assert recompute_stats(db, chef.id).engagement_rate == 250.0


def test_recompute_recipe_rating(db, make_user, make_recipe):
    chef = make_user("chef")
    recipe = make_recipe(chef)
    for rating, name in ((5, "a"), (4, "b"), (4, "c")):
        reviewer = make_user(name)
        db.add(models.Review(recipe_id=recipe.id, author_id=reviewer.id, rating=rating, comment="ok"))
    db.commit()

    updated = stats_service.recompute_recipe_rating(db, recipe.id)

    assert updated.rating == 4.3
    assert updated.review_count == 3
    assert stats_service.recompute_recipe_rating(db, 999) is None


def test_reconcile_all(db, make_user, make_recipe):
    chef = make_user("chef")
    make_recipe(chef)
    db.query(models.User).filter(models.User.id == chef.id).update({"recipes_count": 0})
    db.commit()

    result = stats_service.reconcile_all(db)

    assert result == {"users": 1, "recipes": 1}
    db.expire_all()
    assert db.get(models.User, chef.id).recipes_count == 1
