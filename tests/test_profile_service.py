"""Tests for user levels and the enriched profile read model."""

from unittest import mock

import pytest
from sqlalchemy.exc import OperationalError

from core.exceptions import InvalidStateError, ValidationError
from database import models
from schemas.profile_schema import EnrichedProfile, UserStats
from schemas.user_schema import BadgeCreateRequest, ProfileUpdateRequest
from services import profile_service, social_graph, stats_service
from services.profile_service import calculate_user_level


@pytest.mark.parametrize(
    "stats, expected",
    [
        (UserStats(), "New Cook"),
        (UserStats(total_views=99), "New Cook"),
        (UserStats(recipes_count=10), "Beginner Chef"),
        (UserStats(followers_count=100), "Intermediate Chef"),
        (UserStats(total_likes=1000), "Advanced Chef"),
        (UserStats(recipes_count=200, followers_count=600), "Expert Chef"),
        (UserStats(total_views=10000), "Master Chef"),
    ],
)
def test_calculate_user_level(stats, expected):
    assert calculate_user_level(stats) == expected


def test_user_level_points_weighting():
    # 2*10 + 3*5 + 4*3 + 5*2 + 43 = 100
    stats = UserStats(recipes_count=2, followers_count=3, reviews_count=4, total_likes=5, total_views=43)
    assert calculate_user_level(stats) == "Beginner Chef"


def test_enrich_merges_stats_and_relations(db, make_user, make_recipe, dispatcher):
    chef = make_user("chef", tagline="Soup person")
    fan = make_user("fan")
    recipe = make_recipe(chef)
    social_graph.toggle_follow(db, fan.id, chef.id, dispatcher)
    social_graph.add_favorite(db, chef.id, recipe.id, dispatcher)

    profile = profile_service.enrich(db, chef.id)

    assert profile.username == "chef"
    assert profile.tagline == "Soup person"
    assert profile.recipes_count == 1
    assert profile.followers_count == 1
    assert [u.username for u in profile.followers] == ["fan"]
    assert [r.id for r in profile.recent_recipes] == [recipe.id]
    assert [r.id for r in profile.favorites] == [recipe.id]
    assert profile.user_level == "New Cook"
    assert not hasattr(profile, "password_hash")


def test_enrich_unknown_user_returns_default_shape(db):
    profile = profile_service.enrich(db, 404)
    assert profile == EnrichedProfile()
    assert profile.recipes_count == 0
    assert profile.username == ""


def test_public_profile_hides_email_and_reports_following(db, make_user, dispatcher):
    chef = make_user("chef")
    fan = make_user("fan")
    social_graph.toggle_follow(db, fan.id, chef.id, dispatcher)

    as_fan = profile_service.get_user_profile(db, fan.id, chef.id)
    anonymous = profile_service.get_user_profile(db, None, chef.id)

    assert as_fan.is_following is True
    assert as_fan.email is None
    assert anonymous.is_following is False


def test_author_profile(db, make_user, make_recipe):
    chef = make_user("chef")
    for i in range(12):
        make_recipe(chef, title=f"Dish {i}")

    own = profile_service.get_author_profile(db, chef.id, chef.id)

    assert own.is_own_profile is True
    assert len(own.recipes) == 10
    assert own.recipes_count == 12


def test_update_profile_rejects_taken_username(db, make_user):
    make_user("taken")
    me = make_user("me")

    with pytest.raises(InvalidStateError) as exc_info:
        profile_service.update_profile(db, me.id, ProfileUpdateRequest(username="Taken"))
    assert exc_info.value.code == "USERNAME_EXISTS"

    with pytest.raises(InvalidStateError) as exc_info:
        profile_service.update_profile(db, me.id, ProfileUpdateRequest(email="taken@example.com"))
    assert exc_info.value.code == "EMAIL_EXISTS"


@pytest.mark.parametrize("field", ["name", "email", "username"])
def test_update_profile_rejects_cleared_required_field(db, make_user, field):
    me = make_user("me")

    with pytest.raises(ValidationError) as exc_info:
        profile_service.update_profile(db, me.id, ProfileUpdateRequest(**{field: None}))

    assert exc_info.value.code == "VALIDATION_ERROR"
    assert exc_info.value.details == {"field": field}
    db.refresh(me)
    assert me.name == "Me"
    assert me.email == "me@example.com"
    assert me.username == "me"


def test_update_profile_trims_list_fields(db, make_user):
    me = make_user("me")

    profile = profile_service.update_profile(
        db, me.id, ProfileUpdateRequest(bio="Hello", interests=[" baking ", "", "  "], specialties=["Pasta"])
    )

    assert profile.bio == "Hello"
    assert profile.interests == ["baking"]
    assert profile.specialties == ["Pasta"]


def test_list_chefs_sorted_by_recipes(db, make_user, make_recipe):
    prolific = make_user("prolific")
    casual = make_user("casual")
    make_user("lurker")
    make_recipe(casual)
    for i in range(3):
        make_recipe(prolific, title=f"Dish {i}")

    chefs = profile_service.list_chefs(db)

    assert [c.username for c in chefs.users] == ["prolific", "casual"]
    assert chefs.total == 2


def test_add_badge_once(db, make_user, dispatcher):
    me = make_user("me")

    badges = profile_service.add_badge(db, me.id, BadgeCreateRequest(name="First Recipe"), dispatcher)
    assert [b.name for b in badges] == ["First Recipe"]
    assert db.query(models.Notification).filter_by(recipient_id=me.id, type="achievement").count() == 1

    with pytest.raises(InvalidStateError) as exc_info:
        profile_service.add_badge(db, me.id, BadgeCreateRequest(name="First Recipe"), dispatcher)
    assert exc_info.value.code == "BADGE_EXISTS"


def test_enrich_store_failure_keeps_profile_with_default_stats(db, make_user, make_recipe, dispatcher):
    chef = make_user("chef", tagline="hi")
    fan = make_user("fan")
    make_recipe(chef)
    social_graph.toggle_follow(db, fan.id, chef.id, dispatcher)

    failure = OperationalError("SELECT", {}, Exception("down"))
    with mock.patch.object(stats_service, "_count_from_source", side_effect=failure):
        profile = profile_service.enrich(db, chef.id)

    assert profile.username == "chef"
    assert profile.tagline == "hi"
    assert profile.model_dump(include=set(UserStats.model_fields)) == UserStats().model_dump()
    assert profile.user_level == "New Cook"
    assert db.get(models.User, chef.id).recipes_count == 1
