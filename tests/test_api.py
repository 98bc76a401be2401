"""End-to-end tests through the FastAPI routers."""

from database import models


def _recipe_payload(**overrides):
    payload = {
        "title": "Shakshuka",
        "description": "Eggs in tomato sauce",
        "ingredients": [{"name": "Eggs", "amount": "4"}],
        "instructions": [{"text": "Cook it."}],
        "prep_time": 10,
        "cook_time": 20,
        "servings": 2,
        "difficulty": "Easy",
        "category": "Breakfast",
    }
    payload.update(overrides)
    return payload


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_register_login_and_me(client):
    response = client.post(
        "/api/auth/register",
        json={"name": "Jane Cook", "username": "jane", "email": "jane@example.com", "password": "secret123"},
    )
    assert response.status_code == 201
    token = response.json()["access_token"]

    login = client.post("/api/auth/login", json={"email": "jane@example.com", "password": "secret123"})
    assert login.status_code == 200

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["username"] == "jane"
    assert me.json()["user_level"] == "New Cook"


def test_missing_token(client):
    response = client.get("/api/profile")
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "NO_TOKEN"


def test_invalid_token(client):
    response = client.get("/api/profile", headers={"Authorization": "Bearer junk"})
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "INVALID_TOKEN"


def test_profile_update_rejects_null_email(client, make_user, auth_headers):
    me = make_user("me")

    response = client.put("/api/profile", json={"email": None}, headers=auth_headers(me))

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


def test_recipe_crud_flow(client, make_user, auth_headers):
    chef = make_user("chef")
    headers = auth_headers(chef)

    created = client.post("/api/recipes", json=_recipe_payload(), headers=headers)
    assert created.status_code == 201
    recipe_id = created.json()["id"]

    fetched = client.get(f"/api/recipes/{recipe_id}")
    assert fetched.status_code == 200
    assert fetched.json()["views"] == 1
    assert fetched.json()["author"]["username"] == "chef"

    updated = client.put(f"/api/recipes/{recipe_id}", json={"title": "Better Shakshuka"}, headers=headers)
    assert updated.json()["title"] == "Better Shakshuka"

    listing = client.get("/api/recipes", params={"category": "Breakfast"})
    assert listing.json()["total"] == 1

    deleted = client.delete(f"/api/recipes/{recipe_id}", headers=headers)
    assert deleted.status_code == 200
    assert client.get(f"/api/recipes/{recipe_id}").status_code == 404


def test_recipe_rejects_string_encoded_ingredients(client, make_user, auth_headers):
    chef = make_user("chef")
    response = client.post(
        "/api/recipes",
        json=_recipe_payload(ingredients='[{"name": "Eggs", "amount": "4"}]'),
        headers=auth_headers(chef),
    )
    assert response.status_code == 422
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


def test_other_user_cannot_delete(client, make_user, make_recipe, auth_headers):
    chef = make_user("chef")
    intruder = make_user("intruder")
    recipe = make_recipe(chef)

    response = client.delete(f"/api/recipes/{recipe.id}", headers=auth_headers(intruder))

    assert response.status_code == 403
    assert response.json()["error"]["code"] == "UNAUTHORIZED"


def test_follow_and_favorite_through_api(client, db, make_user, make_recipe, auth_headers):
    chef = make_user("chef")
    fan = make_user("fan")
    recipe = make_recipe(chef)
    headers = auth_headers(fan)

    follow = client.post(f"/api/profile/users/{chef.id}/follow", headers=headers)
    assert follow.json()["is_following"] is True
    assert follow.json()["followers_count"] == 1

    self_follow = client.post(f"/api/profile/users/{fan.id}/follow", headers=headers)
    assert self_follow.status_code == 400
    assert self_follow.json()["error"]["code"] == "CANNOT_FOLLOW_SELF"

    assert client.post(f"/api/recipes/{recipe.id}/favorite", headers=headers).json()["likes_count"] == 1
    again = client.post(f"/api/recipes/{recipe.id}/favorite", headers=headers)
    assert again.status_code == 400
    assert again.json()["error"]["code"] == "ALREADY_FAVORITED"

    profile = client.get(f"/api/profile/users/{chef.id}", headers=headers).json()
    assert profile["is_following"] is True
    assert profile["total_likes"] == 1


def test_reviews_through_api(client, make_user, make_recipe, auth_headers):
    chef = make_user("chef")
    critic = make_user("critic")
    recipe = make_recipe(chef)
    headers = auth_headers(critic)

    first = client.post(f"/api/recipes/{recipe.id}/reviews", json={"rating": 4, "comment": "Nice"}, headers=headers)
    assert first.status_code == 201
    second = client.post(f"/api/recipes/{recipe.id}/reviews", json={"rating": 2, "comment": "Meh"}, headers=headers)
    assert second.json()["error"]["code"] == "DUPLICATE_REVIEW"

    reviews = client.get(f"/api/recipes/{recipe.id}/reviews").json()
    assert reviews["total"] == 1


def test_search_requires_query(client):
    response = client.get("/api/recipes/search")
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "MISSING_QUERY"


def test_share_unsupported_platform(client, make_user, make_recipe):
    recipe = make_recipe(make_user("chef"))
    response = client.post(f"/api/recipes/{recipe.id}/share", json={"platform": "myspace"})
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "UNSUPPORTED_PLATFORM"


def test_notifications_flow(client, db, make_user, auth_headers, dispatcher):
    chef = make_user("chef")
    fan = make_user("fan")
    client.post(f"/api/profile/users/{chef.id}/follow", headers=auth_headers(fan))
    headers = auth_headers(chef)

    listing = client.get("/api/notifications", headers=headers).json()
    assert listing["unread_count"] == 1
    notification = listing["notifications"][0]
    assert notification["type"] == "follow"
    assert notification["sender"]["username"] == "fan"

    marked = client.put(f"/api/notifications/{notification['id']}/read", headers=headers)
    assert marked.json()["read"] is True
    assert client.get("/api/notifications", headers=headers).json()["unread_count"] == 0

    foreign = client.delete(f"/api/notifications/{notification['id']}", headers=auth_headers(fan))
    assert foreign.status_code == 404

    cleared = client.delete("/api/notifications", headers=headers)
    assert cleared.json()["affected"] == 1
    assert db.query(models.Notification).filter_by(recipient_id=chef.id).count() == 0


def test_profile_picture_upload(client, make_user, auth_headers):
    me = make_user("me")
    headers = auth_headers(me)

    bad = client.post("/api/profile/picture", files={"image": ("notes.txt", b"hello", "text/plain")}, headers=headers)
    assert bad.status_code == 400
    assert bad.json()["error"]["code"] == "INVALID_FILE"

    good = client.post("/api/profile/picture", files={"image": ("me.png", b"\x89PNG data", "image/png")}, headers=headers)
    assert good.status_code == 200
    assert good.json()["profile_picture"].startswith("/uploads/profile/")


def test_forgot_password_uses_email_sender(client, make_user, email_sender):
    make_user("jane", email="jane@example.com")

    response = client.post("/api/auth/forgot-password", json={"email": "jane@example.com"})

    assert response.status_code == 200
    assert email_sender.sent[0]["to"] == "jane@example.com"


def test_verify_reset_token(client, make_user, email_sender):
    make_user("jane", email="jane@example.com")
    client.post("/api/auth/forgot-password", json={"email": "jane@example.com"})
    token = email_sender.sent[0]["body"].split("/reset-password/")[1].split()[0]

    assert client.get(f"/api/auth/verify-reset-token/{token}").json() == {"valid": True, "message": "Token is valid"}

    stale = client.get("/api/auth/verify-reset-token/stale")
    assert stale.status_code == 401
    assert stale.json()["error"]["code"] == "INVALID_RESET_TOKEN"


def test_delete_account(client, make_user, make_recipe, auth_headers):
    leaver = make_user("leaver")
    chef = make_user("chef")
    make_recipe(leaver)
    headers = auth_headers(leaver)
    client.post(f"/api/profile/users/{chef.id}/follow", headers=headers)

    response = client.delete("/api/auth/account", headers=headers)

    assert response.status_code == 200
    assert response.json()["cleanup"]["recipes"] == 1
    assert response.json()["cleanup"]["follows"] == 1
    assert client.get(f"/api/profile/users/{chef.id}").json()["followers_count"] == 0
    gone = client.get("/api/auth/me", headers=headers)
    assert gone.status_code == 401
    assert gone.json()["error"]["code"] == "USER_NOT_FOUND"
