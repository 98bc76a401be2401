"""Shared fixtures: an isolated in-memory database per test, factories and an API client."""

from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from core.security import create_access_token, hash_password
from database import models
from database.deps import get_db_read, get_db_write, get_dispatcher, get_email_sender, get_image_storage
from schemas.recipe_schema import RecipeCreateRequest
from services import recipe_service
from services.image_storage import LocalImageStorage
from services.notification_dispatcher import NotificationDispatcher


class FakeClock:
    """Manually advanced clock for the notification dispatcher."""

    def __init__(self, start=None):
        self.now = start or datetime(2024, 1, 1, 12, 0, 0)

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


class RecordingEmailSender:
    def __init__(self):
        self.sent = []

    def send(self, to, subject, body):
        self.sent.append({"to": to, "subject": subject, "body": body})
        return True


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    models.Base.metadata.create_all(bind=engine)
    yield engine
    models.Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def db(engine):
    session = sessionmaker(bind=engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def dispatcher(clock):
    return NotificationDispatcher(window=timedelta(minutes=5), max_attempts=2, clock=clock)


@pytest.fixture()
def email_sender():
    return RecordingEmailSender()


@pytest.fixture()
def make_user(db):
    counter = {"n": 0}

    def _make(username=None, password="secret123", **fields):
        counter["n"] += 1
        username = username or f"user{counter['n']}"
        user = models.User(
            username=username,
            name=fields.pop("name", username.title()),
            email=fields.pop("email", f"{username}@example.com"),
            password_hash=hash_password(password),
            **fields,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture()
def make_recipe(db, dispatcher):
    def _make(author, **overrides):
        data = {
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
        data.update(overrides)
        detail = recipe_service.create_recipe(db, author.id, RecipeCreateRequest(**data), dispatcher)
        return db.get(models.Recipe, detail.id)

    return _make


@pytest.fixture()
def auth_headers():
    def _headers(user):
        return {"Authorization": f"Bearer {create_access_token(user.id)}"}

    return _headers


@pytest.fixture()
def client(db, dispatcher, email_sender, tmp_path):
    from main import app

    def _session():
        yield db

    storage = LocalImageStorage(root=str(tmp_path), base_url="")
    app.dependency_overrides[get_db_write] = _session
    app.dependency_overrides[get_db_read] = _session
    app.dependency_overrides[get_dispatcher] = lambda: dispatcher
    app.dependency_overrides[get_email_sender] = lambda: email_sender
    app.dependency_overrides[get_image_storage] = lambda: storage
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
