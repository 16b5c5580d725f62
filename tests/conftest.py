import os
import tempfile

# Settings are read at import time, so point them at scratch locations first
_TMP_DIR = tempfile.mkdtemp(prefix="happylunch-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP_DIR, 'app.db')}"
os.environ["UPLOAD_DIR"] = os.path.join(_TMP_DIR, "uploads")
os.environ["JWT_SECRET"] = "test-secret"
os.environ["ADMIN_EMAILS"] = ""

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from happylunch import models  # noqa: E402
from happylunch.auth import create_access_token, get_password_hash  # noqa: E402
from happylunch.database import Base, get_db, make_engine  # noqa: E402
from happylunch.main import app  # noqa: E402
from happylunch.realtime import manager  # noqa: E402

engine = make_engine("sqlite://", poolclass=StaticPool)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    app.dependency_overrides[get_db] = override_get_db
    manager._connections.clear()
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    manager._connections.clear()


def make_user(db, email="user@example.com", name="User", role="user", password="password123"):
    user = models.User(
        email=email,
        name=name,
        role=role,
        password_hash=get_password_hash(password),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def auth_header(user):
    return {"Authorization": f"Bearer {create_access_token(user)}"}


@pytest.fixture
def user(db):
    return make_user(db, "alice@example.com", "Alice")


@pytest.fixture
def other_user(db):
    return make_user(db, "bob@example.com", "Bob")


@pytest.fixture
def admin(db):
    return make_user(db, "admin@example.com", "Admin", role="admin")


@pytest.fixture
def restaurant(db):
    restaurant = models.Restaurant(
        name="Pho 24",
        address="1 Main St",
        cuisine_type="Vietnamese",
        opening_hours="07:00 - 13:00",
        latitude=10.7769,
        longitude=106.7009,
    )
    db.add(restaurant)
    db.commit()
    db.refresh(restaurant)
    return restaurant


def make_review(db, user, restaurant, rating=4, status="approved", comment="Tasty"):
    review = models.Review(
        user_id=user.id,
        restaurant_id=restaurant.id,
        rating=rating,
        comment=comment,
        status=status,
    )
    db.add(review)
    db.commit()
    db.refresh(review)
    return review
