import os
import tempfile

# окружение задаём до импорта board.*
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ADMIN_USERNAME"] = "admin"
os.environ["ADMIN_PASSWORD"] = "admin-secret"
os.environ["ANTISPAM_MAX_ADS_PER_HOUR"] = "1000"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="board-uploads-")

import pytest
from fastapi.testclient import TestClient

from board.db import Base, SessionLocal, engine, init_db
from board.main import app
from board.models.category import Category
from board.models.user import User

ADMIN_AUTH = ("admin", "admin-secret")


@pytest.fixture(autouse=True)
def clean_db():
    init_db()
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def category(db):
    c = Category(name="Electronics", description="Phones and gadgets")
    db.add(c)
    db.commit()
    db.refresh(c)
    return c


@pytest.fixture
def other_category(db):
    c = Category(name="Housing", description="Rooms and villas")
    db.add(c)
    db.commit()
    db.refresh(c)
    return c


@pytest.fixture
def user(db):
    u = User(name="Anna", email="anna@example.com", phone="+66800000000")
    db.add(u)
    db.commit()
    db.refresh(u)
    return u


@pytest.fixture
def make_ad(client, category):
    """Создаёт объявление через API и возвращает тело ответа."""

    def _make(title="Mountain bike", description="Good condition, barely used", price=100,
              ip="10.0.0.1", **extra):
        payload = {
            "title": title,
            "description": description,
            "price": price,
            "categoryId": extra.pop("categoryId", category.id),
            **extra,
        }
        response = client.post("/api/ads", json=payload, headers={"X-Forwarded-For": ip})
        assert response.status_code == 201, response.text
        return response.json()

    return _make
