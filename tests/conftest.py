import itertools
import os

# Настройки читаются при импорте blogcms, поэтому окружение - до импортов
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key-that-is-long-enough-for-hs256")
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["CACHE_ENABLED"] = "false"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from blogcms.main import app
from blogcms.models import Base, Category, Post, PostTag, Tag, User, utcnow
from blogcms.utils.database import get_db
from blogcms.utils.security import create_access_token, hash_password

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db():
    """Fresh in-memory schema for every test"""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def broken_db():
    """Session on a database without tables: every query fails"""
    bare_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    session = sessionmaker(bind=bare_engine)()
    try:
        yield session
    finally:
        session.close()
        bare_engine.dispose()


@pytest.fixture
def client(db):
    """Test client sharing the test session"""
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    counter = itertools.count(1)

    def _make(role="author", name=None, email=None, password="secret123"):
        n = next(counter)
        user = User(
            name=name or f"User {n}",
            email=email or f"user{n}@example.com",
            password=hash_password(password),
            role=role,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def auth_headers():
    def _headers(user):
        token = create_access_token(user.id, user.email, user.role)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def make_category(db):
    def _make(name="News", slug=None):
        category = Category(name=name, slug=slug or name.lower())
        db.add(category)
        db.commit()
        db.refresh(category)
        return category

    return _make


@pytest.fixture
def make_tag(db):
    def _make(name="python", slug=None):
        tag = Tag(name=name, slug=slug or name.lower())
        db.add(tag)
        db.commit()
        db.refresh(tag)
        return tag

    return _make


@pytest.fixture
def make_post(db):
    """Insert a post directly, bypassing the slug generator"""
    counter = itertools.count(1)

    def _make(
        author,
        title=None,
        slug=None,
        status="published",
        published_at=None,
        category=None,
        tags=(),
        content="Body text",
        excerpt=None,
    ):
        n = next(counter)
        if published_at is None and status == "published":
            published_at = utcnow()
        post = Post(
            author_id=author.id,
            title=title or f"Post {n}",
            slug=slug or f"post-{n}",
            content=content,
            excerpt=excerpt,
            status=status,
            published_at=published_at,
            category_id=category.id if category else None,
        )
        post.post_tags = [PostTag(tag_id=tag.id) for tag in tags]
        db.add(post)
        db.commit()
        db.refresh(post)
        return post

    return _make
