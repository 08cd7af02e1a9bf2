import asyncio
import os

# Settings are read at import time.
os.environ.setdefault("SECRET_KEY", "test-secret")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from trustcore.main import app
from trustcore.core.db import Base, get_db
from trustcore.core.security import create_access_token
from trustcore.modules.content.models import Comment, Post
from trustcore.modules.moderation.classifier import ContentClassifier, get_classifier
from trustcore.modules.privacy.models import PrivacySettings
from trustcore.modules.users.models import University, User, UserRole


APPROVED = {"approved": True, "flagged": False, "action": "approved", "violations": []}


class StubClassifier(ContentClassifier):
    def __init__(self, payload=None, exc=None, delay=0.0):
        self.payload = dict(APPROVED) if payload is None else payload
        self.exc = exc
        self.delay = delay
        self.calls = []

    async def submit(self, content, content_type, content_id, user_id):
        self.calls.append((content, content_type, content_id, user_id))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.exc:
            raise self.exc
        return self.payload


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def db(engine):
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest.fixture
def classifier():
    return StubClassifier()


@pytest.fixture
async def client(db, classifier):
    async def _get_db():
        yield db

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_classifier] = lambda: classifier
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def make_university(db):
    async def _make(name="State University"):
        university = University(name=name)
        db.add(university)
        await db.commit()
        return university
    return _make


@pytest.fixture
def make_user(db):
    async def _make(username, university=None, role=UserRole.MEMBER, privacy=None):
        user = User(
            username=username,
            university_id=university.id if university else None,
            role=role,
        )
        db.add(user)
        await db.flush()
        if privacy:
            db.add(PrivacySettings(user_id=user.id, **privacy))
        await db.commit()
        return user
    return _make


@pytest.fixture
def make_post(db):
    async def _make(author, content="hello campus", flagged=False):
        post = Post(
            user_id=author.id,
            university_id=author.university_id,
            content=content,
            flagged=flagged,
            moderation_action="removed" if flagged else "approved",
        )
        db.add(post)
        await db.commit()
        return post
    return _make


@pytest.fixture
def make_comment(db):
    async def _make(post, author, content="nice post", flagged=False):
        comment = Comment(post_id=post.id, user_id=author.id, content=content, flagged=flagged)
        db.add(comment)
        await db.commit()
        return comment
    return _make


def auth_header(user):
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}
