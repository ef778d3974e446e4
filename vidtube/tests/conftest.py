"""
Test configuration and fixtures
"""

import os
import tempfile

# Settings are read at import time, so the environment goes first
_TEST_ROOT = tempfile.mkdtemp(prefix="vidtube-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_ROOT}/app.db"
os.environ["UPLOAD_DIR"] = os.path.join(_TEST_ROOT, "uploads")
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["LOG_TO_FILE"] = "false"
os.environ["COOKIE_SECURE"] = "false"
os.environ["ENVIRONMENT"] = "test"

import io
from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator, Optional
from uuid import uuid4

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool
from starlette.datastructures import Headers, UploadFile

from vidtube.core.exceptions import InvalidArgumentError, MediaUploadError
from vidtube.core.security import create_access_token, get_password_hash
from vidtube.db.database import Base, get_db
from vidtube.main import app
from vidtube.models import User, Video
from vidtube.services.media_storage import VIDEOS, MediaStorage, UploadedMedia, get_media_storage

MEDIA_BASE_URL = "https://media.example.com/vidtube"
TEST_PASSWORD = "testpassword"


class FakeMediaStorage(MediaStorage):
    """In-memory media store recording uploads and deletes"""

    def __init__(self):
        super().__init__(use_s3=False, upload_dir=os.environ["UPLOAD_DIR"], public_url=MEDIA_BASE_URL)
        self.uploaded = []
        self.deleted = []
        self.fail_categories = set()
        self.video_duration = 42.5

    async def upload(self, file, category):
        content = await file.read()
        if not content:
            raise InvalidArgumentError(f"File '{file.filename}' is empty")
        if category in self.fail_categories:
            raise MediaUploadError("Media upload failed", file.filename)

        extension = ".mp4" if category == VIDEOS else ".jpg"
        key = f"{category}/{uuid4().hex}{extension}"
        media = UploadedMedia(
            url=f"{MEDIA_BASE_URL}/{key}",
            key=key,
            duration=self.video_duration if category == VIDEOS else None
        )
        self.uploaded.append(media.url)
        return media

    async def delete(self, url):
        if self.public_id(url) is None:
            return False
        self.deleted.append(url)
        return True


def media_url(category: str = "images", extension: str = ".jpg") -> str:
    return f"{MEDIA_BASE_URL}/{category}/{uuid4().hex}{extension}"


def make_upload(filename: str, content: bytes, content_type: str) -> UploadFile:
    return UploadFile(
        file=io.BytesIO(content),
        filename=filename,
        headers=Headers({"content-type": content_type})
    )


def bearer(user: User) -> dict:
    """Authorization header for a user"""
    token = create_access_token({"sub": str(user.id), "email": user.email, "username": user.username})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def test_engine(tmp_path):
    """Per-test SQLite database file"""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path}/test.db",
        poolclass=NullPool,
        echo=False
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _sqlite_pragmas(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA busy_timeout=10000")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def test_db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Session used by tests to arrange and inspect data"""
    async with session_factory() as session:
        yield session


@pytest.fixture
def fake_storage() -> FakeMediaStorage:
    return FakeMediaStorage()


@pytest.fixture
async def client(session_factory, fake_storage) -> AsyncGenerator[AsyncClient, None]:
    """Test client; every request gets its own session like in production"""

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_media_storage] = lambda: fake_storage

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://localhost") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def make_user(test_db: AsyncSession):
    """Factory creating users with the shared test password"""
    hashed = get_password_hash(TEST_PASSWORD)

    async def _make_user(username: Optional[str] = None, **overrides) -> User:
        username = username or f"user{uuid4().hex[:8]}"
        user = User(
            username=username,
            email=overrides.pop("email", f"{username}@example.com"),
            full_name=overrides.pop("full_name", username.title()),
            hashed_password=hashed,
            avatar_url=overrides.pop("avatar_url", media_url()),
            watch_history=[],
            **overrides
        )
        test_db.add(user)
        await test_db.commit()
        await test_db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def make_video(test_db: AsyncSession):
    """Factory creating published videos"""

    async def _make_video(owner: User, title: Optional[str] = None, **overrides) -> Video:
        video = Video(
            owner_id=owner.id,
            title=title or f"Video {uuid4().hex[:6]}",
            description=overrides.pop("description", "A test video"),
            video_url=overrides.pop("video_url", media_url("videos", ".mp4")),
            thumbnail_url=overrides.pop("thumbnail_url", media_url()),
            duration=overrides.pop("duration", 60.0),
            **overrides
        )
        test_db.add(video)
        await test_db.commit()
        await test_db.refresh(video)
        return video

    return _make_video


@pytest.fixture
async def test_user(make_user) -> User:
    """Create test user"""
    return await make_user("testuser", email="test@example.com", full_name="Test User")


@pytest.fixture
def auth_headers(test_user: User) -> dict:
    """Create authorization headers for authenticated requests"""
    return bearer(test_user)


def minutes_ago(minutes: int) -> datetime:
    return datetime.now(timezone.utc) - timedelta(minutes=minutes)
