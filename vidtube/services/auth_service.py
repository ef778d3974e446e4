"""
Registration, login and the refresh-session lifecycle

Anonymous -> login -> Authenticated -> refresh (rotation) ... -> logout.
A user has at most one refresh session. Each refresh swaps the stored
token digest with a compare-and-swap, so a refresh token works exactly once
and nothing issued before a logout or password change works afterwards.
"""

from typing import Optional, Tuple
from uuid import UUID

import structlog
from email_validator import EmailNotValidError, validate_email
from fastapi import UploadFile
from sqlalchemy import delete, or_, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.core.exceptions import (
    ConflictError,
    InvalidArgumentError,
    MediaUploadError,
    NotFoundError,
    UnauthorizedError,
)
from vidtube.core.security import (
    create_access_token,
    create_refresh_token,
    decode_refresh_token,
    get_password_hash,
    hash_token,
    verify_password,
)
from vidtube.db.database import utcnow
from vidtube.models import RefreshSession, User
from vidtube.services.lookups import ensure_length
from vidtube.services.media_storage import IMAGES, MediaStorage

logger = structlog.get_logger()


def normalize_email(email: Optional[str]) -> str:
    try:
        return validate_email((email or "").strip(), check_deliverability=False).normalized.lower()
    except EmailNotValidError as e:
        raise InvalidArgumentError(str(e), field="email")


class SessionStore:
    """Persistence of the single refresh session per user"""

    @staticmethod
    async def get(db: AsyncSession, user_id: UUID) -> Optional[RefreshSession]:
        result = await db.execute(select(RefreshSession).where(RefreshSession.user_id == user_id))
        return result.scalar_one_or_none()

    @staticmethod
    async def put(db: AsyncSession, user_id: UUID, refresh_token: str):
        """Replace whatever session the user had"""
        token_hash = hash_token(refresh_token)
        result = await db.execute(
            update(RefreshSession)
            .where(RefreshSession.user_id == user_id)
            .values(token_hash=token_hash, issued_at=utcnow())
        )
        if result.rowcount == 0:
            db.add(RefreshSession(user_id=user_id, token_hash=token_hash))
        try:
            await db.commit()
        except IntegrityError:
            # A concurrent login created the row first; overwrite it
            await db.rollback()
            await db.execute(
                update(RefreshSession)
                .where(RefreshSession.user_id == user_id)
                .values(token_hash=token_hash, issued_at=utcnow())
            )
            await db.commit()

    @staticmethod
    async def rotate(db: AsyncSession, user_id: UUID, presented_token: str, new_token: str) -> bool:
        """Swap presented -> new only if presented is the current session token"""
        result = await db.execute(
            update(RefreshSession)
            .where(
                RefreshSession.user_id == user_id,
                RefreshSession.token_hash == hash_token(presented_token)
            )
            .values(token_hash=hash_token(new_token), issued_at=utcnow())
        )
        await db.commit()
        return result.rowcount == 1

    @staticmethod
    async def revoke(db: AsyncSession, user_id: UUID):
        await db.execute(delete(RefreshSession).where(RefreshSession.user_id == user_id))
        await db.commit()


class AuthService:
    """Account creation and token lifecycle"""

    @staticmethod
    def issue_tokens(user: User) -> Tuple[str, str]:
        """New (access, refresh) pair for the user"""
        access_token = create_access_token({
            "sub": str(user.id),
            "email": user.email,
            "username": user.username,
            "full_name": user.full_name,
        })
        refresh_token = create_refresh_token({"sub": str(user.id)})
        return access_token, refresh_token

    @staticmethod
    async def register(
        db: AsyncSession,
        storage: MediaStorage,
        username: str,
        email: str,
        full_name: str,
        password: str,
        avatar: Optional[UploadFile],
        cover_image: Optional[UploadFile] = None
    ) -> User:
        """
        Create a user with an avatar and optional cover image

        Raises:
            InvalidArgumentError: a field or the avatar is missing
            ConflictError: username or email already taken
            MediaUploadError: avatar upload failed
        """
        username = (username or "").strip().lower()
        full_name = (full_name or "").strip()
        if not username or not full_name or not (email or "").strip() or not password:
            raise InvalidArgumentError("All fields are required")
        email = normalize_email(email)
        ensure_length(username, User.username.type.length, "username")
        ensure_length(full_name, User.full_name.type.length, "full_name")
        ensure_length(email, User.email.type.length, "email")

        existing = await db.execute(
            select(User.id).where(or_(User.username == username, User.email == email))
        )
        if existing.first() is not None:
            raise ConflictError("User with email or username already exists")

        if avatar is None or not avatar.filename:
            raise InvalidArgumentError("Avatar file is required", field="avatar")

        hashed_password = get_password_hash(password)

        avatar_media = await storage.upload(avatar, IMAGES)
        if not avatar_media.url:
            raise MediaUploadError("Avatar upload failed", avatar.filename)

        cover_media = None
        if cover_image is not None and cover_image.filename:
            try:
                cover_media = await storage.upload(cover_image, IMAGES)
            except Exception:
                await storage.delete(avatar_media.url)
                raise

        user = User(
            username=username,
            email=email,
            full_name=full_name,
            hashed_password=hashed_password,
            avatar_url=avatar_media.url,
            cover_image_url=cover_media.url if cover_media else None,
            watch_history=[],
        )
        db.add(user)
        try:
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            await storage.delete(avatar_media.url)
            if cover_media:
                await storage.delete(cover_media.url)
            if isinstance(e, IntegrityError):
                raise ConflictError("User with email or username already exists")
            raise

        await db.refresh(user)
        logger.info("User registered", user_id=str(user.id), username=user.username)
        return user

    @staticmethod
    async def login(
        db: AsyncSession,
        password: str,
        email: Optional[str] = None,
        username: Optional[str] = None
    ) -> Tuple[User, str, str]:
        """
        Verify credentials and open a new refresh session

        Raises:
            InvalidArgumentError: neither username nor email given
            NotFoundError: no such user
            UnauthorizedError: wrong password
        """
        conditions = []
        if email and email.strip():
            conditions.append(User.email == email.strip().lower())
        if username and username.strip():
            conditions.append(User.username == username.strip().lower())
        if not conditions:
            raise InvalidArgumentError("Username or email is required")

        result = await db.execute(select(User).where(or_(*conditions)).limit(1))
        user = result.scalar_one_or_none()
        if user is None:
            raise NotFoundError(message="User does not exist")

        if not verify_password(password, user.hashed_password):
            logger.warning("Failed login attempt", user_id=str(user.id))
            raise UnauthorizedError("Invalid user credentials")

        access_token, refresh_token = AuthService.issue_tokens(user)
        await SessionStore.put(db, user.id, refresh_token)

        logger.info("User logged in", user_id=str(user.id))
        return user, access_token, refresh_token

    @staticmethod
    async def refresh(db: AsyncSession, presented_token: Optional[str]) -> Tuple[User, str, str]:
        """
        Rotate the refresh session

        Raises:
            UnauthorizedError: token missing, invalid, expired, reused or revoked
        """
        if not presented_token:
            raise UnauthorizedError("Refresh token is required")

        payload = decode_refresh_token(presented_token)
        try:
            user_id = UUID(payload["sub"])
        except ValueError:
            raise UnauthorizedError("Invalid refresh token")

        user = await db.get(User, user_id)
        if user is None:
            raise UnauthorizedError("Invalid refresh token")

        access_token, refresh_token = AuthService.issue_tokens(user)
        if not await SessionStore.rotate(db, user.id, presented_token, refresh_token):
            logger.warning("Rejected stale refresh token", user_id=str(user.id))
            raise UnauthorizedError("Refresh token is expired or used")

        logger.info("Refresh session rotated", user_id=str(user.id))
        return user, access_token, refresh_token

    @staticmethod
    async def logout(db: AsyncSession, user_id: UUID):
        await SessionStore.revoke(db, user_id)
        logger.info("User logged out", user_id=str(user_id))

    @staticmethod
    async def change_password(db: AsyncSession, user: User, old_password: str, new_password: str):
        """Replace the password hash and end the current refresh session"""
        if not verify_password(old_password, user.hashed_password):
            raise InvalidArgumentError("Invalid old password", field="old_password")

        user.hashed_password = get_password_hash(new_password)
        await db.commit()
        await SessionStore.revoke(db, user.id)
        logger.info("Password changed", user_id=str(user.id))
