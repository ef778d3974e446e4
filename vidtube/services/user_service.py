"""
Account maintenance for the authenticated user
"""

from uuid import UUID

import structlog
from fastapi import UploadFile
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.core.exceptions import ConflictError, InvalidArgumentError, NotFoundError
from vidtube.core.locks import row_locks
from vidtube.models import User
from vidtube.services.auth_service import normalize_email
from vidtube.services.lookups import ensure_length, get_for_update_or_404
from vidtube.services.media_storage import IMAGES, MediaStorage

logger = structlog.get_logger()


class UserService:

    @staticmethod
    async def update_account_details(db: AsyncSession, user: User, full_name: str, email: str) -> User:
        full_name = (full_name or "").strip()
        if not full_name:
            raise InvalidArgumentError("Full name is required", field="full_name")
        email = normalize_email(email)
        ensure_length(full_name, User.full_name.type.length, "full_name")
        ensure_length(email, User.email.type.length, "email")

        taken = await db.execute(select(User.id).where(User.email == email, User.id != user.id))
        if taken.first() is not None:
            raise ConflictError("Email is already in use")

        user.full_name = full_name
        user.email = email
        await db.commit()
        await db.refresh(user)
        return user

    @staticmethod
    async def _replace_image(db: AsyncSession, storage: MediaStorage, user: User, file: UploadFile, attribute: str) -> User:
        if file is None or not file.filename:
            raise InvalidArgumentError("Image file is required", field=attribute)

        media = await storage.upload(file, IMAGES)
        previous = getattr(user, attribute)

        setattr(user, attribute, media.url)
        await db.commit()
        await db.refresh(user)

        # Old media goes only after the new URL is stored
        if previous:
            await storage.delete(previous)

        logger.info("User image replaced", user_id=str(user.id), field=attribute)
        return user

    @staticmethod
    async def update_avatar(db: AsyncSession, storage: MediaStorage, user: User, file: UploadFile) -> User:
        return await UserService._replace_image(db, storage, user, file, "avatar_url")

    @staticmethod
    async def update_cover_image(db: AsyncSession, storage: MediaStorage, user: User, file: UploadFile) -> User:
        return await UserService._replace_image(db, storage, user, file, "cover_image_url")

    @staticmethod
    async def push_watch_history(db: AsyncSession, user_id: UUID, video_id: UUID):
        """Prepend a video to the user's history; repeated views are kept"""
        async with row_locks.hold(("watch_history", user_id)):
            try:
                user = await get_for_update_or_404(db, User, user_id, "user")
            except NotFoundError:
                return
            user.watch_history = [str(video_id)] + list(user.watch_history or [])
            await db.commit()
