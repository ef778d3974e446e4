"""
Video service layer - publishing, editing and deleting videos
"""

from typing import Optional
from uuid import UUID

import structlog
from fastapi import UploadFile
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.core.exceptions import InvalidArgumentError, MediaUploadError, NotFoundError
from vidtube.models import Video
from vidtube.services.lookups import ensure_length, ensure_owner, get_or_404
from vidtube.services.media_storage import IMAGES, VIDEOS, MediaStorage
from vidtube.services.user_service import UserService

logger = structlog.get_logger()


class VideoService:
    """Service for video operations"""

    @staticmethod
    async def publish_video(
        db: AsyncSession,
        storage: MediaStorage,
        owner_id: UUID,
        title: str,
        description: Optional[str],
        video_file: Optional[UploadFile],
        thumbnail: Optional[UploadFile]
    ) -> Video:
        """
        Upload the video and its thumbnail, then create the row

        If the thumbnail upload fails the already stored video is removed.
        """
        title = (title or "").strip()
        if not title:
            raise InvalidArgumentError("Title is required", field="title")
        ensure_length(title, Video.title.type.length, "title")
        if video_file is None or not video_file.filename:
            raise InvalidArgumentError("Video file is required", field="video_file")
        if thumbnail is None or not thumbnail.filename:
            raise InvalidArgumentError("Thumbnail is required", field="thumbnail")

        video_media = await storage.upload(video_file, VIDEOS)
        if not video_media.url or video_media.duration is None:
            await storage.delete(video_media.url)
            raise MediaUploadError("Video upload did not return a URL and duration", video_file.filename)

        try:
            thumbnail_media = await storage.upload(thumbnail, IMAGES)
        except Exception:
            await storage.delete(video_media.url)
            raise

        video = Video(
            owner_id=owner_id,
            title=title,
            description=(description or "").strip(),
            video_url=video_media.url,
            thumbnail_url=thumbnail_media.url,
            duration=video_media.duration,
        )
        db.add(video)
        await db.commit()
        await db.refresh(video)

        logger.info("Video published", video_id=str(video.id), owner_id=str(owner_id))
        return video

    @staticmethod
    async def get_video(db: AsyncSession, video_id: UUID, viewer_id: Optional[UUID] = None) -> Video:
        """
        Fetch a video for playback: counts a view and records it in the
        viewer's watch history. Unpublished videos exist only for their owner.
        """
        video = await get_or_404(db, Video, video_id, "video")
        if not video.is_published and video.owner_id != viewer_id:
            raise NotFoundError("video", video_id)

        await db.execute(
            update(Video)
            .where(Video.id == video_id)
            .values(views=Video.views + 1)
            .execution_options(synchronize_session=False)
        )
        await db.commit()
        await db.refresh(video)

        if viewer_id is not None:
            await UserService.push_watch_history(db, viewer_id, video_id)

        return video

    @staticmethod
    async def update_video(
        db: AsyncSession,
        storage: MediaStorage,
        video_id: UUID,
        actor_id: UUID,
        title: Optional[str] = None,
        description: Optional[str] = None,
        thumbnail: Optional[UploadFile] = None
    ) -> Video:
        video = await get_or_404(db, Video, video_id, "video")
        ensure_owner(video, actor_id, "update", "video")

        if title is not None:
            title = title.strip()
            if not title:
                raise InvalidArgumentError("Title must not be blank", field="title")
            ensure_length(title, Video.title.type.length, "title")
            video.title = title
        if description is not None:
            video.description = description.strip()

        old_thumbnail = None
        if thumbnail is not None and thumbnail.filename:
            media = await storage.upload(thumbnail, IMAGES)
            old_thumbnail = video.thumbnail_url
            video.thumbnail_url = media.url

        await db.commit()
        await db.refresh(video)

        if old_thumbnail:
            await storage.delete(old_thumbnail)

        return video

    @staticmethod
    async def delete_video(db: AsyncSession, storage: MediaStorage, video_id: UUID, actor_id: UUID):
        """
        Remove media first (best effort, failures only logged), then the row.
        Playlists and likes referencing the video are left as they are.
        """
        video = await get_or_404(db, Video, video_id, "video")
        ensure_owner(video, actor_id, "delete", "video")

        for url in (video.thumbnail_url, video.video_url):
            if not await storage.delete(url):
                logger.warning("Media not removed while deleting video", video_id=str(video_id), url=url)

        await db.delete(video)
        await db.commit()
        logger.info("Video deleted", video_id=str(video_id))

    @staticmethod
    async def toggle_publish_status(db: AsyncSession, video_id: UUID, actor_id: UUID) -> Video:
        video = await get_or_404(db, Video, video_id, "video")
        ensure_owner(video, actor_id, "update", "video")

        video.is_published = not video.is_published
        await db.commit()
        await db.refresh(video)
        return video
