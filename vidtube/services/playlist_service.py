"""
Playlist service layer

Playlist.videos is an ordered JSON list of video ids. Membership changes
re-read the row under a per-playlist lock (plus FOR UPDATE on backends that
have it) and assign a fresh list, so concurrent edits never overwrite each
other.
"""

from typing import Optional
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.core.exceptions import InvalidArgumentError
from vidtube.core.locks import row_locks
from vidtube.models import Playlist, Video
from vidtube.services.lookups import ensure_length, ensure_owner, get_for_update_or_404, get_or_404

logger = structlog.get_logger()


class PlaylistService:
    """Service for playlist operations"""

    @staticmethod
    async def create_playlist(
        db: AsyncSession,
        owner_id: UUID,
        name: str,
        description: str,
        video_id: Optional[UUID] = None
    ) -> Playlist:
        name = (name or "").strip()
        description = (description or "").strip()
        if not name or not description:
            raise InvalidArgumentError("Name and description are required")
        ensure_length(name, Playlist.name.type.length, "name")

        videos = []
        if video_id is not None:
            await get_or_404(db, Video, video_id, "video")
            videos.append(str(video_id))

        playlist = Playlist(owner_id=owner_id, name=name, description=description, videos=videos)
        db.add(playlist)
        await db.commit()
        await db.refresh(playlist)

        logger.info("Playlist created", playlist_id=str(playlist.id), owner_id=str(owner_id))
        return playlist

    @staticmethod
    async def update_playlist(
        db: AsyncSession,
        playlist_id: UUID,
        actor_id: UUID,
        name: Optional[str] = None,
        description: Optional[str] = None
    ) -> Playlist:
        if name is None and description is None:
            raise InvalidArgumentError("Nothing to update")

        playlist = await get_or_404(db, Playlist, playlist_id, "playlist")
        ensure_owner(playlist, actor_id, "update", "playlist")

        if name is not None:
            ensure_length(name, Playlist.name.type.length, "name")
            playlist.name = name
        if description is not None:
            playlist.description = description
        await db.commit()
        await db.refresh(playlist)
        return playlist

    @staticmethod
    async def delete_playlist(db: AsyncSession, playlist_id: UUID, actor_id: UUID):
        playlist = await get_or_404(db, Playlist, playlist_id, "playlist")
        ensure_owner(playlist, actor_id, "delete", "playlist")

        await db.delete(playlist)
        await db.commit()

    @staticmethod
    async def add_video(db: AsyncSession, playlist_id: UUID, video_id: UUID, actor_id: UUID) -> Playlist:
        """Append a video unless it is already in the playlist"""
        async with row_locks.hold(("playlist", playlist_id)):
            playlist = await get_for_update_or_404(db, Playlist, playlist_id, "playlist")
            await get_or_404(db, Video, video_id, "video")
            ensure_owner(playlist, actor_id, "modify", "playlist")

            videos = list(playlist.videos or [])
            if str(video_id) not in videos:
                playlist.videos = videos + [str(video_id)]
            await db.commit()

        await db.refresh(playlist)
        return playlist

    @staticmethod
    async def remove_video(db: AsyncSession, playlist_id: UUID, video_id: UUID, actor_id: UUID) -> Playlist:
        """Drop one occurrence of the video; absent ids are a no-op"""
        async with row_locks.hold(("playlist", playlist_id)):
            playlist = await get_for_update_or_404(db, Playlist, playlist_id, "playlist")
            ensure_owner(playlist, actor_id, "modify", "playlist")

            videos = list(playlist.videos or [])
            if str(video_id) in videos:
                videos.remove(str(video_id))
                playlist.videos = videos
            await db.commit()

        await db.refresh(playlist)
        return playlist
