"""
Read models assembled from several tables

Each view is a fixed sequence of lookups: fetch the root rows, join the
referenced users/videos, project the fields clients need and, where the
stored order matters (watch history, playlists), merge the results back in
stored order. References that no longer resolve are dropped from the
output; only the root lookup can fail with NotFound.
"""

from typing import Any, Dict, Iterable, List, Optional
from uuid import UUID

import structlog
from sqlalchemy import and_, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.core.exceptions import InvalidArgumentError, NotFoundError
from vidtube.models import Comment, Like, LikeTargetKind, Playlist, Subscription, Tweet, User, Video
from vidtube.services.lookups import get_or_404, parse_id
from vidtube.services.pagination import paginate

logger = structlog.get_logger()

VIDEO_SORT_FIELDS = {
    "created_at": Video.created_at,
    "createdAt": Video.created_at,
    "updated_at": Video.updated_at,
    "updatedAt": Video.updated_at,
    "title": Video.title,
    "views": Video.views,
    "duration": Video.duration,
}


def owner_summary(user: User, full_name: bool = True) -> Dict[str, Any]:
    summary = {
        "id": user.id,
        "username": user.username,
        "avatar_url": user.avatar_url,
    }
    if full_name:
        summary["full_name"] = user.full_name
    return summary


def video_summary(video: Video, owner: Optional[User] = None, extra: Iterable[str] = (), **owner_options) -> Dict[str, Any]:
    summary = {
        "id": video.id,
        "title": video.title,
        "thumbnail_url": video.thumbnail_url,
        "duration": video.duration,
        "views": video.views,
        "created_at": video.created_at,
    }
    for field in extra:
        summary[field] = getattr(video, field)
    if owner is not None:
        summary["owner"] = owner_summary(owner, **owner_options)
    return summary


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _uuid_list(raw_ids: Iterable[str]) -> List[UUID]:
    ids = []
    for raw in raw_ids or []:
        try:
            ids.append(UUID(str(raw)))
        except ValueError:
            logger.warning("Skipping malformed stored video id", video_id=raw)
    return ids


class ViewService:
    """Denormalized read models"""

    @staticmethod
    async def _videos_in_order(db: AsyncSession, raw_ids: Iterable[str]) -> List[tuple]:
        """(video, owner) pairs for the given ids in the given order; missing ids are dropped"""
        ids = _uuid_list(raw_ids)
        if not ids:
            return []

        result = await db.execute(
            select(Video, User)
            .join(User, User.id == Video.owner_id)
            .where(Video.id.in_(set(ids)))
        )
        found = {video.id: (video, owner) for video, owner in result.all()}
        return [found[video_id] for video_id in ids if video_id in found]

    @staticmethod
    async def get_channel_profile(db: AsyncSession, username: str, viewer_id: Optional[UUID] = None) -> Dict[str, Any]:
        """
        Channel page header: profile fields, subscriber counts and whether
        the viewer is subscribed
        """
        username = (username or "").strip().lower()
        if not username:
            raise InvalidArgumentError("Username is missing", field="username")

        result = await db.execute(select(User).where(User.username == username))
        user = result.scalar_one_or_none()
        if user is None:
            raise NotFoundError(message="Channel does not exist")

        subscribers_count = (await db.execute(
            select(func.count()).select_from(Subscription).where(Subscription.channel_id == user.id)
        )).scalar_one()

        subscribed_to_count = (await db.execute(
            select(func.count()).select_from(Subscription).where(Subscription.subscriber_id == user.id)
        )).scalar_one()

        is_subscribed = False
        if viewer_id is not None:
            is_subscribed = (await db.execute(
                select(Subscription.id).where(
                    Subscription.channel_id == user.id,
                    Subscription.subscriber_id == viewer_id
                )
            )).first() is not None

        return {
            "id": user.id,
            "username": user.username,
            "full_name": user.full_name,
            "email": user.email,
            "avatar_url": user.avatar_url,
            "cover_image_url": user.cover_image_url,
            "subscribers_count": subscribers_count,
            "subscribed_to_count": subscribed_to_count,
            "is_subscribed": is_subscribed,
        }

    @staticmethod
    async def get_watch_history(db: AsyncSession, user_id: UUID) -> List[Dict[str, Any]]:
        """Watched videos, most recent first, duplicates kept"""
        user = await get_or_404(db, User, user_id, "user")
        pairs = await ViewService._videos_in_order(db, user.watch_history)
        return [
            video_summary(video, owner, extra=("description", "video_url"))
            for video, owner in pairs
        ]

    @staticmethod
    async def get_liked_videos(db: AsyncSession, user_id: UUID) -> List[Dict[str, Any]]:
        """
        Videos the user liked, newest like first

        Raises:
            NotFoundError: the user has no liked videos
        """
        result = await db.execute(
            select(Video, User)
            .select_from(Video)
            .join(Like, and_(Like.target_id == Video.id, Like.target_kind == LikeTargetKind.VIDEO))
            .join(User, User.id == Video.owner_id)
            .where(Like.liked_by == user_id)
            .order_by(Like.created_at.desc(), Like.id.desc())
        )
        videos = [video_summary(video, owner) for video, owner in result.all()]

        if not videos:
            raise NotFoundError(message="No liked videos found")
        return videos

    @staticmethod
    async def get_playlist_by_id(db: AsyncSession, playlist_id: UUID) -> Dict[str, Any]:
        playlist = await get_or_404(db, Playlist, playlist_id, "playlist")
        owner = await db.get(User, playlist.owner_id)
        pairs = await ViewService._videos_in_order(db, playlist.videos)

        return {
            "id": playlist.id,
            "name": playlist.name,
            "description": playlist.description,
            "updated_at": playlist.updated_at,
            "owner": owner_summary(owner) if owner else None,
            "videos": [video_summary(video, extra=("is_published",)) for video, _ in pairs],
        }

    @staticmethod
    async def get_user_playlists(db: AsyncSession, user_id: UUID) -> List[Dict[str, Any]]:
        """Every playlist of the user, most recently updated first, videos fully expanded"""
        await get_or_404(db, User, user_id, "user")

        result = await db.execute(
            select(Playlist)
            .where(Playlist.owner_id == user_id)
            .order_by(Playlist.updated_at.desc(), Playlist.id.desc())
        )
        playlists = result.scalars().all()

        # One query for the videos of all playlists
        all_ids = [raw for playlist in playlists for raw in playlist.videos or []]
        found = {video.id: (video, owner) for video, owner in await ViewService._videos_in_order(db, all_ids)}

        views = []
        for playlist in playlists:
            videos = [
                video_summary(*found[video_id], extra=("description", "video_url", "is_published"))
                for video_id in _uuid_list(playlist.videos)
                if video_id in found
            ]
            views.append({
                "id": playlist.id,
                "name": playlist.name,
                "description": playlist.description,
                "updated_at": playlist.updated_at,
                "videos": videos,
            })
        return views

    @staticmethod
    async def get_video_feed(
        db: AsyncSession,
        viewer_id: Optional[UUID] = None,
        query: Optional[str] = None,
        user_id: Optional[str] = None,
        sort_by: Optional[str] = None,
        sort_type: Optional[str] = None,
        page: int = 1,
        limit: int = 10
    ) -> Dict[str, Any]:
        """
        Paginated video listing

        Free text (title/description, case-insensitive) takes precedence over
        the owner filter. Unpublished videos are only listed to their owner
        when filtering by that owner.
        """
        sort_by = sort_by or "created_at"
        sort_column = VIDEO_SORT_FIELDS.get(sort_by)
        if sort_column is None:
            raise InvalidArgumentError(f"Cannot sort videos by '{sort_by}'", field="sort_by")
        ascending = (sort_type or "desc").lower() == "asc"

        stmt = select(Video, User).join(User, User.id == Video.owner_id)

        owner_id = None
        text = (query or "").strip()
        if text:
            pattern = f"%{_escape_like(text)}%"
            stmt = stmt.where(or_(
                Video.title.ilike(pattern, escape="\\"),
                Video.description.ilike(pattern, escape="\\")
            ))
        elif user_id:
            owner_id = parse_id(user_id, "user_id")
            stmt = stmt.where(Video.owner_id == owner_id)

        if owner_id is None or owner_id != viewer_id:
            stmt = stmt.where(Video.is_published.is_(True))

        if ascending:
            stmt = stmt.order_by(sort_column.asc(), Video.id.asc())
        else:
            stmt = stmt.order_by(sort_column.desc(), Video.id.desc())

        return await paginate(
            db,
            stmt,
            page,
            limit,
            transform=lambda row: video_summary(row[0], row[1], extra=("description",), full_name=False),
            scalars=False
        )

    @staticmethod
    async def get_comments(db: AsyncSession, video_id: UUID, page: int = 1, limit: int = 10) -> Dict[str, Any]:
        """Comments of a video, newest first, with the author's username and avatar"""
        await get_or_404(db, Video, video_id, "video")

        stmt = (
            select(Comment, User)
            .join(User, User.id == Comment.owner_id)
            .where(Comment.video_id == video_id)
            .order_by(Comment.created_at.desc(), Comment.id.desc())
        )

        def to_view(row):
            comment, owner = row
            return {
                "id": comment.id,
                "content": comment.content,
                "created_at": comment.created_at,
                "owner": owner_summary(owner, full_name=False),
            }

        return await paginate(db, stmt, page, limit, transform=to_view, scalars=False)

    @staticmethod
    async def _subscription_list(db: AsyncSession, where, other_party) -> List[Dict[str, Any]]:
        result = await db.execute(
            select(Subscription, User)
            .join(User, User.id == other_party)
            .where(where)
            .order_by(Subscription.created_at.desc(), Subscription.id.desc())
        )
        return [
            {"id": subscription.id, "subscribed_at": subscription.created_at, "user": owner_summary(user)}
            for subscription, user in result.all()
        ]

    @staticmethod
    async def get_channel_subscribers(db: AsyncSession, channel_id: UUID) -> List[Dict[str, Any]]:
        await get_or_404(db, User, channel_id, "channel")
        return await ViewService._subscription_list(
            db, Subscription.channel_id == channel_id, Subscription.subscriber_id
        )

    @staticmethod
    async def get_subscribed_channels(db: AsyncSession, subscriber_id: UUID) -> List[Dict[str, Any]]:
        await get_or_404(db, User, subscriber_id, "user")
        return await ViewService._subscription_list(
            db, Subscription.subscriber_id == subscriber_id, Subscription.channel_id
        )

    @staticmethod
    async def get_user_tweets(db: AsyncSession, user_id: UUID) -> List[Dict[str, Any]]:
        await get_or_404(db, User, user_id, "user")
        result = await db.execute(
            select(Tweet, User)
            .join(User, User.id == Tweet.owner_id)
            .where(Tweet.owner_id == user_id)
            .order_by(Tweet.created_at.desc(), Tweet.id.desc())
        )
        return [
            {
                "id": tweet.id,
                "content": tweet.content,
                "created_at": tweet.created_at,
                "updated_at": tweet.updated_at,
                "owner": owner_summary(owner),
            }
            for tweet, owner in result.all()
        ]
