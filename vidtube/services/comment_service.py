"""
Comment and tweet service layer
"""

from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.core.exceptions import InvalidArgumentError
from vidtube.models import Comment, Tweet, Video
from vidtube.services.lookups import ensure_owner, get_or_404

logger = structlog.get_logger()


def _clean(content: str) -> str:
    content = (content or "").strip()
    if not content:
        raise InvalidArgumentError("Content is required", field="content")
    return content


class CommentService:
    """Service for comments on videos"""

    @staticmethod
    async def add_comment(db: AsyncSession, video_id: UUID, owner_id: UUID, content: str) -> Comment:
        content = _clean(content)
        await get_or_404(db, Video, video_id, "video")

        comment = Comment(video_id=video_id, owner_id=owner_id, content=content)
        db.add(comment)
        await db.commit()
        await db.refresh(comment)

        logger.info("Comment added", comment_id=str(comment.id), video_id=str(video_id))
        return comment

    @staticmethod
    async def update_comment(db: AsyncSession, comment_id: UUID, actor_id: UUID, content: str) -> Comment:
        content = _clean(content)
        comment = await get_or_404(db, Comment, comment_id, "comment")
        ensure_owner(comment, actor_id, "update", "comment")

        comment.content = content
        await db.commit()
        await db.refresh(comment)
        return comment

    @staticmethod
    async def delete_comment(db: AsyncSession, comment_id: UUID, actor_id: UUID):
        comment = await get_or_404(db, Comment, comment_id, "comment")
        ensure_owner(comment, actor_id, "delete", "comment")

        await db.delete(comment)
        await db.commit()
        logger.info("Comment deleted", comment_id=str(comment_id))


class TweetService:
    """Service for tweets"""

    @staticmethod
    async def create_tweet(db: AsyncSession, owner_id: UUID, content: str) -> Tweet:
        tweet = Tweet(owner_id=owner_id, content=_clean(content))
        db.add(tweet)
        await db.commit()
        await db.refresh(tweet)
        return tweet

    @staticmethod
    async def update_tweet(db: AsyncSession, tweet_id: UUID, actor_id: UUID, content: str) -> Tweet:
        content = _clean(content)
        tweet = await get_or_404(db, Tweet, tweet_id, "tweet")
        ensure_owner(tweet, actor_id, "update", "tweet")

        tweet.content = content
        await db.commit()
        await db.refresh(tweet)
        return tweet

    @staticmethod
    async def delete_tweet(db: AsyncSession, tweet_id: UUID, actor_id: UUID):
        tweet = await get_or_404(db, Tweet, tweet_id, "tweet")
        ensure_owner(tweet, actor_id, "delete", "tweet")

        await db.delete(tweet)
        await db.commit()
