"""
Toggle engine for likes and subscriptions

A toggle flips a (actor, target) relation: present -> removed, absent ->
added. Calls on the same key are serialized by an in-process keyed lock;
across processes the unique constraint on the relation table decides. A
unique violation on insert means another writer added the row first, and a
delete that removes nothing means another writer removed it first. In both
cases the state is re-read and the toggle retried, so every call flips the
stored state exactly once.
"""

from typing import Any, Awaitable, Callable, Dict, Hashable, Optional
from uuid import UUID

import structlog
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.core.exceptions import InternalError, InvalidArgumentError
from vidtube.core.locks import toggle_locks
from vidtube.models import Comment, Like, LikeTarget, LikeTargetKind, Subscription, Tweet, User, Video
from vidtube.services.lookups import get_or_404

logger = structlog.get_logger()

MAX_TOGGLE_ATTEMPTS = 3

LIKE_TARGET_MODELS = {
    LikeTargetKind.VIDEO: Video,
    LikeTargetKind.COMMENT: Comment,
    LikeTargetKind.TWEET: Tweet,
}


def like_record(like: Like) -> Dict[str, Any]:
    return {
        "id": str(like.id),
        "liked_by": str(like.liked_by),
        "target_kind": like.target_kind.value,
        "target_id": str(like.target_id),
        "created_at": like.created_at.isoformat(),
    }


def subscription_record(subscription: Subscription) -> Dict[str, Any]:
    return {
        "id": str(subscription.id),
        "subscriber_id": str(subscription.subscriber_id),
        "channel_id": str(subscription.channel_id),
        "created_at": subscription.created_at.isoformat(),
    }


class ToggleService:
    """Idempotent create-or-delete of engagement relations"""

    @staticmethod
    async def _toggle(
        db: AsyncSession,
        key: Hashable,
        ensure_target: Callable[[], Awaitable[Any]],
        find: Callable[[], Awaitable[Optional[Any]]],
        build: Callable[[], Any],
        serialize: Callable[[Any], Dict[str, Any]]
    ) -> Dict[str, Any]:
        async with toggle_locks.hold(key):
            await ensure_target()

            for attempt in range(MAX_TOGGLE_ATTEMPTS):
                existing = await find()

                if existing is not None:
                    model = type(existing)
                    result = await db.execute(delete(model).where(model.id == existing.id))
                    await db.commit()
                    if result.rowcount:
                        logger.info("Relation removed", key=str(key))
                        return {"state": "removed", "record": None}
                    logger.info("Relation already removed by another writer, retrying", key=str(key), attempt=attempt)
                    continue

                record = build()
                db.add(record)
                try:
                    await db.commit()
                except IntegrityError:
                    await db.rollback()
                    logger.info("Relation already added by another writer, retrying", key=str(key), attempt=attempt)
                    continue

                logger.info("Relation added", key=str(key))
                return {"state": "added", "record": serialize(record)}

        raise InternalError("Could not toggle relation, please retry")

    @staticmethod
    async def toggle_like(db: AsyncSession, actor_id: UUID, target: LikeTarget) -> Dict[str, Any]:
        """
        Like or unlike a video, comment or tweet

        Raises:
            NotFoundError: the target does not exist
        """
        target_model = LIKE_TARGET_MODELS[target.kind]

        async def ensure_target():
            await get_or_404(db, target_model, target.id, target.kind.value)

        async def find():
            result = await db.execute(
                select(Like).where(
                    Like.liked_by == actor_id,
                    Like.target_kind == target.kind,
                    Like.target_id == target.id
                )
            )
            return result.scalar_one_or_none()

        def build():
            return Like(liked_by=actor_id, target_kind=target.kind, target_id=target.id)

        return await ToggleService._toggle(
            db,
            ("like", actor_id, target.kind, target.id),
            ensure_target,
            find,
            build,
            like_record
        )

    @staticmethod
    async def toggle_subscription(db: AsyncSession, subscriber_id: UUID, channel_id: UUID) -> Dict[str, Any]:
        """
        Subscribe to or unsubscribe from a channel

        Raises:
            InvalidArgumentError: subscribing to yourself
            NotFoundError: the channel does not exist
        """
        if subscriber_id == channel_id:
            raise InvalidArgumentError("Cannot subscribe to yourself", field="channel_id")

        async def ensure_target():
            await get_or_404(db, User, channel_id, "channel")

        async def find():
            result = await db.execute(
                select(Subscription).where(
                    Subscription.subscriber_id == subscriber_id,
                    Subscription.channel_id == channel_id
                )
            )
            return result.scalar_one_or_none()

        def build():
            return Subscription(subscriber_id=subscriber_id, channel_id=channel_id)

        return await ToggleService._toggle(
            db,
            ("subscription", subscriber_id, channel_id),
            ensure_target,
            find,
            build,
            subscription_record
        )
