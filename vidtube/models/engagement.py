"""
Engagement models: likes and channel subscriptions

Both are relations toggled by an actor on a target and carry a unique
constraint over (actor, target), so a pair is stored at most once.
"""

from dataclasses import dataclass
from sqlalchemy import Column, DateTime, Enum, ForeignKey, Index, UniqueConstraint, Uuid
from uuid import UUID, uuid4
import enum

from vidtube.db.database import Base, utcnow


class LikeTargetKind(str, enum.Enum):
    VIDEO = "video"
    COMMENT = "comment"
    TWEET = "tweet"


@dataclass(frozen=True)
class LikeTarget:
    """What a like points at: exactly one video, comment or tweet"""
    kind: LikeTargetKind
    id: UUID


class Like(Base):
    __tablename__ = "likes"

    id = Column(Uuid, primary_key=True, default=uuid4)
    liked_by = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    # Polymorphic target; not a foreign key so one table serves all kinds
    target_kind = Column(Enum(LikeTargetKind, name="like_target_kind"), nullable=False)
    target_id = Column(Uuid, nullable=False)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint('liked_by', 'target_kind', 'target_id', name='uq_likes_actor_target'),
        Index('ix_likes_target', 'target_kind', 'target_id'),
    )

    def __repr__(self):
        return f"<Like(liked_by={self.liked_by}, target={self.target_kind}:{self.target_id})>"


class Subscription(Base):
    """subscriber follows channel; both are users"""
    __tablename__ = "subscriptions"

    id = Column(Uuid, primary_key=True, default=uuid4)
    subscriber_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    channel_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint('subscriber_id', 'channel_id', name='uq_subscriptions_subscriber_channel'),
    )

    def __repr__(self):
        return f"<Subscription(subscriber_id={self.subscriber_id}, channel_id={self.channel_id})>"
