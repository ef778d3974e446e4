"""
Comments on videos and short text posts ("tweets")
"""

from sqlalchemy import Column, Text, DateTime, ForeignKey, Index, Uuid
from uuid import uuid4

from vidtube.db.database import Base, utcnow


class Comment(Base):
    """User comment on a video"""
    __tablename__ = "comments"

    id = Column(Uuid, primary_key=True, default=uuid4)
    video_id = Column(Uuid, ForeignKey("videos.id", ondelete="CASCADE"), nullable=False)
    owner_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    content = Column(Text, nullable=False)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    __table_args__ = (
        Index('ix_comments_video_created', 'video_id', 'created_at'),
    )

    def __repr__(self):
        return f"<Comment(id={self.id}, video_id={self.video_id})>"


class Tweet(Base):
    """Short text post on a user's channel"""
    __tablename__ = "tweets"

    id = Column(Uuid, primary_key=True, default=uuid4)
    owner_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    content = Column(Text, nullable=False)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    def __repr__(self):
        return f"<Tweet(id={self.id}, owner_id={self.owner_id})>"
