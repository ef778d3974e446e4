"""
Video model
"""

from sqlalchemy import Column, String, Text, Integer, Float, Boolean, DateTime, ForeignKey, Index, Uuid
from uuid import uuid4

from vidtube.db.database import Base, utcnow


class Video(Base):
    __tablename__ = "videos"

    id = Column(Uuid, primary_key=True, default=uuid4)
    owner_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    # Media
    video_url = Column(String(500), nullable=False)
    thumbnail_url = Column(String(500), nullable=False)
    duration = Column(Float, nullable=False, default=0)  # seconds

    # Details
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False, default="")

    views = Column(Integer, nullable=False, default=0)
    is_published = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    __table_args__ = (
        Index('ix_videos_owner_created', 'owner_id', 'created_at'),
    )

    def __repr__(self):
        return f"<Video(id={self.id}, title='{self.title}')>"
