"""
Playlist model
"""

from sqlalchemy import Column, String, Text, DateTime, JSON, ForeignKey, Uuid
from uuid import uuid4

from vidtube.db.database import Base, utcnow


class Playlist(Base):
    __tablename__ = "playlists"

    id = Column(Uuid, primary_key=True, default=uuid4)
    owner_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)

    # Ordered video ids as strings. Always assign a new list, in-place
    # mutation of a JSON column is not tracked.
    videos = Column(JSON, nullable=False, default=list)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    def __repr__(self):
        return f"<Playlist(id={self.id}, name='{self.name}')>"
