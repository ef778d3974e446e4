"""
User model for authentication and channel profiles
"""

from sqlalchemy import Column, String, DateTime, JSON, ForeignKey, Uuid
from uuid import uuid4

from vidtube.db.database import Base, utcnow


class User(Base):
    __tablename__ = "users"

    # Primary key
    id = Column(Uuid, primary_key=True, default=uuid4)

    # Authentication fields
    username = Column(String(50), unique=True, nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)

    # Profile fields
    full_name = Column(String(100), nullable=False)
    avatar_url = Column(String(500), nullable=False)
    cover_image_url = Column(String(500), nullable=True)

    # Video ids as strings, most recent first; duplicates allowed
    watch_history = Column(JSON, nullable=False, default=list)

    # Timestamps
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    def __repr__(self):
        return f"<User(id={self.id}, username='{self.username}')>"


class RefreshSession(Base):
    """The single active refresh session of a user.

    Only a SHA-256 digest of the refresh token is kept. Login and refresh
    overwrite the row, logout deletes it.
    """
    __tablename__ = "refresh_sessions"

    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    token_hash = Column(String(64), nullable=False)
    issued_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    def __repr__(self):
        return f"<RefreshSession(user_id={self.user_id}, issued_at={self.issued_at})>"
