"""
Video, comment, tweet and playlist schemas
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from vidtube.schemas.user import OwnerSummary


class VideoResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    owner_id: UUID
    video_url: str
    thumbnail_url: str
    title: str
    description: str
    duration: float
    views: int
    is_published: bool
    created_at: datetime
    updated_at: datetime


class VideoSummary(BaseModel):
    """Video as shown in feeds, history, liked videos and playlists.

    Fields not projected by a given view are left as None.
    """
    id: UUID
    title: str
    thumbnail_url: str
    description: Optional[str] = None
    video_url: Optional[str] = None
    duration: float
    views: int
    is_published: Optional[bool] = None
    created_at: datetime
    owner: Optional[OwnerSummary] = None


def _non_blank(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError('Content is required')
    return value


class TextContentCreate(BaseModel):
    """Body for creating or editing a comment or tweet"""
    content: str = Field(..., max_length=5000)

    @field_validator('content')
    @classmethod
    def validate_content(cls, v):
        return _non_blank(v)


class CommentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    video_id: UUID
    owner_id: UUID
    content: str
    created_at: datetime
    updated_at: datetime


class CommentView(BaseModel):
    id: UUID
    content: str
    created_at: datetime
    owner: OwnerSummary


class TweetResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    owner_id: UUID
    content: str
    created_at: datetime
    updated_at: datetime


class TweetView(BaseModel):
    id: UUID
    content: str
    created_at: datetime
    updated_at: datetime
    owner: OwnerSummary


class PlaylistCreate(BaseModel):
    name: str = Field(..., max_length=200)
    description: str = Field(..., max_length=5000)

    @field_validator('name', 'description')
    @classmethod
    def validate_text(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('Name and description are required')
        return v


class PlaylistUpdate(BaseModel):
    name: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = Field(None, max_length=5000)

    @field_validator('name', 'description')
    @classmethod
    def validate_text(cls, v):
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError('Value must not be blank')
        return v


class PlaylistResponse(BaseModel):
    """Playlist row as stored: video ids in order"""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    owner_id: UUID
    name: str
    description: str
    videos: List[UUID]
    created_at: datetime
    updated_at: datetime


class PlaylistView(BaseModel):
    """Playlist with its videos and owner expanded"""
    id: UUID
    name: str
    description: str
    updated_at: datetime
    owner: Optional[OwnerSummary] = None
    videos: List[VideoSummary]
