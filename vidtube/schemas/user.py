"""
User, auth and channel schemas
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class UserResponse(BaseModel):
    """Public view of a user; never carries the password hash"""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    username: str
    email: str
    full_name: str
    avatar_url: str
    cover_image_url: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class OwnerSummary(BaseModel):
    """Reduced user projection embedded in other read models"""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    username: str
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None


class ChannelProfile(BaseModel):
    id: UUID
    username: str
    full_name: str
    email: str
    avatar_url: str
    cover_image_url: Optional[str] = None
    subscribers_count: int
    subscribed_to_count: int
    is_subscribed: bool


class LoginRequest(BaseModel):
    email: Optional[EmailStr] = None
    username: Optional[str] = None
    password: str = Field(..., min_length=1)


class RefreshTokenRequest(BaseModel):
    refresh_token: Optional[str] = None


class TokenPair(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class LoginResponse(TokenPair):
    user: UserResponse


class ChangePasswordRequest(BaseModel):
    old_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=8, max_length=72)


class UpdateAccountRequest(BaseModel):
    full_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr

    @field_validator('full_name')
    @classmethod
    def strip_full_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('Full name is required')
        return v


class SubscriptionEntry(BaseModel):
    """One row of a subscriber / subscribed-channel list"""
    id: UUID
    subscribed_at: datetime
    user: OwnerSummary
