"""
Like and subscription endpoints
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.api.deps import get_current_user
from vidtube.db.database import get_db
from vidtube.models import LikeTarget, LikeTargetKind
from vidtube.models.user import User
from vidtube.schemas import ApiResponse, SubscriptionEntry, ToggleResult, VideoSummary, success_response
from vidtube.services import ToggleService, ViewService
from vidtube.services.lookups import parse_id

likes_router = APIRouter()
subscriptions_router = APIRouter()


async def _toggle_like(db: AsyncSession, user: User, kind: LikeTargetKind, raw_id: str) -> ApiResponse:
    target = LikeTarget(kind=kind, id=parse_id(raw_id, f"{kind.value}_id"))
    result = await ToggleService.toggle_like(db, user.id, target)
    message = f"{kind.value.title()} liked" if result["state"] == "added" else f"{kind.value.title()} unliked"
    return success_response(result, message)


@likes_router.post("/toggle/v/{video_id}", response_model=ApiResponse[ToggleResult])
async def toggle_video_like(
    video_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await _toggle_like(db, current_user, LikeTargetKind.VIDEO, video_id)


@likes_router.post("/toggle/c/{comment_id}", response_model=ApiResponse[ToggleResult])
async def toggle_comment_like(
    comment_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await _toggle_like(db, current_user, LikeTargetKind.COMMENT, comment_id)


@likes_router.post("/toggle/t/{tweet_id}", response_model=ApiResponse[ToggleResult])
async def toggle_tweet_like(
    tweet_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await _toggle_like(db, current_user, LikeTargetKind.TWEET, tweet_id)


@likes_router.get("/videos", response_model=ApiResponse[List[VideoSummary]])
async def get_liked_videos(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    videos = await ViewService.get_liked_videos(db, current_user.id)
    return success_response(videos, "Liked videos fetched successfully")


@subscriptions_router.post("/c/{channel_id}", response_model=ApiResponse[ToggleResult])
async def toggle_subscription(
    channel_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    result = await ToggleService.toggle_subscription(db, current_user.id, parse_id(channel_id, "channel_id"))
    message = "Subscribed" if result["state"] == "added" else "Unsubscribed"
    return success_response(result, message)


@subscriptions_router.get("/c/{channel_id}", response_model=ApiResponse[List[SubscriptionEntry]])
async def get_channel_subscribers(channel_id: str, db: AsyncSession = Depends(get_db)):
    subscribers = await ViewService.get_channel_subscribers(db, parse_id(channel_id, "channel_id"))
    return success_response(subscribers, "Subscribers fetched successfully")


@subscriptions_router.get("/u/{subscriber_id}", response_model=ApiResponse[List[SubscriptionEntry]])
async def get_subscribed_channels(subscriber_id: str, db: AsyncSession = Depends(get_db)):
    channels = await ViewService.get_subscribed_channels(db, parse_id(subscriber_id, "subscriber_id"))
    return success_response(channels, "Subscribed channels fetched successfully")
