"""
Tweet endpoints
"""

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.api.deps import get_current_user
from vidtube.db.database import get_db
from vidtube.models.user import User
from vidtube.schemas import ApiResponse, TextContentCreate, TweetResponse, TweetView, success_response
from vidtube.services import TweetService, ViewService
from vidtube.services.lookups import parse_id

router = APIRouter()


@router.post("/", response_model=ApiResponse[TweetResponse], status_code=status.HTTP_201_CREATED)
async def create_tweet(
    body: TextContentCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    tweet = await TweetService.create_tweet(db, current_user.id, body.content)
    return success_response(TweetResponse.model_validate(tweet), "Tweet created successfully", status.HTTP_201_CREATED)


@router.get("/user/{user_id}", response_model=ApiResponse[List[TweetView]])
async def get_user_tweets(user_id: str, db: AsyncSession = Depends(get_db)):
    tweets = await ViewService.get_user_tweets(db, parse_id(user_id, "user_id"))
    return success_response(tweets, "Tweets fetched successfully")


@router.patch("/{tweet_id}", response_model=ApiResponse[TweetResponse])
async def update_tweet(
    tweet_id: str,
    body: TextContentCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    tweet = await TweetService.update_tweet(db, parse_id(tweet_id, "tweet_id"), current_user.id, body.content)
    return success_response(TweetResponse.model_validate(tweet), "Tweet updated successfully")


@router.delete("/{tweet_id}", response_model=ApiResponse[dict])
async def delete_tweet(
    tweet_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    await TweetService.delete_tweet(db, parse_id(tweet_id, "tweet_id"), current_user.id)
    return success_response({}, "Tweet deleted successfully")
