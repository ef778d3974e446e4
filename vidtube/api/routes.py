"""
Main API router that includes all endpoint routers
"""

from fastapi import APIRouter

from vidtube.api.endpoints import comments, engagement, healthcheck, playlists, tweets, users, videos

api_router = APIRouter()

api_router.include_router(healthcheck.router, prefix="/healthcheck", tags=["Healthcheck"])
api_router.include_router(users.router, prefix="/users", tags=["Users"])
api_router.include_router(videos.router, prefix="/videos", tags=["Videos"])
api_router.include_router(comments.router, prefix="/comments", tags=["Comments"])
api_router.include_router(tweets.router, prefix="/tweets", tags=["Tweets"])
api_router.include_router(engagement.likes_router, prefix="/likes", tags=["Likes"])
api_router.include_router(engagement.subscriptions_router, prefix="/subscriptions", tags=["Subscriptions"])
api_router.include_router(playlists.router, prefix="/playlist", tags=["Playlists"])
