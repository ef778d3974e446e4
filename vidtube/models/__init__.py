"""
Database models for the VidTube platform
"""

from .user import User, RefreshSession
from .video import Video
from .comment import Comment, Tweet
from .engagement import Like, LikeTarget, LikeTargetKind, Subscription
from .playlist import Playlist

__all__ = [
    "User",
    "RefreshSession",
    "Video",
    "Comment",
    "Tweet",
    "Like",
    "LikeTarget",
    "LikeTargetKind",
    "Subscription",
    "Playlist",
]
