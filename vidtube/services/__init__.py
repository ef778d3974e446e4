"""
Services package - Business logic layer
"""

from vidtube.services.auth_service import AuthService, SessionStore
from vidtube.services.comment_service import CommentService, TweetService
from vidtube.services.playlist_service import PlaylistService
from vidtube.services.toggle_service import ToggleService
from vidtube.services.user_service import UserService
from vidtube.services.video_service import VideoService
from vidtube.services.view_service import ViewService

__all__ = [
    'AuthService',
    'SessionStore',
    'CommentService',
    'TweetService',
    'PlaylistService',
    'ToggleService',
    'UserService',
    'VideoService',
    'ViewService',
]
