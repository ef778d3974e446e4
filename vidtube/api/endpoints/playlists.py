"""
Playlist endpoints
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.api.deps import get_current_user
from vidtube.db.database import get_db
from vidtube.models.user import User
from vidtube.schemas import (
    ApiResponse,
    PlaylistCreate,
    PlaylistResponse,
    PlaylistUpdate,
    PlaylistView,
    success_response,
)
from vidtube.services import PlaylistService, ViewService
from vidtube.services.lookups import parse_id

router = APIRouter()


@router.post("/", response_model=ApiResponse[PlaylistResponse], status_code=status.HTTP_201_CREATED)
async def create_playlist(
    body: PlaylistCreate,
    video_id: Optional[str] = Query(None, alias="videoId", description="Video to start the playlist with"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    playlist = await PlaylistService.create_playlist(
        db, current_user.id, body.name, body.description,
        parse_id(video_id, "video_id") if video_id else None
    )
    return success_response(PlaylistResponse.model_validate(playlist), "Playlist created successfully", status.HTTP_201_CREATED)


@router.get("/user/{user_id}", response_model=ApiResponse[List[PlaylistView]])
async def get_user_playlists(user_id: str, db: AsyncSession = Depends(get_db)):
    playlists = await ViewService.get_user_playlists(db, parse_id(user_id, "user_id"))
    return success_response(playlists, "Playlists fetched successfully")


@router.get("/{playlist_id}", response_model=ApiResponse[PlaylistView])
async def get_playlist(playlist_id: str, db: AsyncSession = Depends(get_db)):
    playlist = await ViewService.get_playlist_by_id(db, parse_id(playlist_id, "playlist_id"))
    return success_response(playlist, "Playlist fetched successfully")


@router.patch("/{playlist_id}", response_model=ApiResponse[PlaylistResponse])
async def update_playlist(
    playlist_id: str,
    body: PlaylistUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    playlist = await PlaylistService.update_playlist(
        db, parse_id(playlist_id, "playlist_id"), current_user.id,
        name=body.name, description=body.description
    )
    return success_response(PlaylistResponse.model_validate(playlist), "Playlist updated successfully")


@router.delete("/{playlist_id}", response_model=ApiResponse[dict])
async def delete_playlist(
    playlist_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    await PlaylistService.delete_playlist(db, parse_id(playlist_id, "playlist_id"), current_user.id)
    return success_response({}, "Playlist deleted successfully")


@router.patch("/add/{video_id}/{playlist_id}", response_model=ApiResponse[PlaylistResponse])
async def add_video_to_playlist(
    video_id: str,
    playlist_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    playlist = await PlaylistService.add_video(
        db, parse_id(playlist_id, "playlist_id"), parse_id(video_id, "video_id"), current_user.id
    )
    return success_response(PlaylistResponse.model_validate(playlist), "Video added to playlist")


@router.patch("/remove/{video_id}/{playlist_id}", response_model=ApiResponse[PlaylistResponse])
async def remove_video_from_playlist(
    video_id: str,
    playlist_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    playlist = await PlaylistService.remove_video(
        db, parse_id(playlist_id, "playlist_id"), parse_id(video_id, "video_id"), current_user.id
    )
    return success_response(PlaylistResponse.model_validate(playlist), "Video removed from playlist")
