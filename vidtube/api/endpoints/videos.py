"""
Video endpoints
"""

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.api.deps import get_current_user, get_optional_user
from vidtube.db.database import get_db
from vidtube.models.user import User
from vidtube.schemas import ApiResponse, Page, VideoResponse, VideoSummary, success_response
from vidtube.services import VideoService, ViewService
from vidtube.services.lookups import parse_id
from vidtube.services.media_storage import MediaStorage, get_media_storage

router = APIRouter()


@router.get("/", response_model=ApiResponse[Page[VideoSummary]])
async def list_videos(
    page: int = Query(1, description="Page number (starts at 1)"),
    limit: int = Query(10, description="Items per page"),
    query: Optional[str] = Query(None, description="Search in title and description"),
    sort_by: Optional[str] = Query(None, alias="sortBy", description="created_at, updated_at, title, views, duration"),
    sort_type: Optional[str] = Query(None, alias="sortType", description="asc or desc (default)"),
    user_id: Optional[str] = Query(None, alias="userId", description="Only videos of this channel"),
    current_user: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db)
):
    """
    List videos with search, channel filter, sorting and pagination

    - **query**: free text; when given, **userId** is ignored
    - **sortBy** / **sortType**: defaults to newest first
    """
    feed = await ViewService.get_video_feed(
        db,
        viewer_id=current_user.id if current_user else None,
        query=query,
        user_id=user_id,
        sort_by=sort_by,
        sort_type=sort_type,
        page=page,
        limit=limit
    )
    return success_response(feed, "Videos fetched successfully")


@router.post("/", response_model=ApiResponse[VideoResponse], status_code=status.HTTP_201_CREATED)
async def publish_video(
    title: str = Form(...),
    description: str = Form(""),
    video_file: Optional[UploadFile] = File(None),
    thumbnail: Optional[UploadFile] = File(None),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    storage: MediaStorage = Depends(get_media_storage)
):
    video = await VideoService.publish_video(
        db, storage, current_user.id, title, description, video_file, thumbnail
    )
    return success_response(VideoResponse.model_validate(video), "Video published successfully", status.HTTP_201_CREATED)


@router.get("/{video_id}", response_model=ApiResponse[VideoResponse])
async def get_video(
    video_id: str,
    current_user: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db)
):
    video = await VideoService.get_video(
        db, parse_id(video_id, "video_id"), current_user.id if current_user else None
    )
    return success_response(VideoResponse.model_validate(video), "Video fetched successfully")


@router.patch("/{video_id}", response_model=ApiResponse[VideoResponse])
async def update_video(
    video_id: str,
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    thumbnail: Optional[UploadFile] = File(None),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    storage: MediaStorage = Depends(get_media_storage)
):
    video = await VideoService.update_video(
        db, storage, parse_id(video_id, "video_id"), current_user.id,
        title=title, description=description, thumbnail=thumbnail
    )
    return success_response(VideoResponse.model_validate(video), "Video updated successfully")


@router.delete("/{video_id}", response_model=ApiResponse[dict])
async def delete_video(
    video_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    storage: MediaStorage = Depends(get_media_storage)
):
    await VideoService.delete_video(db, storage, parse_id(video_id, "video_id"), current_user.id)
    return success_response({}, "Video deleted successfully")


@router.patch("/toggle/publish/{video_id}", response_model=ApiResponse[VideoResponse])
async def toggle_publish_status(
    video_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    video = await VideoService.toggle_publish_status(db, parse_id(video_id, "video_id"), current_user.id)
    return success_response(VideoResponse.model_validate(video), "Publish status toggled")
