"""
Comment endpoints
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.api.deps import get_current_user
from vidtube.db.database import get_db
from vidtube.models.user import User
from vidtube.schemas import ApiResponse, CommentResponse, CommentView, Page, TextContentCreate, success_response
from vidtube.services import CommentService, ViewService
from vidtube.services.lookups import parse_id

router = APIRouter()


@router.get("/{video_id}", response_model=ApiResponse[Page[CommentView]])
async def get_video_comments(
    video_id: str,
    page: int = Query(1, description="Page number (starts at 1)"),
    limit: int = Query(10, description="Items per page"),
    db: AsyncSession = Depends(get_db)
):
    comments = await ViewService.get_comments(db, parse_id(video_id, "video_id"), page, limit)
    return success_response(comments, "Comments fetched successfully")


@router.post("/{video_id}", response_model=ApiResponse[CommentResponse], status_code=status.HTTP_201_CREATED)
async def add_comment(
    video_id: str,
    body: TextContentCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    comment = await CommentService.add_comment(db, parse_id(video_id, "video_id"), current_user.id, body.content)
    return success_response(CommentResponse.model_validate(comment), "Comment added successfully", status.HTTP_201_CREATED)


@router.patch("/c/{comment_id}", response_model=ApiResponse[CommentResponse])
async def update_comment(
    comment_id: str,
    body: TextContentCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    comment = await CommentService.update_comment(db, parse_id(comment_id, "comment_id"), current_user.id, body.content)
    return success_response(CommentResponse.model_validate(comment), "Comment updated successfully")


@router.delete("/c/{comment_id}", response_model=ApiResponse[dict])
async def delete_comment(
    comment_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    await CommentService.delete_comment(db, parse_id(comment_id, "comment_id"), current_user.id)
    return success_response({}, "Comment deleted successfully")
