"""
User endpoints: registration, login/refresh/logout, account and channel
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Request, Response, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.api.deps import ACCESS_TOKEN_COOKIE, REFRESH_TOKEN_COOKIE, get_current_user, get_optional_user
from vidtube.core.config import settings
from vidtube.db.database import get_db
from vidtube.models.user import User
from vidtube.schemas import (
    ApiResponse,
    ChangePasswordRequest,
    ChannelProfile,
    LoginRequest,
    LoginResponse,
    RefreshTokenRequest,
    TokenPair,
    UpdateAccountRequest,
    UserResponse,
    VideoSummary,
    success_response,
)
from vidtube.services import AuthService, UserService, ViewService
from vidtube.services.media_storage import MediaStorage, get_media_storage

router = APIRouter()


def _set_auth_cookies(response: Response, access_token: str, refresh_token: str):
    options = {"httponly": True, "secure": settings.COOKIE_SECURE, "samesite": settings.COOKIE_SAMESITE}
    response.set_cookie(
        ACCESS_TOKEN_COOKIE, access_token,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60, **options
    )
    response.set_cookie(
        REFRESH_TOKEN_COOKIE, refresh_token,
        max_age=settings.REFRESH_TOKEN_EXPIRE_DAYS * 24 * 3600, **options
    )


def _clear_auth_cookies(response: Response):
    options = {"httponly": True, "secure": settings.COOKIE_SECURE, "samesite": settings.COOKIE_SAMESITE}
    response.delete_cookie(ACCESS_TOKEN_COOKIE, **options)
    response.delete_cookie(REFRESH_TOKEN_COOKIE, **options)


@router.post("/register", response_model=ApiResponse[UserResponse], status_code=status.HTTP_201_CREATED)
async def register_user(
    full_name: str = Form(...),
    email: str = Form(...),
    username: str = Form(...),
    password: str = Form(...),
    avatar: Optional[UploadFile] = File(None),
    cover_image: Optional[UploadFile] = File(None),
    db: AsyncSession = Depends(get_db),
    storage: MediaStorage = Depends(get_media_storage)
):
    """Create an account; avatar required, cover image optional (multipart form)"""
    user = await AuthService.register(
        db, storage,
        username=username,
        email=email,
        full_name=full_name,
        password=password,
        avatar=avatar,
        cover_image=cover_image
    )
    return success_response(
        UserResponse.model_validate(user), "User registered successfully", status.HTTP_201_CREATED
    )


@router.post("/login", response_model=ApiResponse[LoginResponse])
async def login_user(
    credentials: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db)
):
    """Log in with username or email; tokens are returned and set as httpOnly cookies"""
    user, access_token, refresh_token = await AuthService.login(
        db,
        password=credentials.password,
        email=credentials.email,
        username=credentials.username
    )
    _set_auth_cookies(response, access_token, refresh_token)
    return success_response(
        LoginResponse(
            user=UserResponse.model_validate(user),
            access_token=access_token,
            refresh_token=refresh_token
        ),
        "User logged in successfully"
    )


@router.post("/logout", response_model=ApiResponse[dict])
async def logout_user(
    response: Response,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    await AuthService.logout(db, current_user.id)
    _clear_auth_cookies(response)
    return success_response({}, "User logged out")


@router.post("/refresh-token", response_model=ApiResponse[TokenPair])
async def refresh_access_token(
    request: Request,
    response: Response,
    payload: Optional[RefreshTokenRequest] = None,
    db: AsyncSession = Depends(get_db)
):
    """Exchange a refresh token (body or cookie) for a new token pair"""
    presented = (payload.refresh_token if payload else None) or request.cookies.get(REFRESH_TOKEN_COOKIE)
    _, access_token, refresh_token = await AuthService.refresh(db, presented)
    _set_auth_cookies(response, access_token, refresh_token)
    return success_response(
        TokenPair(access_token=access_token, refresh_token=refresh_token),
        "Access token refreshed"
    )


@router.post("/change-password", response_model=ApiResponse[dict])
async def change_password(
    passwords: ChangePasswordRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    await AuthService.change_password(db, current_user, passwords.old_password, passwords.new_password)
    return success_response({}, "Password changed successfully")


@router.get("/current-user", response_model=ApiResponse[UserResponse])
async def get_current_user_details(current_user: User = Depends(get_current_user)):
    return success_response(UserResponse.model_validate(current_user), "User fetched successfully")


@router.patch("/update-account", response_model=ApiResponse[UserResponse])
async def update_account_details(
    details: UpdateAccountRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    user = await UserService.update_account_details(db, current_user, details.full_name, details.email)
    return success_response(UserResponse.model_validate(user), "Account details updated successfully")


@router.patch("/avatar", response_model=ApiResponse[UserResponse])
async def update_avatar(
    avatar: UploadFile = File(...),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    storage: MediaStorage = Depends(get_media_storage)
):
    user = await UserService.update_avatar(db, storage, current_user, avatar)
    return success_response(UserResponse.model_validate(user), "Avatar updated successfully")


@router.patch("/cover-image", response_model=ApiResponse[UserResponse])
async def update_cover_image(
    cover_image: UploadFile = File(...),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    storage: MediaStorage = Depends(get_media_storage)
):
    user = await UserService.update_cover_image(db, storage, current_user, cover_image)
    return success_response(UserResponse.model_validate(user), "Cover image updated successfully")


@router.get("/c/{username}", response_model=ApiResponse[ChannelProfile])
async def get_channel_profile(
    username: str,
    current_user: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db)
):
    profile = await ViewService.get_channel_profile(
        db, username, current_user.id if current_user else None
    )
    return success_response(profile, "User channel fetched successfully")


@router.get("/history", response_model=ApiResponse[List[VideoSummary]])
async def get_watch_history(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    history = await ViewService.get_watch_history(db, current_user.id)
    return success_response(history, "Watch history fetched successfully")
