"""
Dependency functions for API endpoints
"""

from typing import Optional
from uuid import UUID

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.core.exceptions import UnauthorizedError
from vidtube.core.security import decode_access_token
from vidtube.db.database import get_db
from vidtube.models.user import User

ACCESS_TOKEN_COOKIE = "accessToken"
REFRESH_TOKEN_COOKIE = "refreshToken"

# Bearer header is optional because browsers send the token as a cookie
bearer_scheme = HTTPBearer(auto_error=False)


def _extract_token(request: Request, credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[str]:
    if credentials and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(ACCESS_TOKEN_COOKIE)


async def _load_user(db: AsyncSession, token: str) -> User:
    payload = decode_access_token(token)
    try:
        user_id = UUID(payload["sub"])
    except ValueError:
        raise UnauthorizedError("Invalid access token")

    user = await db.get(User, user_id)
    if user is None:
        raise UnauthorizedError("Invalid access token")
    return user


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db)
) -> User:
    """Authenticated user from the bearer header or the access token cookie"""
    token = _extract_token(request, credentials)
    if not token:
        raise UnauthorizedError("Unauthorized request")
    return await _load_user(db, token)


async def get_optional_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db)
) -> Optional[User]:
    """Like get_current_user, but anonymous or invalid credentials yield None"""
    token = _extract_token(request, credentials)
    if not token:
        return None
    try:
        return await _load_user(db, token)
    except UnauthorizedError:
        return None
