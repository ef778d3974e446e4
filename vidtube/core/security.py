"""
Security utilities: password hashing and JWT access/refresh tokens
"""

import hashlib
from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import uuid4

from jose import JWTError, jwt
from passlib.context import CryptContext

from vidtube.core.config import settings
from vidtube.core.exceptions import InvalidArgumentError, UnauthorizedError

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"

# Password hashing context with explicit bcrypt configuration
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS
)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash"""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Generate password hash"""
    # bcrypt only looks at the first 72 bytes
    if len(password.encode('utf-8')) > 72:
        raise InvalidArgumentError("Password must be at most 72 bytes long", field="password")

    return pwd_context.hash(password)


def _encode(data: dict, token_type: str, secret: str, expires_delta: timedelta) -> str:
    to_encode = data.copy()
    now = datetime.now(timezone.utc)
    to_encode.update({
        "type": token_type,
        "iat": now,
        "exp": now + expires_delta,
        # Unique per token so two tokens issued in the same second still differ
        "jti": uuid4().hex,
    })
    return jwt.encode(to_encode, secret, algorithm=settings.ALGORITHM)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create short-lived JWT access token"""
    return _encode(
        data,
        ACCESS_TOKEN_TYPE,
        settings.SECRET_KEY,
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )


def create_refresh_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT refresh token (longer expiry, separate signing key)"""
    return _encode(
        data,
        REFRESH_TOKEN_TYPE,
        settings.REFRESH_SECRET_KEY,
        expires_delta or timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)
    )


def _decode(token: str, token_type: str, secret: str) -> dict:
    try:
        payload = jwt.decode(token, secret, algorithms=[settings.ALGORITHM])
    except JWTError:
        raise UnauthorizedError(f"Invalid or expired {token_type} token")

    if payload.get("type") != token_type or not payload.get("sub"):
        raise UnauthorizedError(f"Invalid {token_type} token")
    return payload


def decode_access_token(token: str) -> dict:
    """Verify and decode an access token, raising UnauthorizedError"""
    return _decode(token, ACCESS_TOKEN_TYPE, settings.SECRET_KEY)


def decode_refresh_token(token: str) -> dict:
    """Verify and decode a refresh token, raising UnauthorizedError"""
    return _decode(token, REFRESH_TOKEN_TYPE, settings.REFRESH_SECRET_KEY)


def hash_token(token: str) -> str:
    """Digest stored in place of the refresh token itself"""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()
