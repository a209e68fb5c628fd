"""JWT token handling."""

from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from loguru import logger
from pydantic import BaseModel, Field

from src.core.config import settings
from src.core.domain.exceptions import AuthenticationRequiredError

security = HTTPBearer(auto_error=False)


class TokenPayload(BaseModel):
    """JWT Token Payload 结构。"""

    sub: str = Field(..., description="Subject (用户ID)")
    exp: int = Field(..., description="过期时间戳", gt=0)

    def get_subject(self) -> str:
        """获取 subject (用户ID)。"""
        return self.sub


def create_access_token(
    subject: str | Any,
    expires_delta: timedelta | None = None,
    extra_claims: dict | None = None,
) -> str:
    """Create a JWT access token."""
    if expires_delta:
        expire = datetime.now(UTC) + expires_delta
    else:
        expire = datetime.now(UTC) + timedelta(
            minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES
        )

    to_encode = {"exp": expire, "sub": str(subject)}
    if extra_claims:
        to_encode.update(extra_claims)

    encoded_jwt = jwt.encode(
        to_encode, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM
    )
    return encoded_jwt


def decode_token(token: str) -> TokenPayload:
    """Decode and validate a JWT token.

    Args:
        token: JWT token string

    Returns:
        TokenPayload: 解码后的 token payload

    Raises:
        AuthenticationRequiredError: Token 过期或无效
    """
    try:
        payload = jwt.decode(
            token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM]
        )
        return TokenPayload(
            sub=payload.get("sub", ""),
            exp=payload.get("exp", 0),
        )
    except jwt.ExpiredSignatureError:
        raise AuthenticationRequiredError("Token has expired")
    except jwt.InvalidTokenError as e:
        logger.warning(f"Invalid token: {e}")
        raise AuthenticationRequiredError("Invalid token")


async def get_current_user_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> str:
    """Get current user ID from JWT token.

    Raises:
        AuthenticationRequiredError: 缺少 Token、Token 无效或缺少用户ID
    """
    if credentials is None:
        raise AuthenticationRequiredError("用户未登录或会话已过期")
    payload = decode_token(credentials.credentials)
    user_id = payload.get_subject()
    if not user_id:
        raise AuthenticationRequiredError("Invalid token payload")
    return user_id


async def get_optional_user_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> str | None:
    """Return the user ID if a bearer token was sent; reject invalid tokens."""
    if credentials is None:
        return None
    payload = decode_token(credentials.credentials)
    return payload.get_subject() or None
