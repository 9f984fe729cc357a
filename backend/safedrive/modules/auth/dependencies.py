from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import Optional

from safedrive.core.database import get_db
from safedrive.core.exceptions import AuthenticationError, AuthorizationError, InvalidTokenError
from safedrive.core.logging_config import set_user_id
from safedrive.core.security import decode_token, get_token_from_request
from safedrive.models.user import User


async def _resolve_user(token: str, db: AsyncSession) -> User:
    payload = decode_token(token)

    if payload.get("type") != "access":
        raise InvalidTokenError()

    user_id = payload.get("sub")
    if not user_id:
        raise InvalidTokenError()

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if not user:
        raise InvalidTokenError()

    return user


async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_db)
) -> User:
    """Get current authenticated user from the auth cookie or a bearer header"""
    token = get_token_from_request(request)
    if not token:
        raise AuthenticationError()

    user = await _resolve_user(token, db)

    if not user.is_active:
        raise AuthorizationError("User account is inactive")

    # Rate limiter keys and log records pick these up
    request.state.user_id = user.id
    set_user_id(user.id)
    return user


async def get_optional_user(
    request: Request,
    db: AsyncSession = Depends(get_db)
) -> Optional[User]:
    """Current user, or None for anonymous visitors and stale tokens"""
    token = get_token_from_request(request)
    if not token:
        return None
    try:
        user = await _resolve_user(token, db)
    except InvalidTokenError:
        return None
    if not user.is_active:
        return None

    request.state.user_id = user.id
    set_user_id(user.id)
    return user

