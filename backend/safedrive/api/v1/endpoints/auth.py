from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from datetime import datetime

from safedrive.core.database import get_db
from safedrive.core.exceptions import AuthenticationError, AuthorizationError, ValidationError
from safedrive.core.logging_config import logger, set_user_id
from safedrive.core.rate_limiter import limiter
from safedrive.core.security import (
    verify_password,
    create_access_token,
    set_auth_cookie,
    clear_auth_cookie,
)
from safedrive.models.user import User
from safedrive.modules.auth.dependencies import get_current_user
from safedrive.schemas.auth import UserLogin, UserResponse
from safedrive.schemas.common import success_response


router = APIRouter()


async def authenticate_user(db: AsyncSession, email: str, password: str, client_ip: str) -> User:
    """Check credentials and stamp last_login; shared by the API and the login form"""
    result = await db.execute(select(User).where(User.email == email.strip().lower()))
    user = result.scalar_one_or_none()

    if not user or not verify_password(password, user.hashed_password):
        logger.log_auth_event(
            event="login",
            success=False,
            user_email=email,
            reason="Invalid credentials",
            client_ip=client_ip
        )
        raise AuthenticationError("Invalid credentials")

    if not user.is_active:
        logger.log_auth_event(
            event="login",
            success=False,
            user_email=email,
            reason="Account inactive",
            client_ip=client_ip
        )
        raise AuthorizationError("Account is inactive")

    user.last_login = datetime.utcnow()
    await db.commit()
    await db.refresh(user)

    set_user_id(user.id)
    logger.log_auth_event(
        event="login",
        success=True,
        user_email=user.email,
        client_ip=client_ip,
        user_role=user.role.value
    )
    return user


def issue_token(user: User) -> str:
    return create_access_token({
        "sub": user.id,
        "email": user.email,
        "name": user.name,
        "role": user.role.value,
    })


@router.post("/login")
@limiter.limit("5/minute")
async def login(
    request: Request,
    credentials: UserLogin,
    db: AsyncSession = Depends(get_db)
):
    """Login and receive the session cookie (rate limited: 5/min)"""
    if not credentials.email or not credentials.password:
        raise ValidationError("Email and password are required")

    client_ip = request.client.host if request.client else "unknown"
    user = await authenticate_user(db, credentials.email, credentials.password, client_ip)

    response = JSONResponse(content=success_response(
        {"user": UserResponse.model_validate(user).model_dump(mode="json")},
        message="Login successful",
    ))
    set_auth_cookie(response, issue_token(user))
    return response


@router.post("/logout")
async def logout():
    """Clear the session cookie"""
    response = JSONResponse(content=success_response(message="Logout successful"))
    clear_auth_cookie(response)
    logger.log_auth_event(event="logout", success=True)
    return response


@router.get("/me")
async def get_me(current_user: User = Depends(get_current_user)):
    """Get current user info"""
    return success_response(UserResponse.model_validate(current_user).model_dump(mode="json"))
