import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.database import get_async_session
from app.models.user import (
    UserSignup, UserLogin, ProfileUpdate, PasswordChange,
    AuthResponse, UserResponse, MessageResponse, UserStats,
)
from app.services import auth_service, stats_service

logger = logging.getLogger("routes_auth")

router = APIRouter(prefix="/auth", tags=["Authentication"])


def get_bearer_token(authorization: Optional[str] = Header(None)) -> Optional[str]:
    if not authorization:
        return None
    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    return parts[1]


def _internal_error(message: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=message)


@router.post("/signup", response_model=AuthResponse, status_code=201)
async def signup(user: UserSignup, session: AsyncSession = Depends(get_async_session)):
    try:
        return await auth_service.signup_user(user, session)
    except HTTPException:
        raise
    except Exception:
        logger.exception("Error signing up")
        raise _internal_error("Failed to sign up")


@router.post("/login", response_model=AuthResponse)
async def login(user: UserLogin, session: AsyncSession = Depends(get_async_session)):
    try:
        return await auth_service.login_user(user, session)
    except HTTPException:
        raise
    except Exception:
        logger.exception("Error logging in")
        raise _internal_error("Failed to log in")


@router.post("/verify", response_model=UserResponse)
async def verify(token: Optional[str] = Depends(get_bearer_token),
                 session: AsyncSession = Depends(get_async_session)):
    try:
        return await auth_service.verify_session(token, session)
    except HTTPException:
        raise
    except Exception:
        # любые сбои проверки отдаём как 401
        logger.exception("Error verifying token")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")


@router.put("/update-profile", response_model=UserResponse)
async def update_profile(data: ProfileUpdate,
                         token: Optional[str] = Depends(get_bearer_token),
                         session: AsyncSession = Depends(get_async_session)):
    try:
        return await auth_service.update_profile(token, data, session)
    except HTTPException:
        raise
    except Exception:
        logger.exception("Error updating profile")
        raise _internal_error("Failed to update profile")


@router.put("/change-password", response_model=MessageResponse)
async def change_password(data: PasswordChange,
                          token: Optional[str] = Depends(get_bearer_token),
                          session: AsyncSession = Depends(get_async_session)):
    try:
        return await auth_service.change_password(token, data, session)
    except HTTPException:
        raise
    except Exception:
        logger.exception("Error changing password")
        raise _internal_error("Failed to change password")


@router.get("/stats/{user_id}", response_model=UserStats)
async def stats(user_id: int, session: AsyncSession = Depends(get_async_session)):
    try:
        return await stats_service.compute_stats(user_id, session)
    except Exception:
        logger.exception(f"Error fetching stats for user {user_id}")
        raise _internal_error("Failed to fetch stats")
