import logging
from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import HTTPException, status
from sqlalchemy import select, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models import User
from app.models.user import UserSignup, UserLogin, ProfileUpdate, PasswordChange
from app.models.security import (
    InvalidToken,
    create_access_token,
    get_password_hash,
    verify_access_token,
    verify_password,
)

logger = logging.getLogger("auth_service")

MIN_PASSWORD_LENGTH = 6


def public_user(user: User) -> Dict[str, Any]:
    return {"id": user.id, "username": user.username, "email": user.email}


async def get_user_by_id(session: AsyncSession, user_id: int) -> User | None:
    result = await session.execute(select(User).filter(User.id == user_id))
    return result.scalars().first()


async def get_user_by_email(session: AsyncSession, email: str) -> User | None:
    result = await session.execute(select(User).filter(User.email == email))
    return result.scalars().first()


async def get_user_by_username(session: AsyncSession, username: str) -> User | None:
    result = await session.execute(select(User).filter(User.username == username))
    return result.scalars().first()


async def find_conflicting_user(session: AsyncSession, email: str, username: str) -> User | None:
    """Ищет пользователя с таким же email или username."""
    result = await session.execute(
        select(User).filter(or_(User.email == email, User.username == username))
    )
    return result.scalars().first()


async def _taken_by_other(session: AsyncSession, column, value: str, user_id: int) -> bool:
    result = await session.execute(select(User.id).filter(column == value, User.id != user_id))
    return result.first() is not None


async def authenticate(token: Optional[str], session: AsyncSession) -> User:
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="No token provided")
    try:
        claim = verify_access_token(token)
    except InvalidToken as e:
        logger.warning(f"Rejected session token: {e}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

    db_user = await get_user_by_id(session, claim.user_id)
    if not db_user:
        logger.warning(f"Token for missing user_id={claim.user_id}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    return db_user


async def signup_user(data: UserSignup, session: AsyncSession) -> Dict[str, Any]:
    # Быстрая проверка; окончательно уникальность решают индексы в БД
    existing_user = await find_conflicting_user(session, data.email, data.username)
    if existing_user:
        logger.warning(f"Signup conflict for email={data.email} username={data.username}")
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email or username already in use")

    now = datetime.utcnow()
    db_user = User(
        username=data.username,
        email=data.email,
        password_hash=get_password_hash(data.password),
        created_at=now,
        updated_at=now,
    )
    session.add(db_user)
    try:
        await session.commit()
        await session.refresh(db_user)
    except IntegrityError:
        await session.rollback()
        logger.warning(f"Signup lost uniqueness race for email={data.email}")
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email or username already in use")

    logger.info(f"User {db_user.id} signed up")
    return {"token": create_access_token(db_user), "user": public_user(db_user)}


async def login_user(data: UserLogin, session: AsyncSession) -> Dict[str, Any]:
    db_user = await get_user_by_email(session, data.email)
    if not db_user or not verify_password(data.password, db_user.password_hash):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid email or password")

    logger.info(f"User {db_user.id} logged in")
    return {"token": create_access_token(db_user), "user": public_user(db_user)}


async def verify_session(token: Optional[str], session: AsyncSession) -> Dict[str, Any]:
    db_user = await authenticate(token, session)
    return {"user": public_user(db_user)}


async def update_profile(token: Optional[str], data: ProfileUpdate, session: AsyncSession) -> Dict[str, Any]:
    db_user = await authenticate(token, session)

    if await _taken_by_other(session, User.email, data.email, db_user.id):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email is already in use")
    if await _taken_by_other(session, User.username, data.username, db_user.id):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Username is already in use")

    user_id = db_user.id
    db_user.username = data.username
    db_user.email = data.email
    db_user.updated_at = datetime.utcnow()
    try:
        await session.commit()
        await session.refresh(db_user)
    except IntegrityError:
        await session.rollback()
        logger.warning(f"Profile update for user {user_id} lost uniqueness race")
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email or username already in use")

    logger.info(f"User {db_user.id} updated profile")
    return {"user": public_user(db_user)}


async def change_password(token: Optional[str], data: PasswordChange, session: AsyncSession) -> Dict[str, str]:
    db_user = await authenticate(token, session)

    if len(data.newPassword) < MIN_PASSWORD_LENGTH:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
        )

    if not verify_password(data.currentPassword, db_user.password_hash):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Current password is incorrect")

    db_user.password_hash = get_password_hash(data.newPassword)
    db_user.updated_at = datetime.utcnow()
    await session.commit()

    # Старые токены остаются действительными до истечения срока
    logger.info(f"User {db_user.id} changed password")
    return {"message": "Password changed successfully"}
