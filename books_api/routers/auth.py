"""Auth routes — register, login, password change and account deletion."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from books_api.auth.dependencies import get_current_user
from books_api.auth.jwt_handler import create_access_token
from books_api.auth.password import hash_password, verify_password
from books_api.config import get_settings
from books_api.database import get_db
from books_api.models.user import User
from books_api.schemas.user import (
    AccountDeletedResponse,
    MessageResponse,
    PasswordChange,
    TokenResponse,
    UserLogin,
    UserRegister,
    UserResponse,
)

logger = structlog.get_logger()
router = APIRouter(prefix="/auth", tags=["Authentication"])

INVALID_CREDENTIALS = (
    "The supplied account id from the JWT does not exist or the supplied password does not match"
)


async def _current_account(db: AsyncSession, user_id: int) -> User:
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if not user:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="The supplied account id from the JWT does not exist",
        )
    return user


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def register(data: UserRegister, db: AsyncSession = Depends(get_db)):
    """Register a new user and return an access token."""
    result = await db.execute(select(User).where(User.email == data.email))
    if result.scalar_one_or_none():
        raise HTTPException(status_code=409, detail="Email already registered")

    result = await db.execute(select(User).where(User.username == data.username))
    if result.scalar_one_or_none():
        raise HTTPException(status_code=409, detail="Username already taken")

    salted_hash, salt = hash_password(data.password)
    user = User(
        email=data.email,
        username=data.username,
        salted_hash=salted_hash,
        salt=salt,
    )
    db.add(user)
    await db.flush()

    logger.info("user_registered", user_id=user.id, username=user.username)

    return TokenResponse(access_token=create_access_token(user.id))


@router.post("/login", response_model=TokenResponse)
async def login(data: UserLogin, db: AsyncSession = Depends(get_db)):
    """Authenticate user and return an access token."""
    result = await db.execute(select(User).where(User.email == data.email))
    user = result.scalar_one_or_none()

    if not user or not verify_password(data.password, user.salted_hash, user.salt):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
        )

    if not user.is_active:
        raise HTTPException(status_code=403, detail="Account is deactivated")

    logger.info("user_login", user_id=user.id)

    return TokenResponse(access_token=create_access_token(user.id))


@router.patch("/password", response_model=MessageResponse)
async def change_password(
    data: PasswordChange,
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user),
):
    """Re-salt and store a new password after checking the old one."""
    min_length = get_settings().password_min_length
    if len(data.new_password) < min_length:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Password needs to be {min_length} or more characters",
        )

    user = await _current_account(db, current_user["user_id"])
    if not verify_password(data.old_password, user.salted_hash, user.salt):
        logger.warning("password_change_rejected", user_id=user.id)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=INVALID_CREDENTIALS)

    user.salted_hash, user.salt = hash_password(data.new_password)
    await db.flush()

    logger.info("password_changed", user_id=user.id)
    return MessageResponse(message="Password changed successfully")


@router.delete("/account", response_model=AccountDeletedResponse)
async def delete_account(
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user),
):
    """Delete the signed-in user's account and return its details."""
    user = await _current_account(db, current_user["user_id"])
    account = UserResponse.model_validate(user)
    await db.delete(user)
    await db.flush()

    logger.info("account_deleted", user_id=account.id)
    return AccountDeletedResponse(message="User account deleted successfully.", account=account)
