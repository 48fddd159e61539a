from datetime import datetime, timedelta
from typing import Optional
from uuid import uuid4

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, EmailStr, Field
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from socialnet.core.config import settings
from socialnet.core.errors import AuthenticationError, ValidationError
from socialnet.core.logging import get_logger
from socialnet.core.security import generate_reset_token, hash_token, verify_password
from socialnet.core.token import create_access_token, create_refresh_token, verify_token
from socialnet.infra.db import get_db
from socialnet.models.token import AuthToken, PasswordResetToken
from socialnet.models.user import User
from socialnet.services.identity import IdentityService
from socialnet.services.mail import send_password_reset

router = APIRouter(tags=["auth"])
logger = get_logger(__name__)

USERNAME_PATTERN = r"^[A-Za-z0-9_.]+$"

# ============ Schemas ============

class SignupRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=128)
    username: str = Field(..., min_length=3, max_length=64, pattern=USERNAME_PATTERN)
    email: EmailStr
    password: str = Field(..., min_length=8)
    avatar: Optional[str] = Field(None, max_length=512)
    bio: Optional[str] = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class RefreshRequest(BaseModel):
    refresh_token: str


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    token: str
    new_password: str = Field(..., min_length=8)


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    user_id: str


class MessageResponse(BaseModel):
    message: str


FORGOT_PASSWORD_MESSAGE = "If an account exists for that email, a reset link has been sent."

# ============ Helpers ============

async def _issue_tokens(db: AsyncSession, user_id: str) -> TokenResponse:
    access_token = create_access_token(data={"sub": user_id})
    refresh_token = create_refresh_token(data={"sub": user_id, "jti": str(uuid4())})

    db.add(AuthToken(
        id=str(uuid4()),
        user_id=user_id,
        token_hash=hash_token(refresh_token),
        issued_at=datetime.utcnow(),
        expires_at=datetime.utcnow() + timedelta(days=settings.refresh_token_expire_days),
    ))
    await db.commit()

    return TokenResponse(
        access_token=access_token,
        refresh_token=refresh_token,
        user_id=user_id,
    )

# ============ Endpoints ============

@router.post("/signup", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def signup(
    data: SignupRequest,
    db: AsyncSession = Depends(get_db)
):
    """
    Register a new account and log it in
    """
    user = await IdentityService(db).create_user(
        email=data.email,
        username=data.username,
        name=data.name,
        password=data.password,
        avatar=data.avatar,
        bio=data.bio,
    )
    return await _issue_tokens(db, user.id)


@router.post("/login", response_model=TokenResponse)
async def login(
    data: LoginRequest,
    db: AsyncSession = Depends(get_db)
):
    user = await IdentityService(db).get_by_email(data.email)

    if not user or not verify_password(data.password, user.hashed_password):
        raise AuthenticationError("Invalid email or password")
    if user.status != "active":
        raise AuthenticationError("Account is disabled")

    logger.info("auth.login", user_id=user.id)
    return await _issue_tokens(db, user.id)


@router.post("/token/refresh", response_model=TokenResponse)
async def refresh_tokens(
    data: RefreshRequest,
    db: AsyncSession = Depends(get_db)
):
    """
    Rotate a refresh token: the presented one is revoked, a new pair is issued
    """
    user_id = verify_token(data.refresh_token, token_type="refresh")
    if not user_id:
        raise AuthenticationError("Invalid refresh token")

    stmt = select(AuthToken).where(AuthToken.token_hash == hash_token(data.refresh_token))
    stored = (await db.execute(stmt)).scalar_one_or_none()
    if not stored or stored.revoked_at is not None or stored.expires_at < datetime.utcnow():
        raise AuthenticationError("Invalid refresh token")

    stored.revoked_at = datetime.utcnow()
    return await _issue_tokens(db, user_id)


@router.post("/password/forgot", response_model=MessageResponse)
async def forgot_password(
    data: ForgotPasswordRequest,
    db: AsyncSession = Depends(get_db)
):
    """
    Start a password reset. The response never reveals whether the email exists.
    """
    user = await IdentityService(db).get_by_email(data.email)
    if user:
        token = generate_reset_token()
        db.add(PasswordResetToken(
            id=str(uuid4()),
            user_id=user.id,
            token_hash=hash_token(token),
            expires_at=datetime.utcnow() + timedelta(minutes=settings.password_reset_expire_minutes),
        ))
        await db.commit()
        await send_password_reset(user, token)

    return MessageResponse(message=FORGOT_PASSWORD_MESSAGE)


@router.post("/password/reset", response_model=MessageResponse)
async def reset_password(
    data: ResetPasswordRequest,
    db: AsyncSession = Depends(get_db)
):
    stmt = select(PasswordResetToken).where(PasswordResetToken.token_hash == hash_token(data.token))
    reset = (await db.execute(stmt)).scalar_one_or_none()
    if not reset or reset.used_at is not None or reset.expires_at < datetime.utcnow():
        raise ValidationError("Reset token is invalid or has expired")

    user = await db.get(User, reset.user_id)
    now = datetime.utcnow()
    reset.used_at = now
    # Sessions opened before the reset must not survive it
    await db.execute(
        update(AuthToken)
        .where(AuthToken.user_id == user.id, AuthToken.revoked_at.is_(None))
        .values(revoked_at=now)
    )
    # set_password commits the token usage and revocations together with the new hash
    await IdentityService(db).set_password(user, data.new_password)

    logger.info("auth.password_reset", user_id=user.id)
    return MessageResponse(message="Password has been reset.")
