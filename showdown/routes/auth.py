from __future__ import annotations
from fastapi import APIRouter, Depends, HTTPException, Header
from jwt import PyJWTError
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from showdown.auth_deps import get_current_user
from showdown.db import get_session
from showdown.models.user import User
from showdown.schemas.auth import RegisterRequest, LoginRequest, UserPublic, TokenPair
from showdown.security import hash_password, verify_password, make_access_token, make_refresh_token, decode_token
from showdown.services.roles import has_role, ADMIN

router = APIRouter(prefix="/auth", tags=["auth"])

async def _public(session: AsyncSession, user: User) -> UserPublic:
    return UserPublic(
        id=user.id, email=user.email, username=user.username,
        is_admin=await has_role(session, user.id, ADMIN), created_at=user.created_at,
    )

@router.post("/register", status_code=201, response_model=UserPublic)
async def register(payload: RegisterRequest, session: AsyncSession = Depends(get_session)):
    email = payload.email.lower()
    username = payload.username.lower()
    if await session.scalar(select(User).where(User.email == email)):
        raise HTTPException(status_code=409, detail="Email already registered")
    if await session.scalar(select(User).where(User.username == username)):
        raise HTTPException(status_code=409, detail="Username already taken")
    user = User(email=email, username=username, password_hash=hash_password(payload.password))
    session.add(user)
    try:
        await session.commit()
    except IntegrityError:
        # lost a race with a concurrent registration
        await session.rollback()
        raise HTTPException(status_code=409, detail="Email or username already registered")
    await session.refresh(user)
    return await _public(session, user)

@router.post("/login", response_model=TokenPair)
async def login(payload: LoginRequest, session: AsyncSession = Depends(get_session)):
    user = await session.scalar(select(User).where(User.email == payload.email.lower()))
    if not user or not verify_password(payload.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid credentials")
    return TokenPair(access=make_access_token(str(user.id)), refresh=make_refresh_token(str(user.id)), user_id=user.id)

@router.post("/refresh", response_model=TokenPair)
async def refresh(authorization: str | None = Header(None)):
    if not authorization or not authorization.lower().startswith("bearer "):
        raise HTTPException(status_code=401, detail="Missing refresh token")
    token = authorization.split(" ", 1)[1]
    try:
        data = decode_token(token)
    except PyJWTError:
        raise HTTPException(status_code=401, detail="Invalid token")
    if data.get("type") != "refresh":
        raise HTTPException(status_code=401, detail="Wrong token type")
    sub = data.get("sub")
    return TokenPair(access=make_access_token(sub), refresh=make_refresh_token(sub))

@router.get("/me", response_model=UserPublic)
async def me(user: User = Depends(get_current_user), session: AsyncSession = Depends(get_session)):
    return await _public(session, user)
