from __future__ import annotations
from uuid import UUID
from fastapi import Depends, HTTPException
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jwt import PyJWTError
from sqlalchemy.ext.asyncio import AsyncSession
from showdown.db import get_session
from showdown.errors import PermissionDenied
from showdown.security import decode_token
from showdown.models.user import User
from showdown.services.roles import has_role, ADMIN

security = HTTPBearer()

async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    session: AsyncSession = Depends(get_session)
) -> User:
    token = credentials.credentials
    try:
        data = decode_token(token)
    except PyJWTError:
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    if data.get("type") != "access":
        raise HTTPException(status_code=401, detail="Wrong token type")
    try:
        user_id = UUID(str(data.get("sub")))
    except ValueError:
        raise HTTPException(status_code=401, detail="Invalid token")
    user = await session.get(User, user_id)
    if not user:
        raise HTTPException(status_code=401, detail="User not found")
    return user

async def require_admin(
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> User:
    if not await has_role(session, user.id, ADMIN):
        e = PermissionDenied()
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    return user

def ensure_self(user: User, user_id: UUID) -> None:
    """Callers act only as themselves."""
    if user.id != user_id:
        raise HTTPException(status_code=403, detail="You can only act as yourself")
