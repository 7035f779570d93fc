from __future__ import annotations
from uuid import UUID
from sqlalchemy import select, exists
from sqlalchemy.ext.asyncio import AsyncSession
from showdown.models.user import UserRole

ADMIN = "admin"


async def has_role(session: AsyncSession, user_id: UUID, role: str) -> bool:
    # Queried on every privileged call; never cached
    return bool(await session.scalar(
        select(exists().where(UserRole.user_id == user_id, UserRole.role == role))
    ))


async def grant_role(session: AsyncSession, user_id: UUID, role: str) -> bool:
    """Idempotent. Returns True if the role was newly granted."""
    if await has_role(session, user_id, role):
        return False
    session.add(UserRole(user_id=user_id, role=role))
    await session.flush()
    return True
