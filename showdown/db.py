from __future__ import annotations
from typing import AsyncGenerator
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.orm import DeclarativeBase
from showdown.config import settings

class Base(DeclarativeBase):
    pass

def _connect_args(url: str) -> dict:
    # Per-statement timeout so a stalled store surfaces as a retryable failure
    if url.startswith("postgresql+asyncpg"):
        return {"server_settings": {"statement_timeout": str(settings.db_statement_timeout_ms)}}
    return {}

engine = create_async_engine(
    settings.database_url, future=True, echo=False, connect_args=_connect_args(settings.database_url)
)
SessionLocal = async_sessionmaker(engine, expire_on_commit=False)

async def get_session() -> AsyncGenerator[AsyncSession, None]:
    async with SessionLocal() as session:
        yield session
