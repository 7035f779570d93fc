from __future__ import annotations
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from showdown.config import settings
from showdown.db import get_session
from showdown.schemas.competition import CurrentWeek, CompetitionStats
from showdown.services.clock import current_week, competition_status
from showdown.services.submissions import competition_counts

router = APIRouter(prefix="/competition", tags=["competition"])


@router.get("/week", response_model=CurrentWeek)
async def get_current_week():
    week = current_week()
    return CurrentWeek(
        week=week,
        start_date=settings.competition_start_date,
        total_weeks=settings.competition_weeks,
        status=competition_status(week),
    )


@router.get("/stats", response_model=CompetitionStats)
async def get_stats(session: AsyncSession = Depends(get_session)):
    week = current_week()
    counts = await competition_counts(session, week)
    return CompetitionStats(current_week=week, competition_status=competition_status(week), **counts)
