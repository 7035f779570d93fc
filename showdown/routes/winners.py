from __future__ import annotations
from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from showdown.db import get_session
from showdown.schemas.submission import SubmissionPublic, WinnerPublic, WinnersResponse
from showdown.services.winners import rank_winners, all_winners

router = APIRouter(prefix="/winners", tags=["winners"])


@router.get("/week/{week_number}", response_model=WinnersResponse)
async def get_winners(week_number: int = Path(..., ge=0), session: AsyncSession = Depends(get_session)):
    board = await rank_winners(session, week_number)
    return WinnersResponse(
        week_number=board.week_number,
        minimum_votes=board.minimum_votes,
        total_voters=board.total_voters,
        winners=[SubmissionPublic.model_validate(s) for s in board.winners],
    )


@router.get("", response_model=list[WinnerPublic])
async def weekly_winners(session: AsyncSession = Depends(get_session)):
    return [WinnerPublic.model_validate(s) for s in await all_winners(session)]
