from __future__ import annotations
from uuid import UUID
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from showdown.auth_deps import get_current_user, ensure_self
from showdown.db import get_session
from showdown.errors import ShowdownError
from showdown.models.submission import Submission
from showdown.models.user import User
from showdown.schemas.submission import SubmissionPublic, VotingBatch
from showdown.schemas.vote import VoteCreate, VoteResult
from showdown.services.exposure import voting_batch
from showdown.services.notifications import notify_qualified
from showdown.services.votes import cast_vote

router = APIRouter(prefix="/voting", tags=["voting"])


@router.get("/batch/{voter_id}", response_model=VotingBatch)
async def get_voting_batch(
    voter_id: UUID,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
):
    ensure_self(user, voter_id)
    entries = await voting_batch(session, voter_id)
    await session.commit()
    return VotingBatch(entries=[SubmissionPublic.model_validate(s) for s in entries])


@router.post("/vote", response_model=VoteResult)
async def post_vote(
    payload: VoteCreate,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
):
    ensure_self(user, payload.voter_id)
    try:
        recorded, progress = await cast_vote(session, payload.voter_id, payload.submission_id, payload.value)
    except ShowdownError as e:
        await session.rollback()
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    await session.commit()

    for submission_id in progress.flipped:
        flipped = await session.get(Submission, submission_id)
        if flipped:
            await notify_qualified(flipped)

    if progress.qualified:
        message = "YOUR ENTRY IS NOW QUALIFIED TO WIN!"
    elif recorded:
        message = "Vote recorded"
    else:
        message = "Already voted"
    return VoteResult(
        recorded=recorded,
        message=message,
        votes_completed=progress.votes_completed,
        votes_required=progress.votes_required,
        qualified=progress.qualified,
    )
