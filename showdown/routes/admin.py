from __future__ import annotations
from uuid import UUID
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from showdown.auth_deps import require_admin
from showdown.db import get_session
from showdown.errors import SubmissionNotFound
from showdown.schemas.submission import SubmissionAdminView
from showdown.services.notifications import notify_winner
from showdown.services.submissions import admin_listing
from showdown.services.winners import select_winner

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/submissions", response_model=list[SubmissionAdminView])
async def list_all_submissions(session: AsyncSession = Depends(get_session), admin=Depends(require_admin)):
    rows = await admin_listing(session)
    return [
        SubmissionAdminView.model_validate(s).model_copy(update={"username": uname})
        for (s, uname) in rows
    ]


@router.post("/winners/{submission_id}", response_model=SubmissionAdminView)
async def promote_winner(
    submission_id: UUID,
    session: AsyncSession = Depends(get_session),
    admin=Depends(require_admin),
):
    """Manual override: mark a submission as its week's winner. Terminal."""
    try:
        s, newly = await select_winner(session, submission_id)
    except SubmissionNotFound as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    await session.commit()
    if newly:
        await notify_winner(s)
    return SubmissionAdminView.model_validate(s)
