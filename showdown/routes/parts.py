from __future__ import annotations
from uuid import UUID
from fastapi import APIRouter, Depends, HTTPException, UploadFile, File, Form
from sqlalchemy.ext.asyncio import AsyncSession

from showdown.auth_deps import get_current_user
from showdown.config import settings
from showdown.db import get_session
from showdown.errors import ShowdownError, StorageUnavailable
from showdown.models.submission import QUALIFIED
from showdown.models.user import User
from showdown.schemas.submission import SubmissionOwnerView, SubmissionPublic, SubmissionStatusResponse
from showdown.services.notifications import notify_submission_received, notify_qualified
from showdown.services.qualification import votes_cast_by
from showdown.services.submissions import PartForm, create_submission, submissions_of, latest_submission, gallery

router = APIRouter(prefix="/parts", tags=["parts"])


@router.post("", response_model=SubmissionOwnerView, status_code=201)
async def upload_part(
    part_name: str | None = Form(default=None),
    part_type: str | None = Form(default=None),
    car_model: str | None = Form(default=None),
    description: str | None = Form(default=None),
    user_name: str | None = Form(default=None),
    email: str | None = Form(default=None),
    file: UploadFile | None = File(default=None, description=".glb or .gltf model"),
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
):
    if file is None:
        raise HTTPException(status_code=400, detail="No file uploaded")
    data = await file.read()
    form = PartForm(
        part_name=part_name, part_type=part_type, car_model=car_model,
        description=description, user_name=user_name, email=email,
    )
    try:
        s = await create_submission(session, user, form, file.filename or "", data)
    except StorageUnavailable:
        raise
    except ShowdownError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    finally:
        await file.close()
    await session.commit()
    await notify_submission_received(s)
    if s.status == QUALIFIED:
        await notify_qualified(s)
    return SubmissionOwnerView.model_validate(s)


@router.get("/mine", response_model=list[SubmissionOwnerView])
async def my_submissions(session: AsyncSession = Depends(get_session), user: User = Depends(get_current_user)):
    return [SubmissionOwnerView.model_validate(s) for s in await submissions_of(session, user.id)]


@router.get("/gallery", response_model=list[SubmissionPublic])
async def list_gallery(session: AsyncSession = Depends(get_session)):
    return [SubmissionPublic.model_validate(s) for s in await gallery(session)]


@router.get("/status/{user_id}", response_model=SubmissionStatusResponse)
async def submission_status(
    user_id: UUID,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
):
    """Latest submission of `user_id` plus the live count of votes they have cast."""
    s = await latest_submission(session, user_id)
    return SubmissionStatusResponse(
        submission=SubmissionOwnerView.model_validate(s) if s else None,
        votes_completed=await votes_cast_by(session, user_id),
        votes_required=settings.votes_required,
    )
